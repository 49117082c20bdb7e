"""Team Handlers — create_team, get_team, set_user_activity.

Invariants:
    - create_team is idempotent on name: an existing team is reused, members re-applied
    - The team row and every member upsert commit together or not at all
    - Moving a user into a team detaches them from their previous team
    - Results are read back after commit (members ordered by username)
"""

import logging
from collections.abc import Sequence

from reviewhub.core.domain_types import Team, TeamMember, User
from reviewhub.infrastructure.database import DatabaseSessionManager
from reviewhub.infrastructure.repository import AssignmentRepository

logger = logging.getLogger(__name__)


class TeamHandlers:
    """Team and user upsert operations."""

    def __init__(self, db_manager: DatabaseSessionManager):
        self.db_manager = db_manager

    async def create_team(
        self, team_name: str, members: Sequence[TeamMember],
    ) -> Team:
        """Create `team_name` if needed and bind every listed member to it."""
        async with self.db_manager.transaction() as tx:
            repo = AssignmentRepository(tx)
            team_id = await repo.get_team_id(team_name)
            created = team_id is None
            if created:
                team_id = await repo.insert_team(team_name)
            for member in members:
                await repo.upsert_user(member)
                await repo.upsert_membership(team_id, member.user_id)

        logger.info(
            f"Team {team_name} {'created' if created else 'updated'} "
            f"with {len(members)} member(s)",
            extra={"team_name": team_name},
        )
        return await self.get_team(team_name)

    async def get_team(self, team_name: str) -> Team:
        async with self.db_manager.session() as db:
            return await AssignmentRepository(db).get_team(team_name)

    async def set_user_activity(self, user_id: str, is_active: bool) -> User:
        async with self.db_manager.transaction() as tx:
            await AssignmentRepository(tx).set_user_active(user_id, is_active)

        logger.info(
            f"User {user_id} is_active={is_active}", extra={"user_id": user_id},
        )
        async with self.db_manager.session() as db:
            return await AssignmentRepository(db).get_user(user_id)
