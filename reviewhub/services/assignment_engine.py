"""Assignment Engine — the single call surface used by the HTTP boundary.

Invariants:
    - Holds no mutable state besides the injected random source
    - Every method raises only ReviewHubError subclasses (DatabaseError for storage)

Design Decisions:
    - Thin facade over TeamHandlers and PullRequestHandlers so routes depend on one object
    - Built once per process in the lifespan (build_engine) and read from app.state
"""

import random
from collections.abc import Callable, Sequence
from datetime import datetime

from reviewhub.config import Settings
from reviewhub.core.domain_types import (
    PullRequest, PullRequestShort, Team, TeamMember, User, UserId,
)
from reviewhub.core.enforce_assignment import REVIEWERS_PER_PULL_REQUEST
from reviewhub.infrastructure.database import DatabaseSessionManager
from reviewhub.services.handle_pull_request import PullRequestHandlers, utcnow
from reviewhub.services.handle_team import TeamHandlers


class AssignmentEngine:
    """Team upserts, reviewer selection, and pull request state transitions."""

    def __init__(
        self,
        db_manager: DatabaseSessionManager,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utcnow,
        reviewers_per_pull_request: int = REVIEWERS_PER_PULL_REQUEST,
    ):
        self.db_manager = db_manager
        self.teams = TeamHandlers(db_manager)
        self.pull_requests = PullRequestHandlers(
            db_manager,
            rng or random.Random(),
            clock=clock,
            reviewers_per_pull_request=reviewers_per_pull_request,
        )

    async def create_team(
        self, team_name: str, members: Sequence[TeamMember],
    ) -> Team:
        return await self.teams.create_team(team_name, members)

    async def get_team(self, team_name: str) -> Team:
        return await self.teams.get_team(team_name)

    async def set_user_activity(self, user_id: str, is_active: bool) -> User:
        return await self.teams.set_user_activity(user_id, is_active)

    async def create_pull_request(
        self, pull_request_id: str, name: str, author_id: str,
    ) -> PullRequest:
        return await self.pull_requests.create_pull_request(
            pull_request_id, name, author_id,
        )

    async def reassign_reviewer(
        self, pull_request_id: str, old_reviewer_id: str,
    ) -> tuple[PullRequest, UserId]:
        return await self.pull_requests.reassign_reviewer(
            pull_request_id, old_reviewer_id,
        )

    async def merge_pull_request(self, pull_request_id: str) -> PullRequest:
        return await self.pull_requests.merge_pull_request(pull_request_id)

    async def list_reviewer_pull_requests(
        self, user_id: str,
    ) -> list[PullRequestShort]:
        return await self.pull_requests.list_reviewer_pull_requests(user_id)


def build_engine(
    db_manager: DatabaseSessionManager, settings: Settings,
) -> AssignmentEngine:
    return AssignmentEngine(
        db_manager,
        rng=random.Random(settings.reviewer_random_seed),
        reviewers_per_pull_request=settings.reviewers_per_pull_request,
    )
