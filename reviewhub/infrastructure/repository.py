"""Assignment Repository — SQL for teams, users, memberships, pull requests, reviewers.

Invariants:
    - Bound to one AsyncSession; never commits, never opens its own transaction
    - Returns frozen core entities (core/domain_types.py), never ORM instances
    - Conditional mutations report zero affected rows as a typed ReviewHubError
    - Unique violations with domain meaning become TeamExists / PullRequestExists

Design Decisions:
    - Upserts use the dialect's INSERT .. ON CONFLICT (PostgreSQL in production,
      SQLite in tests); both accept the same on_conflict_do_update call
    - Random member selection fetches the eligible set and delegates the draw to
      core.enforce_assignment.pick_reviewers, so a seeded Random is reproducible
      on any backend (ORDER BY random() is not)
"""

import logging
import random
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from sqlalchemy import (
    select, update, delete, exists, and_, func, insert as sa_insert,
)
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reviewhub.core.domain_types import (
    AffiliatedWith, PullRequest, PullRequestId, PullRequestShort,
    PullRequestStatus, Team, TeamId, TeamMember, Unaffiliated, User, UserId,
)
from reviewhub.core.enforce_assignment import pick_reviewers
from reviewhub.core.errors import (
    DatabaseError, NoCandidateError, PullRequestExistsError,
    PullRequestMergedError, PullRequestNotFoundError, ReviewerNotAssignedError,
    TeamExistsError, TeamNotFoundError, UserNotFoundError,
)
from reviewhub.models.pr_reviewer import PullRequestReviewer
from reviewhub.models.pull_request import PullRequest as PullRequestModel
from reviewhub.models.team import Team as TeamModel
from reviewhub.models.team_membership import TeamMembership
from reviewhub.models.user import User as UserModel

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AssignmentRepository:
    """Storage operations over a single session/transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert(self, model):
        """INSERT construct that supports ON CONFLICT for the bound dialect."""
        dialect = self.db.bind.dialect.name
        if dialect == "postgresql":
            return postgresql.insert(model)
        if dialect == "sqlite":
            return sqlite.insert(model)
        raise DatabaseError(f"upsert not supported on {dialect}", "upsert")

    # ─── Teams ───────────────────────────────────────────────────

    async def get_team_id(self, team_name: str) -> TeamId | None:
        result = await self.db.execute(
            select(TeamModel.team_id).where(TeamModel.team_name == team_name),
        )
        team_id = result.scalar_one_or_none()
        return TeamId(team_id) if team_id is not None else None

    async def insert_team(self, team_name: str) -> TeamId:
        """Insert a new team; a concurrent insert of the same name raises TeamExists."""
        try:
            result = await self.db.execute(
                sa_insert(TeamModel)
                .values(team_name=team_name, created_at=_utcnow())
                .returning(TeamModel.team_id),
            )
        except IntegrityError:
            raise TeamExistsError(team_name)
        return TeamId(result.scalar_one())

    async def get_team(self, team_name: str) -> Team:
        team_id = await self.get_team_id(team_name)
        if team_id is None:
            raise TeamNotFoundError(team_name)
        members = await self.list_team_members(team_id)
        return Team(id=team_id, name=team_name, members=members)

    async def list_team_members(self, team_id: TeamId) -> tuple[TeamMember, ...]:
        result = await self.db.execute(
            select(UserModel.user_id, UserModel.username, UserModel.is_active)
            .join(TeamMembership, TeamMembership.user_id == UserModel.user_id)
            .where(TeamMembership.team_id == team_id)
            .order_by(UserModel.username, UserModel.user_id),
        )
        return tuple(
            TeamMember(
                user_id=UserId(row.user_id),
                username=row.username,
                is_active=row.is_active,
            )
            for row in result
        )

    async def list_random_active_team_members(
        self,
        team_id: TeamId,
        exclude: Iterable[str],
        limit: int,
        rng: random.Random,
    ) -> list[UserId]:
        """Up to `limit` active members of `team_id` outside `exclude`, in random order."""
        excluded = set(exclude)
        query = (
            select(UserModel.user_id)
            .join(TeamMembership, TeamMembership.user_id == UserModel.user_id)
            .where(TeamMembership.team_id == team_id)
            .where(UserModel.is_active.is_(True))
        )
        if excluded:
            query = query.where(UserModel.user_id.not_in(sorted(excluded)))
        result = await self.db.execute(query)
        return pick_reviewers(
            (UserId(user_id) for user_id in result.scalars()), limit, rng,
        )

    # ─── Users ───────────────────────────────────────────────────

    async def upsert_user(self, member: TeamMember) -> None:
        now = _utcnow()
        stmt = self._insert(UserModel).values(
            user_id=member.user_id,
            username=member.username,
            is_active=member.is_active,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserModel.user_id],
            set_={
                "username": stmt.excluded.username,
                "is_active": stmt.excluded.is_active,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await self.db.execute(stmt)

    async def upsert_membership(self, team_id: TeamId, user_id: str) -> None:
        """Point `user_id` at `team_id`, detaching it from any previous team."""
        stmt = self._insert(TeamMembership).values(
            team_id=team_id, user_id=user_id, joined_at=_utcnow(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[TeamMembership.user_id],
            set_={
                "team_id": stmt.excluded.team_id,
                "joined_at": stmt.excluded.joined_at,
            },
        )
        await self.db.execute(stmt)

    async def get_user(self, user_id: str) -> User:
        result = await self.db.execute(
            select(
                UserModel.user_id, UserModel.username, UserModel.is_active,
                TeamMembership.team_id, TeamModel.team_name,
            )
            .outerjoin(TeamMembership, TeamMembership.user_id == UserModel.user_id)
            .outerjoin(TeamModel, TeamModel.team_id == TeamMembership.team_id)
            .where(UserModel.user_id == user_id),
        )
        row = result.one_or_none()
        if row is None:
            raise UserNotFoundError(user_id)
        if row.team_id is None:
            affiliation = Unaffiliated()
        else:
            affiliation = AffiliatedWith(
                team_id=TeamId(row.team_id), team_name=row.team_name,
            )
        return User(
            id=UserId(row.user_id),
            username=row.username,
            is_active=row.is_active,
            affiliation=affiliation,
        )

    async def set_user_active(self, user_id: str, is_active: bool) -> None:
        result = await self.db.execute(
            update(UserModel)
            .where(UserModel.user_id == user_id)
            .values(is_active=is_active, updated_at=_utcnow())
            .execution_options(synchronize_session=False),
        )
        if result.rowcount == 0:
            raise UserNotFoundError(user_id)

    # ─── Pull requests ───────────────────────────────────────────

    async def insert_pull_request(
        self, pull_request_id: str, name: str, author_id: str,
    ) -> None:
        try:
            await self.db.execute(
                sa_insert(PullRequestModel).values(
                    pull_request_id=pull_request_id,
                    pull_request_name=name,
                    author_id=author_id,
                    status=PullRequestStatus.OPEN.value,
                    created_at=_utcnow(),
                ),
            )
        except IntegrityError:
            raise PullRequestExistsError(pull_request_id)

    async def get_pull_request_status(
        self, pull_request_id: str,
    ) -> PullRequestStatus | None:
        result = await self.db.execute(
            select(PullRequestModel.status)
            .where(PullRequestModel.pull_request_id == pull_request_id),
        )
        status = result.scalar_one_or_none()
        return PullRequestStatus(status) if status is not None else None

    async def get_pull_request(self, pull_request_id: str) -> PullRequest:
        result = await self.db.execute(
            select(PullRequestModel)
            .where(PullRequestModel.pull_request_id == pull_request_id),
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise PullRequestNotFoundError(pull_request_id)
        reviewers = await self.list_reviewers(pull_request_id)
        return PullRequest(
            id=PullRequestId(row.pull_request_id),
            name=row.pull_request_name,
            author_id=UserId(row.author_id),
            status=PullRequestStatus(row.status),
            created_at=row.created_at,
            merged_at=row.merged_at,
            reviewers=reviewers,
        )

    async def list_reviewers(self, pull_request_id: str) -> tuple[UserId, ...]:
        result = await self.db.execute(
            select(PullRequestReviewer.reviewer_id)
            .where(PullRequestReviewer.pull_request_id == pull_request_id)
            .order_by(PullRequestReviewer.assigned_at, PullRequestReviewer.id),
        )
        return tuple(UserId(reviewer_id) for reviewer_id in result.scalars())

    async def add_reviewers(
        self, pull_request_id: str, reviewer_ids: Sequence[str],
    ) -> None:
        for reviewer_id in reviewer_ids:
            await self._insert_reviewer(pull_request_id, reviewer_id)

    async def _insert_reviewer(self, pull_request_id: str, reviewer_id: str) -> None:
        await self.db.execute(
            sa_insert(PullRequestReviewer).values(
                pull_request_id=pull_request_id,
                reviewer_id=reviewer_id,
                assigned_at=_utcnow(),
            ),
        )

    async def replace_reviewer(
        self, pull_request_id: str, old_reviewer_id: str, new_reviewer_id: str,
    ) -> None:
        """Swap one assignment for another; both rows change or neither does.

        The delete only matches while the pull request is still OPEN and the
        old reviewer is still assigned. Zero deleted rows is re-diagnosed from
        the current status so a concurrent merge and a concurrent reassignment
        surface as different errors.
        """
        still_open = exists().where(and_(
            PullRequestModel.pull_request_id == pull_request_id,
            PullRequestModel.status == PullRequestStatus.OPEN.value,
        ))
        result = await self.db.execute(
            delete(PullRequestReviewer)
            .where(PullRequestReviewer.pull_request_id == pull_request_id)
            .where(PullRequestReviewer.reviewer_id == old_reviewer_id)
            .where(still_open)
            .execution_options(synchronize_session=False),
        )
        if result.rowcount == 0:
            status = await self.get_pull_request_status(pull_request_id)
            if status is None:
                raise PullRequestNotFoundError(pull_request_id)
            if status == PullRequestStatus.MERGED:
                raise PullRequestMergedError(pull_request_id)
            raise ReviewerNotAssignedError(pull_request_id, old_reviewer_id)

        try:
            await self._insert_reviewer(pull_request_id, new_reviewer_id)
        except IntegrityError:
            # a concurrent reassignment took the same replacement first
            logger.warning(
                f"Replacement {new_reviewer_id} already assigned to {pull_request_id}",
                extra={"pull_request_id": pull_request_id},
            )
            raise NoCandidateError(pull_request_id, old_reviewer_id)

    async def mark_merged(self, pull_request_id: str, merged_at: datetime) -> None:
        """Set MERGED; an existing merged_at is kept so the first merge time wins."""
        result = await self.db.execute(
            update(PullRequestModel)
            .where(PullRequestModel.pull_request_id == pull_request_id)
            .values(
                status=PullRequestStatus.MERGED.value,
                merged_at=func.coalesce(PullRequestModel.merged_at, merged_at),
            )
            .execution_options(synchronize_session=False),
        )
        if result.rowcount == 0:
            raise PullRequestNotFoundError(pull_request_id)

    async def list_pull_requests_for_reviewer(
        self, user_id: str,
    ) -> list[PullRequestShort]:
        result = await self.db.execute(
            select(
                PullRequestModel.pull_request_id,
                PullRequestModel.pull_request_name,
                PullRequestModel.author_id,
                PullRequestModel.status,
            )
            .join(
                PullRequestReviewer,
                PullRequestReviewer.pull_request_id == PullRequestModel.pull_request_id,
            )
            .where(PullRequestReviewer.reviewer_id == user_id)
            .order_by(
                PullRequestModel.created_at.desc(),
                PullRequestModel.pull_request_id.desc(),
            ),
        )
        return [
            PullRequestShort(
                id=PullRequestId(row.pull_request_id),
                name=row.pull_request_name,
                author_id=UserId(row.author_id),
                status=PullRequestStatus(row.status),
            )
            for row in result
        ]
