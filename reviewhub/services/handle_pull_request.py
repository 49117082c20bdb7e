"""Pull Request Handlers — create, reassign, merge, reviewer inbox.

Invariants:
    - create: author lookup, insert, reviewer draw and assignment share one transaction
    - reassign: every precondition is checked inside the transaction that mutates,
      and the swap is keyed on the delete affecting a row
    - merge: repeat merges return the stored state; merged_at is written once
    - No retries: a failed transaction surfaces its error to the caller

Design Decisions:
    - rng and clock are injected so tests can fix the reviewer draw and merge time
"""

import logging
import random
from collections.abc import Callable
from datetime import datetime, timezone

from reviewhub.core.domain_types import PullRequest, PullRequestShort, UserId
from reviewhub.core.enforce_assignment import (
    REVIEWERS_PER_PULL_REQUEST, author_team, check_reassignable,
    new_pull_request_exclusions, reassignment_exclusions, replacement_team,
)
from reviewhub.core.errors import NoCandidateError
from reviewhub.infrastructure.database import DatabaseSessionManager
from reviewhub.infrastructure.repository import AssignmentRepository

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PullRequestHandlers:
    """Pull request lifecycle and reviewer assignment."""

    def __init__(
        self,
        db_manager: DatabaseSessionManager,
        rng: random.Random,
        clock: Callable[[], datetime] = utcnow,
        reviewers_per_pull_request: int = REVIEWERS_PER_PULL_REQUEST,
    ):
        self.db_manager = db_manager
        self.rng = rng
        self.clock = clock
        self.reviewers_per_pull_request = reviewers_per_pull_request

    async def create_pull_request(
        self, pull_request_id: str, name: str, author_id: str,
    ) -> PullRequest:
        """Open a pull request and assign up to N active teammates of the author."""
        async with self.db_manager.transaction() as tx:
            repo = AssignmentRepository(tx)
            author = await repo.get_user(author_id)
            team_id = author_team(author)
            await repo.insert_pull_request(pull_request_id, name, author_id)
            reviewers = await repo.list_random_active_team_members(
                team_id,
                new_pull_request_exclusions(author.id),
                self.reviewers_per_pull_request,
                self.rng,
            )
            await repo.add_reviewers(pull_request_id, reviewers)

        logger.info(
            f"Pull request {pull_request_id} opened by {author_id}",
            extra={"pull_request_id": pull_request_id, "reviewers": reviewers},
        )
        return await self.get_pull_request(pull_request_id)

    async def reassign_reviewer(
        self, pull_request_id: str, old_reviewer_id: str,
    ) -> tuple[PullRequest, UserId]:
        """Replace `old_reviewer_id` with a random eligible teammate.

        Returns the refreshed pull request and the replacement's id.
        """
        async with self.db_manager.transaction() as tx:
            repo = AssignmentRepository(tx)
            pr = await repo.get_pull_request(pull_request_id)
            check_reassignable(pr, old_reviewer_id)
            old_reviewer = await repo.get_user(old_reviewer_id)
            team_id = replacement_team(old_reviewer, pr.id)
            candidates = await repo.list_random_active_team_members(
                team_id, reassignment_exclusions(pr), 1, self.rng,
            )
            if not candidates:
                raise NoCandidateError(pr.id, old_reviewer_id)
            replacement = candidates[0]
            await repo.replace_reviewer(pr.id, old_reviewer_id, replacement)

        logger.info(
            f"Reviewer {old_reviewer_id} replaced by {replacement} "
            f"on {pull_request_id}",
            extra={
                "pull_request_id": pull_request_id,
                "user_id": old_reviewer_id,
                "replaced_by": replacement,
            },
        )
        return await self.get_pull_request(pull_request_id), replacement

    async def merge_pull_request(self, pull_request_id: str) -> PullRequest:
        """Mark MERGED; merging an already merged pull request is a no-op."""
        pr = await self.get_pull_request(pull_request_id)
        if pr.is_merged:
            return pr

        async with self.db_manager.transaction() as tx:
            await AssignmentRepository(tx).mark_merged(pull_request_id, self.clock())

        logger.info(
            f"Pull request {pull_request_id} merged",
            extra={"pull_request_id": pull_request_id},
        )
        return await self.get_pull_request(pull_request_id)

    async def list_reviewer_pull_requests(
        self, user_id: str,
    ) -> list[PullRequestShort]:
        async with self.db_manager.session() as db:
            return await AssignmentRepository(db).list_pull_requests_for_reviewer(
                user_id,
            )

    async def get_pull_request(self, pull_request_id: str) -> PullRequest:
        async with self.db_manager.session() as db:
            return await AssignmentRepository(db).get_pull_request(pull_request_id)
