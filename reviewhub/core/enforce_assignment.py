"""Assignment Rules — pure reviewer-selection and state-transition checks.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - Violations raise the matching ReviewHubError subclass; success returns a value
    - The author is in every exclusion set, so a pull request never reviews itself
    - Selection is uniform without replacement and never exceeds the candidate count

Design Decisions:
    - Randomness is a parameter (random.Random), seeded by the caller for tests
    - Candidates are sorted before sampling so a fixed seed yields a fixed pick
      regardless of the order rows came back from the database
"""

import random
from collections.abc import Iterable

from reviewhub.core.domain_types import (
    AffiliatedWith, PullRequest, TeamId, Unaffiliated, User, UserId,
)
from reviewhub.core.errors import (
    NoCandidateError, PullRequestMergedError, ReviewerNotAssignedError,
    TeamNotFoundError,
)

REVIEWERS_PER_PULL_REQUEST = 2


def pick_reviewers(
    candidates: Iterable[UserId], limit: int, rng: random.Random,
) -> list[UserId]:
    """Draw up to `limit` distinct candidates uniformly at random.

    Fewer candidates than `limit` is not an error: all of them are returned
    (in random order), including the empty list.
    """
    pool = sorted(set(candidates))
    if limit <= 0 or not pool:
        return []
    return rng.sample(pool, k=min(limit, len(pool)))


def author_team(author: User) -> TeamId:
    """Team that supplies reviewers for a new pull request."""
    match author.affiliation:
        case AffiliatedWith(team_id=team_id):
            return team_id
        case Unaffiliated():
            raise TeamNotFoundError(user_id=author.id)


def replacement_team(reviewer: User, pull_request_id: str) -> TeamId:
    """Team that supplies a replacement for `reviewer`.

    A reviewer without a team has nobody to hand over to.
    """
    match reviewer.affiliation:
        case AffiliatedWith(team_id=team_id):
            return team_id
        case Unaffiliated():
            raise NoCandidateError(pull_request_id, reviewer.id)


def check_reassignable(pr: PullRequest, old_reviewer_id: str) -> None:
    """Merged pull requests are frozen; only current reviewers can be replaced."""
    if pr.is_merged:
        raise PullRequestMergedError(pr.id)
    if old_reviewer_id not in pr.reviewers:
        raise ReviewerNotAssignedError(pr.id, old_reviewer_id)


def new_pull_request_exclusions(author_id: UserId) -> frozenset[UserId]:
    return frozenset({author_id})


def reassignment_exclusions(pr: PullRequest) -> frozenset[UserId]:
    """Author plus every current reviewer, including the one being replaced."""
    return frozenset({pr.author_id, *pr.reviewers})
