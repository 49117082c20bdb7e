"""Domain Types — affiliation sum type and entity helpers.

Tests:
    - User.team_name follows the affiliation branch
    - PullRequest.is_merged reflects the status enum
    - Status enum values are the wire strings
"""

from datetime import datetime, timezone

from reviewhub.core.domain_types import (
    AffiliatedWith, PullRequest, PullRequestId, PullRequestStatus, TeamId,
    Unaffiliated, User, UserId,
)


def _pr(status: PullRequestStatus) -> PullRequest:
    return PullRequest(
        id=PullRequestId("pr-1"),
        name="Add search",
        author_id=UserId("alice"),
        status=status,
        created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )


def test_user_defaults_to_unaffiliated():
    user = User(id=UserId("u1"), username="Alice", is_active=True)
    assert user.affiliation == Unaffiliated()
    assert user.team_name is None


def test_affiliated_user_exposes_team_name():
    user = User(
        id=UserId("u1"), username="Alice", is_active=True,
        affiliation=AffiliatedWith(team_id=TeamId(3), team_name="Backend"),
    )
    assert user.team_name == "Backend"


def test_is_merged_follows_status():
    assert not _pr(PullRequestStatus.OPEN).is_merged
    assert _pr(PullRequestStatus.MERGED).is_merged


def test_status_values_are_wire_strings():
    assert PullRequestStatus.OPEN.value == "OPEN"
    assert PullRequestStatus.MERGED.value == "MERGED"
    assert PullRequestStatus("MERGED") is PullRequestStatus.MERGED
