"""Request Schemas — strict bodies for /team, /users and /pullRequest.

Tests cover:
    - Unknown fields and wrong JSON types are rejected
    - Identifiers are stripped and must be non-empty afterwards
    - ReassignReviewer accepts old_user_id or the legacy old_reviewer_id
    - Response helpers render timestamps as RFC 3339 UTC and blank team names as ""
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from reviewhub.core.domain_types import (
    PullRequest, PullRequestId, PullRequestStatus, Unaffiliated, User, UserId,
)
from reviewhub.schemas.common import format_timestamp
from reviewhub.schemas.pull_request import (
    PullRequestCreate, PullRequestOut, ReassignReviewer,
)
from reviewhub.schemas.team import SetIsActive, TeamCreate, UserOut


# ─── TeamCreate ──────────────────────────────────────────────────

def test_team_create_strips_and_converts_members():
    body = TeamCreate.model_validate({
        "team_name": "  Backend ",
        "members": [{"user_id": " u1 ", "username": "Alice", "is_active": False}],
    })
    assert body.team_name == "Backend"
    member = body.members[0].to_member()
    assert member.user_id == "u1"
    assert member.is_active is False


def test_team_create_members_default_active_and_empty():
    body = TeamCreate.model_validate({
        "team_name": "Backend",
        "members": [{"user_id": "u1", "username": "Alice"}],
    })
    assert body.members[0].is_active is True
    assert TeamCreate.model_validate({"team_name": "Solo"}).members == []


@pytest.mark.parametrize("team_name", ["", "   "])
def test_team_create_rejects_blank_name(team_name):
    with pytest.raises(ValidationError):
        TeamCreate.model_validate({"team_name": team_name})


def test_team_create_rejects_unknown_field():
    with pytest.raises(ValidationError):
        TeamCreate.model_validate({"team_name": "Backend", "owner": "u1"})


def test_team_member_rejects_blank_username():
    with pytest.raises(ValidationError):
        TeamCreate.model_validate({
            "team_name": "Backend",
            "members": [{"user_id": "u1", "username": " "}],
        })


def test_set_is_active_requires_boolean():
    with pytest.raises(ValidationError):
        SetIsActive.model_validate({"user_id": "u1", "is_active": "yes"})
    with pytest.raises(ValidationError):
        SetIsActive.model_validate({"user_id": "u1"})


# ─── Pull request bodies ─────────────────────────────────────────

def test_pull_request_create_requires_all_fields():
    with pytest.raises(ValidationError):
        PullRequestCreate.model_validate({
            "pull_request_id": "pr-1", "pull_request_name": "Add search",
        })


def test_reassign_accepts_old_user_id():
    body = ReassignReviewer.model_validate(
        {"pull_request_id": "pr-1", "old_user_id": "u2"},
    )
    assert body.old_reviewer == "u2"


def test_reassign_accepts_legacy_old_reviewer_id():
    body = ReassignReviewer.model_validate(
        {"pull_request_id": "pr-1", "old_reviewer_id": "u2"},
    )
    assert body.old_reviewer == "u2"


def test_reassign_prefers_old_user_id():
    body = ReassignReviewer.model_validate({
        "pull_request_id": "pr-1", "old_user_id": "u2", "old_reviewer_id": "u3",
    })
    assert body.old_reviewer == "u2"


@pytest.mark.parametrize("payload", [
    {"pull_request_id": "pr-1"},
    {"pull_request_id": "pr-1", "old_user_id": "  "},
])
def test_reassign_requires_old_reviewer(payload):
    with pytest.raises(ValidationError):
        ReassignReviewer.model_validate(payload)


# ─── Response helpers ────────────────────────────────────────────

def test_format_timestamp_treats_naive_as_utc():
    assert format_timestamp(datetime(2025, 11, 10, 12, 30, 5, 999)) == (
        "2025-11-10T12:30:05Z"
    )


def test_pull_request_out_omits_merged_at_until_merged():
    pr = PullRequest(
        id=PullRequestId("pr-1"),
        name="Add search",
        author_id=UserId("u1"),
        status=PullRequestStatus.OPEN,
        created_at=datetime(2025, 11, 10, 9, 0, tzinfo=timezone.utc),
        reviewers=(UserId("u2"),),
    )
    out = PullRequestOut.from_pull_request(pr).model_dump(exclude_none=True)
    assert out["createdAt"] == "2025-11-10T09:00:00Z"
    assert out["assigned_reviewers"] == ["u2"]
    assert "mergedAt" not in out


def test_user_out_renders_missing_team_as_empty_string():
    user = User(
        id=UserId("u1"), username="Alice", is_active=True,
        affiliation=Unaffiliated(),
    )
    assert UserOut.from_user(user).team_name == ""
