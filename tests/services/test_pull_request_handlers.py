"""Pull Request Handlers — creation, reassignment, merge, reviewer inbox.

Invariants:
    - A new pull request gets min(2, eligible teammates) distinct reviewers
    - The author never reviews their own pull request; inactive users never get picked
    - Reassignment keeps the reviewer count and never reuses a current reviewer
    - Merged pull requests are frozen; merge is idempotent and merged_at fixed
    - A rival commit landing mid-reassignment is reported, never half-applied

Design Decisions:
    - Rival commits are simulated by patching list_random_active_team_members
      to mutate the same transaction right before replace_reviewer runs
"""

from datetime import timedelta

import pytest
from sqlalchemy import delete, insert, update

from reviewhub.core.domain_types import PullRequestStatus
from reviewhub.core.errors import (
    NoCandidateError, PullRequestExistsError, PullRequestMergedError,
    PullRequestNotFoundError, ReviewerNotAssignedError, TeamNotFoundError,
    UserNotFoundError,
)
from reviewhub.infrastructure.repository import AssignmentRepository
from reviewhub.models.pr_reviewer import PullRequestReviewer
from reviewhub.models.pull_request import PullRequest as PullRequestModel
from reviewhub.models.user import User as UserModel
from reviewhub.schemas.common import format_timestamp
from tests.services.factories import MERGE_TIME, member


@pytest.fixture
async def four_person_team(engine):
    """Team "Core": alice authors, bob/carol/dave are candidates."""
    return await engine.create_team(
        "Core", [member("alice"), member("bob"), member("carol"), member("dave")],
    )


# ─── Creation ────────────────────────────────────────────────────

async def test_create_assigns_two_teammates(engine, backend_team):
    pr = await engine.create_pull_request("pr-1", "Add search", "alice")
    assert pr.status == PullRequestStatus.OPEN
    assert sorted(pr.reviewers) == ["bob", "carol"]
    assert pr.merged_at is None


async def test_create_with_large_team_picks_two_distinct(engine, four_person_team):
    pr = await engine.create_pull_request("pr-1", "Add search", "alice")
    assert len(pr.reviewers) == 2
    assert len(set(pr.reviewers)) == 2
    assert "alice" not in pr.reviewers


async def test_create_skips_inactive_teammates(engine):
    await engine.create_team(
        "Backend", [member("alice"), member("bob", is_active=False), member("carol")],
    )
    pr = await engine.create_pull_request("pr-1", "Add search", "alice")
    assert pr.reviewers == ("carol",)


async def test_create_with_no_teammates_has_no_reviewers(engine):
    await engine.create_team("Solo", [member("alice")])
    pr = await engine.create_pull_request("pr-1", "Add search", "alice")
    assert pr.reviewers == ()


async def test_inactive_author_can_still_open(engine, backend_team):
    await engine.set_user_activity("alice", False)
    pr = await engine.create_pull_request("pr-1", "Add search", "alice")
    assert sorted(pr.reviewers) == ["bob", "carol"]


async def test_create_duplicate_id(engine, backend_team):
    await engine.create_pull_request("pr-1", "Add search", "alice")
    with pytest.raises(PullRequestExistsError):
        await engine.create_pull_request("pr-1", "Other", "bob")


async def test_create_unknown_author(engine, backend_team):
    with pytest.raises(UserNotFoundError):
        await engine.create_pull_request("pr-1", "Add search", "ghost")


async def test_create_author_without_team(engine, db_manager):
    async with db_manager.transaction() as tx:
        tx.add(UserModel(user_id="solo", username="Solo", is_active=True))
    with pytest.raises(TeamNotFoundError):
        await engine.create_pull_request("pr-1", "Add search", "solo")
    with pytest.raises(PullRequestNotFoundError):
        await engine.pull_requests.get_pull_request("pr-1")


async def test_failed_reviewer_write_rolls_back_insert(engine, backend_team, monkeypatch):
    async def boom(self, pull_request_id, reviewer_ids):
        raise RuntimeError("reviewer write failed")

    monkeypatch.setattr(AssignmentRepository, "add_reviewers", boom)
    with pytest.raises(RuntimeError):
        await engine.create_pull_request("pr-1", "Add search", "alice")
    monkeypatch.undo()

    with pytest.raises(PullRequestNotFoundError):
        await engine.pull_requests.get_pull_request("pr-1")
    pr = await engine.create_pull_request("pr-1", "Add search", "alice")
    assert sorted(pr.reviewers) == ["bob", "carol"]


# ─── Reassignment ────────────────────────────────────────────────

async def test_reassign_replaces_with_remaining_teammate(engine, four_person_team):
    pr = await engine.create_pull_request("pr-1", "Add search", "alice")
    old = pr.reviewers[0]
    (remaining,) = {"bob", "carol", "dave"} - set(pr.reviewers)

    updated, replaced_by = await engine.reassign_reviewer("pr-1", old)

    assert replaced_by == remaining
    assert old not in updated.reviewers
    assert len(updated.reviewers) == 2
    assert set(updated.reviewers) == (set(pr.reviewers) - {old}) | {remaining}


async def test_reassign_without_candidate(engine, backend_team):
    await engine.create_pull_request("pr-1", "Add search", "alice")
    with pytest.raises(NoCandidateError):
        await engine.reassign_reviewer("pr-1", "bob")

    pr = await engine.pull_requests.get_pull_request("pr-1")
    assert sorted(pr.reviewers) == ["bob", "carol"]


async def test_reassign_skips_inactive_candidates(engine, four_person_team):
    pr = await engine.create_pull_request("pr-1", "Add search", "alice")
    (remaining,) = {"bob", "carol", "dave"} - set(pr.reviewers)
    await engine.set_user_activity(remaining, False)
    with pytest.raises(NoCandidateError):
        await engine.reassign_reviewer("pr-1", pr.reviewers[0])


async def test_reassign_non_reviewer(engine, backend_team):
    await engine.create_pull_request("pr-1", "Add search", "alice")
    with pytest.raises(ReviewerNotAssignedError):
        await engine.reassign_reviewer("pr-1", "alice")


async def test_reassign_unknown_pull_request(engine, backend_team):
    with pytest.raises(PullRequestNotFoundError):
        await engine.reassign_reviewer("nope", "bob")


async def test_reassign_after_merge_is_rejected(engine, four_person_team):
    pr = await engine.create_pull_request("pr-1", "Add search", "alice")
    await engine.merge_pull_request("pr-1")
    with pytest.raises(PullRequestMergedError):
        await engine.reassign_reviewer("pr-1", pr.reviewers[0])

    after = await engine.pull_requests.get_pull_request("pr-1")
    assert after.reviewers == pr.reviewers


async def test_reassign_draws_from_reviewers_current_team(engine, four_person_team):
    pr = await engine.create_pull_request("pr-1", "Add search", "alice")
    old = pr.reviewers[0]
    await engine.create_team("Platform", [member(old), member("erin")])

    _, replaced_by = await engine.reassign_reviewer("pr-1", old)
    assert replaced_by == "erin"


def _interleave(monkeypatch, rival):
    """Run `rival(session)` right after the replacement candidate is drawn."""
    original = AssignmentRepository.list_random_active_team_members

    async def patched(self, team_id, exclude, limit, rng):
        picked = await original(self, team_id, exclude, limit, rng)
        await rival(self.db, picked)
        return picked

    monkeypatch.setattr(
        AssignmentRepository, "list_random_active_team_members", patched,
    )


async def test_concurrent_merge_during_reassign(engine, four_person_team, monkeypatch):
    pr = await engine.create_pull_request("pr-1", "Add search", "alice")

    async def merge(db, picked):
        await db.execute(
            update(PullRequestModel)
            .where(PullRequestModel.pull_request_id == "pr-1")
            .values(status=PullRequestStatus.MERGED.value),
        )

    _interleave(monkeypatch, merge)
    with pytest.raises(PullRequestMergedError):
        await engine.reassign_reviewer("pr-1", pr.reviewers[0])
    monkeypatch.undo()

    after = await engine.pull_requests.get_pull_request("pr-1")
    assert after.reviewers == pr.reviewers


async def test_concurrent_removal_during_reassign(engine, four_person_team, monkeypatch):
    pr = await engine.create_pull_request("pr-1", "Add search", "alice")
    old = pr.reviewers[0]

    async def remove(db, picked):
        await db.execute(
            delete(PullRequestReviewer)
            .where(PullRequestReviewer.pull_request_id == "pr-1")
            .where(PullRequestReviewer.reviewer_id == old),
        )

    _interleave(monkeypatch, remove)
    with pytest.raises(ReviewerNotAssignedError):
        await engine.reassign_reviewer("pr-1", old)
    monkeypatch.undo()

    after = await engine.pull_requests.get_pull_request("pr-1")
    assert after.reviewers == pr.reviewers


async def test_concurrent_same_replacement(engine, four_person_team, monkeypatch):
    pr = await engine.create_pull_request("pr-1", "Add search", "alice")

    async def take_candidate(db, picked):
        await db.execute(
            insert(PullRequestReviewer).values(
                pull_request_id="pr-1", reviewer_id=picked[0],
                assigned_at=MERGE_TIME,
            ),
        )

    _interleave(monkeypatch, take_candidate)
    with pytest.raises(NoCandidateError):
        await engine.reassign_reviewer("pr-1", pr.reviewers[0])
    monkeypatch.undo()

    after = await engine.pull_requests.get_pull_request("pr-1")
    assert after.reviewers == pr.reviewers


# ─── Merge ───────────────────────────────────────────────────────

async def test_merge_sets_status_and_time(engine, backend_team):
    await engine.create_pull_request("pr-1", "Add search", "alice")
    pr = await engine.merge_pull_request("pr-1")
    assert pr.is_merged
    assert format_timestamp(pr.merged_at) == "2025-11-10T12:30:00Z"
    assert sorted(pr.reviewers) == ["bob", "carol"]


async def test_merge_is_idempotent(engine, backend_team):
    await engine.create_pull_request("pr-1", "Add search", "alice")
    first = await engine.merge_pull_request("pr-1")

    engine.pull_requests.clock = lambda: MERGE_TIME + timedelta(days=1)
    second = await engine.merge_pull_request("pr-1")

    assert second.status == PullRequestStatus.MERGED
    assert second.merged_at == first.merged_at


async def test_merge_unknown_pull_request(engine):
    with pytest.raises(PullRequestNotFoundError):
        await engine.merge_pull_request("nope")


# ─── Reviewer inbox ──────────────────────────────────────────────

async def test_inbox_lists_newest_first(engine, backend_team):
    for pr_id in ("pr-1", "pr-2", "pr-3"):
        await engine.create_pull_request(pr_id, f"Change {pr_id}", "alice")
    await engine.merge_pull_request("pr-2")

    inbox = await engine.list_reviewer_pull_requests("bob")
    assert [pr.id for pr in inbox] == ["pr-3", "pr-2", "pr-1"]
    assert inbox[1].status == PullRequestStatus.MERGED
    assert inbox[0].author_id == "alice"


async def test_inbox_follows_reassignment(engine, four_person_team):
    pr = await engine.create_pull_request("pr-1", "Add search", "alice")
    old = pr.reviewers[0]
    _, replaced_by = await engine.reassign_reviewer("pr-1", old)

    assert await engine.list_reviewer_pull_requests(old) == []
    assert [p.id for p in await engine.list_reviewer_pull_requests(replaced_by)] == [
        "pr-1",
    ]


async def test_inbox_for_unknown_user_is_empty(engine):
    assert await engine.list_reviewer_pull_requests("ghost") == []
