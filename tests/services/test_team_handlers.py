"""Team Handlers — idempotent team upsert, membership moves, activity flag.

Invariants:
    - Re-adding a team reuses it and re-applies the member list
    - A user belongs to at most one team; the latest add wins
    - A failed member write leaves no trace of the team
"""

import pytest

from reviewhub.core.errors import TeamNotFoundError, UserNotFoundError
from reviewhub.infrastructure.repository import AssignmentRepository
from tests.services.factories import member


async def test_create_team_returns_members(engine, backend_team):
    assert backend_team.name == "Backend"
    assert [m.user_id for m in backend_team.members] == ["alice", "bob", "carol"]
    assert all(m.is_active for m in backend_team.members)


async def test_create_team_is_idempotent(engine, backend_team):
    again = await engine.create_team(
        "Backend", [member("alice"), member("bob"), member("carol")],
    )
    assert again.id == backend_team.id
    assert again.members == backend_team.members


async def test_create_team_again_adds_and_updates_members(engine, backend_team):
    team = await engine.create_team(
        "Backend", [member("bob", "Bobby", is_active=False), member("dave")],
    )
    by_id = {m.user_id: m for m in team.members}
    assert set(by_id) == {"alice", "bob", "carol", "dave"}
    assert by_id["bob"].username == "Bobby"
    assert by_id["bob"].is_active is False


async def test_create_team_without_members(engine):
    team = await engine.create_team("Empty", [])
    assert team.members == ()


async def test_member_moves_to_new_team(engine, backend_team):
    await engine.create_team("Frontend", [member("bob")])

    backend = await engine.get_team("Backend")
    frontend = await engine.get_team("Frontend")
    assert [m.user_id for m in backend.members] == ["alice", "carol"]
    assert [m.user_id for m in frontend.members] == ["bob"]


async def test_get_unknown_team_raises(engine):
    with pytest.raises(TeamNotFoundError):
        await engine.get_team("Nope")


async def test_failed_member_write_rolls_back_team(engine, monkeypatch):
    async def boom(self, team_id, user_id):
        raise RuntimeError("membership write failed")

    monkeypatch.setattr(AssignmentRepository, "upsert_membership", boom)
    with pytest.raises(RuntimeError):
        await engine.create_team("Backend", [member("alice")])
    monkeypatch.undo()

    with pytest.raises(TeamNotFoundError):
        await engine.get_team("Backend")
    with pytest.raises(UserNotFoundError):
        await engine.set_user_activity("alice", False)


async def test_set_user_activity(engine, backend_team):
    user = await engine.set_user_activity("bob", False)
    assert user.id == "bob"
    assert user.is_active is False
    assert user.team_name == "Backend"

    team = await engine.get_team("Backend")
    assert {m.user_id: m.is_active for m in team.members}["bob"] is False


async def test_set_user_activity_unknown_user(engine):
    with pytest.raises(UserNotFoundError):
        await engine.set_user_activity("ghost", True)
