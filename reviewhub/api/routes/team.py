"""Team Routes — create-or-update a team and read it back.

Invariants:
    - POST /team/add is idempotent on team_name and answers 201 with the full team
    - GET /team/get answers 404 NOT_FOUND for an unknown team
"""

from fastapi import APIRouter, Depends, Query, status

from reviewhub.api.dependencies import get_engine
from reviewhub.schemas.team import TeamCreate, TeamOut, TeamResponse
from reviewhub.services.assignment_engine import AssignmentEngine

router = APIRouter(prefix="/team", tags=["teams"])


@router.post(
    "/add", response_model=TeamResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_team(
    body: TeamCreate, engine: AssignmentEngine = Depends(get_engine),
):
    """Create the team if missing and bind every listed member to it."""
    team = await engine.create_team(
        body.team_name, [m.to_member() for m in body.members],
    )
    return TeamResponse(team=TeamOut.from_team(team))


@router.get("/get", response_model=TeamOut)
async def get_team(
    team_name: str = Query(min_length=1, pattern=r"\S"),
    engine: AssignmentEngine = Depends(get_engine),
):
    team = await engine.get_team(team_name.strip())
    return TeamOut.from_team(team)
