"""User Routes — activity flag and reviewer inbox.

Invariants:
    - POST /users/setIsActive answers 404 NOT_FOUND for a user never added via a team
    - GET /users/getReview never 404s: an unknown user has an empty inbox
"""

from fastapi import APIRouter, Depends, Query

from reviewhub.api.dependencies import get_engine
from reviewhub.schemas.pull_request import (
    PullRequestShortOut, ReviewerInboxResponse,
)
from reviewhub.schemas.team import SetIsActive, UserOut, UserResponse
from reviewhub.services.assignment_engine import AssignmentEngine

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/setIsActive", response_model=UserResponse)
async def set_is_active(
    body: SetIsActive, engine: AssignmentEngine = Depends(get_engine),
):
    user = await engine.set_user_activity(body.user_id, body.is_active)
    return UserResponse(user=UserOut.from_user(user))


@router.get("/getReview", response_model=ReviewerInboxResponse)
async def get_review(
    user_id: str = Query(min_length=1, pattern=r"\S"),
    engine: AssignmentEngine = Depends(get_engine),
):
    """Pull requests the user currently reviews, newest first."""
    user_id = user_id.strip()
    prs = await engine.list_reviewer_pull_requests(user_id)
    return ReviewerInboxResponse(
        user_id=user_id,
        pull_requests=[PullRequestShortOut.from_short(pr) for pr in prs],
    )
