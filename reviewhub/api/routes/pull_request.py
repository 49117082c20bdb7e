"""Pull Request Routes — create, merge, reassign.

Invariants:
    - Routes only translate bodies to engine calls; all rules live in the engine
    - mergedAt is omitted from responses until the pull request is merged
"""

from fastapi import APIRouter, Depends, status

from reviewhub.api.dependencies import get_engine
from reviewhub.schemas.pull_request import (
    PullRequestCreate, PullRequestMerge, PullRequestOut, PullRequestResponse,
    ReassignResponse, ReassignReviewer,
)
from reviewhub.services.assignment_engine import AssignmentEngine

router = APIRouter(prefix="/pullRequest", tags=["pull_requests"])


@router.post(
    "/create", response_model=PullRequestResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_pull_request(
    body: PullRequestCreate, engine: AssignmentEngine = Depends(get_engine),
):
    """Open a pull request with up to two reviewers from the author's team."""
    pr = await engine.create_pull_request(
        body.pull_request_id, body.pull_request_name, body.author_id,
    )
    return PullRequestResponse(pr=PullRequestOut.from_pull_request(pr))


@router.post(
    "/merge", response_model=PullRequestResponse,
    response_model_exclude_none=True,
)
async def merge_pull_request(
    body: PullRequestMerge, engine: AssignmentEngine = Depends(get_engine),
):
    """Idempotent: merging twice returns the same status and mergedAt."""
    pr = await engine.merge_pull_request(body.pull_request_id)
    return PullRequestResponse(pr=PullRequestOut.from_pull_request(pr))


@router.post(
    "/reassign", response_model=ReassignResponse,
    response_model_exclude_none=True,
)
async def reassign_reviewer(
    body: ReassignReviewer, engine: AssignmentEngine = Depends(get_engine),
):
    pr, replaced_by = await engine.reassign_reviewer(
        body.pull_request_id, body.old_reviewer,
    )
    return ReassignResponse(
        pr=PullRequestOut.from_pull_request(pr), replaced_by=replaced_by,
    )
