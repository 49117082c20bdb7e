"""Pull Request Schemas — /pullRequest bodies and responses.

Invariants:
    - Identifiers are non-empty after stripping
    - ReassignReviewer accepts old_user_id or the legacy old_reviewer_id (first wins)
    - createdAt / mergedAt are RFC 3339 UTC strings; mergedAt omitted until merged
"""

from pydantic import BaseModel, Field, model_validator

from reviewhub.core.domain_types import (
    PullRequest, PullRequestShort, PullRequestStatus,
)
from reviewhub.schemas.common import StrictRequest, format_timestamp


class PullRequestCreate(StrictRequest):
    pull_request_id: str = Field(min_length=1, max_length=255)
    pull_request_name: str = Field(min_length=1, max_length=500)
    author_id: str = Field(min_length=1, max_length=255)


class PullRequestMerge(StrictRequest):
    pull_request_id: str = Field(min_length=1, max_length=255)


class ReassignReviewer(StrictRequest):
    pull_request_id: str = Field(min_length=1, max_length=255)
    old_user_id: str | None = Field(None, max_length=255)
    old_reviewer_id: str | None = Field(None, max_length=255)

    @model_validator(mode="after")
    def require_old_reviewer(self):
        if not (self.old_user_id or self.old_reviewer_id):
            raise ValueError("old_user_id is required")
        return self

    @property
    def old_reviewer(self) -> str:
        return self.old_user_id or self.old_reviewer_id


class PullRequestOut(BaseModel):
    pull_request_id: str
    pull_request_name: str
    author_id: str
    status: PullRequestStatus
    assigned_reviewers: list[str]
    createdAt: str | None = None
    mergedAt: str | None = None

    @classmethod
    def from_pull_request(cls, pr: PullRequest) -> "PullRequestOut":
        return cls(
            pull_request_id=pr.id,
            pull_request_name=pr.name,
            author_id=pr.author_id,
            status=pr.status,
            assigned_reviewers=list(pr.reviewers),
            createdAt=format_timestamp(pr.created_at) if pr.created_at else None,
            mergedAt=format_timestamp(pr.merged_at) if pr.merged_at else None,
        )


class PullRequestShortOut(BaseModel):
    pull_request_id: str
    pull_request_name: str
    author_id: str
    status: PullRequestStatus

    @classmethod
    def from_short(cls, pr: PullRequestShort) -> "PullRequestShortOut":
        return cls(
            pull_request_id=pr.id,
            pull_request_name=pr.name,
            author_id=pr.author_id,
            status=pr.status,
        )


class PullRequestResponse(BaseModel):
    pr: PullRequestOut


class ReassignResponse(BaseModel):
    pr: PullRequestOut
    replaced_by: str


class ReviewerInboxResponse(BaseModel):
    user_id: str
    pull_requests: list[PullRequestShortOut]
