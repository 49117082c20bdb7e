"""PullRequest ORM — a change under review, authored by a team member.

Invariants:
    - pull_request_id is supplied by the caller and unique
    - status transitions OPEN -> MERGED once; merged_at is written at most once
"""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from reviewhub.core.domain_types import PullRequestStatus
from reviewhub.db.base import Base


class PullRequest(Base):
    __tablename__ = "pull_requests"

    pull_request_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    pull_request_name: Mapped[str] = mapped_column(String(500), nullable=False)
    author_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.user_id"), nullable=False, index=True,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PullRequestStatus.OPEN.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    merged_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
