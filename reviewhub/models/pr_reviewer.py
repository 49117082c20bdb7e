"""PullRequestReviewer ORM — one reviewer assignment on one pull request.

Invariants:
    - (pull_request_id, reviewer_id) is unique: no duplicate reviewers
    - Assignment order is (assigned_at, id); id breaks ties between rows
      written in the same transaction
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from reviewhub.db.base import Base


class PullRequestReviewer(Base):
    __tablename__ = "pr_reviewers"
    __table_args__ = (
        UniqueConstraint(
            "pull_request_id", "reviewer_id",
            name="uq_pr_reviewers_pull_request_reviewer",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    pull_request_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("pull_requests.pull_request_id", ondelete="CASCADE"),
        nullable=False,
    )
    reviewer_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.user_id"), nullable=False, index=True,
    )
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
