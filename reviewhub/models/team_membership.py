"""TeamMembership ORM — links a user to their single team.

Invariants:
    - user_id is the primary key: a user has at most one membership row
    - Re-adding a user to another team overwrites team_id and joined_at

Design Decisions:
    - Keyed on user, not (team, user): the one-team rule is enforced by the
      schema instead of by application code
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from reviewhub.db.base import Base


class TeamMembership(Base):
    __tablename__ = "team_memberships"

    user_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        primary_key=True,
    )
    team_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("teams.team_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
