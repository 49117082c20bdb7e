"""Team ORM — named grouping of users who review each other's pull requests.

Invariants:
    - team_name is unique and never updated
    - Teams are never deleted
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from reviewhub.db.base import Base


class Team(Base):
    __tablename__ = "teams"

    team_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    team_name: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
