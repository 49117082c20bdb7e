"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - No hard deletes except pr_reviewers rows replaced by reassignment

Design Decisions:
    - One file per table for locality
    - All models imported here so Base.metadata is complete for Alembic and
      ForeignKey("table.column") targets resolve before any query runs
"""

from reviewhub.models.team import Team  # noqa: F401
from reviewhub.models.user import User  # noqa: F401
from reviewhub.models.team_membership import TeamMembership  # noqa: F401
from reviewhub.models.pull_request import PullRequest  # noqa: F401
from reviewhub.models.pr_reviewer import PullRequestReviewer  # noqa: F401
