"""Domain Types — identity wrappers, enums, and immutable entity snapshots.

Invariants:
    - UserId, PullRequestId wrap externally supplied strings; TeamId wraps the store's integer key
    - PullRequestStatus is the only encoding of pull request state — no raw string matching
    - A user's team link is an Affiliation: Unaffiliated | AffiliatedWith
    - Entities are frozen snapshots read from the store, never live ORM rows

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
    - Affiliation as a sum type instead of two nullable columns: callers must
      match both branches, so "no team" can never be silently treated as a team
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import NewType, TypeAlias


# ─── Identity Types ──────────────────────────────────────────────

TeamId = NewType("TeamId", int)
UserId = NewType("UserId", str)
PullRequestId = NewType("PullRequestId", str)


# ─── Enums ───────────────────────────────────────────────────────

class PullRequestStatus(str, Enum):
    """Pull request lifecycle — OPEN → MERGED exactly once, MERGED is absorbing."""
    OPEN = "OPEN"
    MERGED = "MERGED"


# ─── Affiliation ─────────────────────────────────────────────────

@dataclass(frozen=True)
class Unaffiliated:
    """User is not a member of any team."""


@dataclass(frozen=True)
class AffiliatedWith:
    """User belongs to exactly this team."""
    team_id: TeamId
    team_name: str


Affiliation: TypeAlias = Unaffiliated | AffiliatedWith


# ─── Entities ────────────────────────────────────────────────────

@dataclass(frozen=True)
class TeamMember:
    user_id: UserId
    username: str
    is_active: bool = True


@dataclass(frozen=True)
class Team:
    id: TeamId
    name: str
    members: tuple[TeamMember, ...] = ()


@dataclass(frozen=True)
class User:
    id: UserId
    username: str
    is_active: bool
    affiliation: Affiliation = field(default_factory=Unaffiliated)

    @property
    def team_name(self) -> str | None:
        match self.affiliation:
            case AffiliatedWith(team_name=name):
                return name
            case Unaffiliated():
                return None


@dataclass(frozen=True)
class PullRequest:
    id: PullRequestId
    name: str
    author_id: UserId
    status: PullRequestStatus
    created_at: datetime
    merged_at: datetime | None = None
    reviewers: tuple[UserId, ...] = ()

    @property
    def is_merged(self) -> bool:
        return self.status == PullRequestStatus.MERGED


@dataclass(frozen=True)
class PullRequestShort:
    """Inbox row — a pull request without timestamps or reviewers."""
    id: PullRequestId
    name: str
    author_id: UserId
    status: PullRequestStatus
