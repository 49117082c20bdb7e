"""Error Hierarchy — typed, categorized exceptions for every assignment failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No storage details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with ReviewHubError base: FastAPI global handler catches all
    - Codes are the stable machine-readable contract (TEAM_EXISTS, PR_MERGED, ...);
      several not-found variants share NOT_FOUND on the wire
"""

from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"
    TIMEOUT = "timeout"


@dataclass
class ErrorContext:
    """Identifiers of the entities involved in a failure."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    team_name: str | None = None
    user_id: str | None = None
    pull_request_id: str | None = None


class ReviewHubError(Exception):
    """Base exception for all ReviewHub errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "team_name": self.context.team_name,
                    "user_id": self.context.user_id,
                    "pull_request_id": self.context.pull_request_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class TeamExistsError(ReviewHubError):
    """Concurrent create lost the race on the unique team name."""
    def __init__(self, team_name: str):
        super().__init__(
            f"team '{team_name}' already exists",
            "TEAM_EXISTS", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ErrorContext(team_name=team_name), 400,
        )


class TeamNotFoundError(ReviewHubError):
    def __init__(self, team_name: str | None = None, user_id: str | None = None):
        if team_name is not None:
            message = f"team '{team_name}' not found"
        else:
            message = f"user '{user_id}' has no team"
        super().__init__(
            message,
            "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR,
            ErrorContext(team_name=team_name, user_id=user_id), 404,
        )


class UserNotFoundError(ReviewHubError):
    def __init__(self, user_id: str):
        super().__init__(
            f"user '{user_id}' not found",
            "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ErrorContext(user_id=user_id), 404,
        )


class PullRequestExistsError(ReviewHubError):
    def __init__(self, pull_request_id: str):
        super().__init__(
            f"pull request '{pull_request_id}' already exists",
            "PR_EXISTS", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR,
            ErrorContext(pull_request_id=pull_request_id), 409,
        )


class PullRequestNotFoundError(ReviewHubError):
    def __init__(self, pull_request_id: str):
        super().__init__(
            f"pull request '{pull_request_id}' not found",
            "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR,
            ErrorContext(pull_request_id=pull_request_id), 404,
        )


class PullRequestMergedError(ReviewHubError):
    """Reviewer sets are frozen once a pull request is merged."""
    def __init__(self, pull_request_id: str):
        super().__init__(
            f"pull request '{pull_request_id}' is already merged",
            "PR_MERGED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR,
            ErrorContext(pull_request_id=pull_request_id), 409,
        )


class ReviewerNotAssignedError(ReviewHubError):
    def __init__(self, pull_request_id: str, user_id: str):
        super().__init__(
            f"user '{user_id}' is not a reviewer of pull request '{pull_request_id}'",
            "NOT_ASSIGNED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR,
            ErrorContext(pull_request_id=pull_request_id, user_id=user_id), 409,
        )


class NoCandidateError(ReviewHubError):
    """No active teammate is left to take over the review."""
    def __init__(self, pull_request_id: str, user_id: str):
        super().__init__(
            f"no active replacement candidate for '{user_id}' "
            f"on pull request '{pull_request_id}'",
            "NO_CANDIDATE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR,
            ErrorContext(pull_request_id=pull_request_id, user_id=user_id), 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(ReviewHubError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
