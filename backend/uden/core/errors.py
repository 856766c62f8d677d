"""Error Hierarchy — typed, categorized exceptions for every account, session and billing failure.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client errors (400-level) carry a short machine-stable code; upstream and
      internal errors (500-level) never expose the underlying cause in the response
    - to_response() produces the REST envelope used by every error handler

Design Decisions:
    - Single hierarchy with UdenError base: FastAPI global handler catches all
    - ErrorContext as dataclass: observability data kept off the response body
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
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
    AUTHENTICATION = "authentication"
    BUSINESS_RULE = "business_rule"
    CONFLICT = "conflict"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Observability context. Logged, never returned to the caller."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    provider: str | None = None
    debug_info: dict[str, Any] | None = None


class UdenError(Exception):
    """Base exception for all Uden errors."""

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
            }
        }


# ─── Client Errors (400-level) ──────────────────────────────────

class BadRequestError(UdenError):
    """Malformed, invalid or disallowed input. `field` names the offender."""
    def __init__(
        self, message: str, code: str, field: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field


class UnauthenticatedError(UdenError):
    """Missing, unknown or expired token, or no matching account."""
    def __init__(
        self, message: str = "Authentication required",
        code: str = "UNAUTHENTICATED", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ForbiddenError(UdenError):
    """Authenticated, but the account may not perform this action yet."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 403,
        )


class ConflictError(UdenError):
    """Username or email already taken."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class UpstreamError(UdenError):
    """OAuth provider, payment gateway or email relay failed."""
    def __init__(
        self, service: str, message: str, code: str = "UPSTREAM_FAILURE",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 502,
        )
        self.service = service


class InternalError(UdenError):
    """Persistence failed after validation passed."""
    def __init__(
        self, message: str, code: str = "INTERNAL_FAILURE",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )


class DatabaseError(UdenError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
