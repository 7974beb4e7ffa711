"""Error Hierarchy — typed, categorized exceptions for gatekeeper failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages (resource ids are masked)
    - Access resolution never raises any of these: its failures are data (CheckOutcome)

Design Decisions:
    - Single hierarchy with GatekeeperError base: FastAPI global handler catches all
    - Binding conflicts are the only business-rule errors surfaced upward: a card
      already bound to another account, or an account that already holds a card
    - ErrorContext as dataclass: rich observability without coupling to logging framework
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
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    resource_id: str | None = None
    debug_info: dict[str, Any] | None = None


class GatekeeperError(Exception):
    """Base exception for all gatekeeper errors."""

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


# ─── Domain Errors (400-level) ──────────────────────────────────

class ResourceConflictError(GatekeeperError):
    """Resource is already bound to a different live account."""
    def __init__(self, masked_resource_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"Resource {masked_resource_id} is already registered to another account",
            "RESOURCE_ALREADY_BOUND", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


class AccountAlreadyBoundError(GatekeeperError):
    """Account already holds a different resource: bindings are 1:1."""
    def __init__(self, user_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"Account '{user_id}' already has a registered card",
            "ACCOUNT_ALREADY_BOUND", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


class ResourceNotFoundError(GatekeeperError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(GatekeeperError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
