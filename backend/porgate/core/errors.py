"""Error Hierarchy: typed, categorized exceptions for all PoR gate failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Gate denials and admin rejections are 400-level; infrastructure errors are 500-level
    - Every issuance denial carries exactly one DenyReason (never a generic failure)
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with PorGateError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - One IssuanceDeniedError class keyed by DenyReason instead of one class per reason:
      callers branch on .reason, the wire code is derived from it
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone

from porgate.core.domain_types import DenyReason


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
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    asset: str | None = None
    caller: str | None = None
    feed: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class PorGateError(Exception):
    """Base exception for all PoR gate errors."""

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
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "asset": self.context.asset,
                    "caller": self.context.caller,
                    "feed": self.context.feed,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Gate Denials (400-level) ───────────────────────────────────

DENY_REASON_CODES: dict[DenyReason, str] = {
    DenyReason.INVALID_ANSWER: "POR_INVALID_ANSWER",
    DenyReason.STALE_ANSWER: "POR_ANSWER_TOO_OLD",
    DenyReason.INSUFFICIENT_RESERVES: "POR_UNDERLYING_GREATER_THAN_RESERVES",
}

_DENY_REASON_MESSAGES: dict[DenyReason, str] = {
    DenyReason.INVALID_ANSWER: "Proof-of-reserves feed returned a non-positive or missing answer",
    DenyReason.STALE_ANSWER: "Proof-of-reserves answer is older than the configured heartbeat",
    DenyReason.INSUFFICIENT_RESERVES: "Underlying supply exceeds attested reserves",
}


class IssuanceDeniedError(PorGateError):
    """Reserve gate refused to let an issuance through."""
    def __init__(self, reason: DenyReason, context: ErrorContext | None = None):
        super().__init__(
            _DENY_REASON_MESSAGES[reason], DENY_REASON_CODES[reason],
            ErrorCategory.BUSINESS_RULE, ErrorSeverity.ERROR, context, 422,
        )
        self.reason = reason


class NormalizationOverflowError(PorGateError):
    """Scaling a value onto the common decimal scale left the 256-bit range."""
    def __init__(self, value: int, exponent: int, context: ErrorContext | None = None):
        super().__init__(
            f"Scaling {value} by 10^{exponent} overflows a 256-bit word",
            "POR_NORMALIZATION_OVERFLOW", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 422,
        )
        self.value = value
        self.exponent = exponent


# ─── Admin Errors (400-level) ───────────────────────────────────

class UnauthorizedError(PorGateError):
    """Caller is not the gate administrator."""
    def __init__(self, caller: str | None, context: ErrorContext | None = None):
        super().__init__(
            "Caller is not the pool administrator",
            "CALLER_NOT_ADMIN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.ERROR, context, 403,
        )
        self.caller = caller


class HeartbeatTooLargeError(PorGateError):
    """Requested heartbeat exceeds the gate's maximum answer age."""
    def __init__(
        self, heartbeat: int, max_age: int, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Heartbeat {heartbeat}s is greater than max age {max_age}s",
            "POR_HEARTBEAT_GREATER_THAN_MAX_AGE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.heartbeat = heartbeat
        self.max_age = max_age


class ResourceNotFoundError(PorGateError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class ConflictError(PorGateError):
    """Resource already exists or was concurrently modified."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(PorGateError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class FeedUnavailableError(PorGateError):
    """Proof-of-reserves feed could not be read."""
    def __init__(
        self,
        message: str,
        failure_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"Reserve feed error ({failure_type}): {message}",
            "FEED_UNAVAILABLE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.failure_type = failure_type
