"""Error Hierarchy — typed, categorized exceptions for all PropertyHub failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - UnauthenticatedError (401) and ForbiddenError (403) are distinct types
    - ResourceNotFoundError is also raised for records outside the actor's scope
    - to_response() produces the REST envelope; no internal details in messages

Design Decisions:
    - Single hierarchy with PropertyHubError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


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
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    entity_type: str | None = None
    record_id: str | None = None
    debug_info: dict[str, Any] | None = None


class PropertyHubError(Exception):
    """Base exception for all PropertyHub errors."""

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

    def details(self) -> dict:
        """Error-specific payload merged into the response envelope."""
        return {}

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        body = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
        }
        body.update(self.details())
        return {"success": False, "error": body}


# ─── Client Errors (400-level) ──────────────────────────────────

class ValidationError(PropertyHubError):
    """Malformed or missing input — recoverable by correcting the request."""
    def __init__(
        self, message: str, field: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field

    def details(self) -> dict:
        return {"field": self.field} if self.field else {}


class UnauthenticatedError(PropertyHubError):
    """No valid credential was presented."""
    def __init__(
        self, message: str = "Authentication required", expired: bool = False,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "UNAUTHENTICATED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )
        self.expired = expired

    def details(self) -> dict:
        return {"expired": self.expired}


class ForbiddenError(PropertyHubError):
    """Valid credential, insufficient permission, role or ownership."""
    def __init__(
        self, message: str, missing_permissions: list[str] | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )
        self.missing_permissions = missing_permissions or []

    def details(self) -> dict:
        if not self.missing_permissions:
            return {}
        return {"missing_permissions": self.missing_permissions}


class ResourceNotFoundError(PropertyHubError):
    """No matching record under the actor's visibility scope."""
    def __init__(
        self, resource_type: str, resource_id: str | None = None,
        message: str | None = None, context: ErrorContext | None = None,
    ):
        super().__init__(
            message or f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type


class ConflictError(PropertyHubError):
    """Uniqueness violation (duplicate email, phone, registration number)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(PropertyHubError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class InternalError(PropertyHubError):
    """Unexpected failure (misconfigured reference data, broken invariant)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INTERNAL_ERROR", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
