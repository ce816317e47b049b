"""
Centralized Exception Handling Module
=====================================

Defines custom exception classes for the bug workflow core.

Every exception carries an HTTP status code so the server-side
enforcement point can surface it without translation.

Usage:
    raise PermissionDeniedError(Role.CLIENT, BugStatus.OPEN, BugStatus.CLOSED)
    raise InvalidArgumentError("role", "owner", [r.value for r in Role])
"""

from typing import Any, Dict, Iterable, Optional

from fastapi import HTTPException, status


def _value(item: Any) -> Any:
    return getattr(item, "value", item)


class BugTrackerException(Exception):
    """
    Base exception class for the bug tracker.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# ==========================
# Authorization Exceptions
# ==========================

class AuthorizationError(BugTrackerException):
    """Raised when user lacks required permissions."""

    def __init__(
        self,
        message: str = "Insufficient permissions",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
        )


class PermissionDeniedError(AuthorizationError):
    """Raised when a role may not move a bug between two statuses."""

    def __init__(self, role: Any, from_status: Any, to_status: Any):
        self.role = _value(role)
        self.from_status = _value(from_status)
        self.to_status = _value(to_status)
        super().__init__(
            message=f"Cannot transition from {self.from_status} to {self.to_status}",
            details={
                "role": self.role,
                "from_status": self.from_status,
                "to_status": self.to_status,
            },
        )


class TenantIsolationError(AuthorizationError):
    """Raised when tenant isolation is violated."""

    def __init__(self):
        super().__init__(
            message="Access denied: resource belongs to different organization"
        )


# ==========================
# Validation Exceptions
# ==========================

class ValidationError(BugTrackerException):
    """Raised when validation fails."""

    def __init__(
        self,
        message: str = "Validation error",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
        )


class InvalidArgumentError(ValidationError):
    """Raised when a role or status is outside the known enumeration."""

    def __init__(
        self,
        field: str,
        value: Any,
        allowed: Optional[Iterable[str]] = None,
    ):
        details: Dict[str, Any] = {"field": field, "value": repr(value)}
        if allowed is not None:
            details["allowed"] = list(allowed)
        super().__init__(
            message=f"Invalid {field}: {value!r}",
            details=details,
        )


# ==========================
# Conflict Exceptions
# ==========================

class ConflictError(BugTrackerException):
    """Raised when a request conflicts with the current resource state."""

    def __init__(
        self,
        message: str = "Resource state conflict",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )


class StaleStatusError(ConflictError):
    """Raised when a bug's status changed since the caller last read it."""

    def __init__(self, expected_status: Any, actual_status: Any):
        super().__init__(
            message=(
                f"Bug status is {_value(actual_status)}, "
                f"expected {_value(expected_status)}"
            ),
            details={
                "expected_status": _value(expected_status),
                "actual_status": _value(actual_status),
            },
        )


# ==========================
# Helper Functions
# ==========================

def exception_to_http_exception(exc: BugTrackerException) -> HTTPException:
    """
    Convert a BugTrackerException to FastAPI HTTPException.

    Args:
        exc: BugTrackerException instance

    Returns:
        HTTPException with appropriate status code and detail
    """
    return HTTPException(
        status_code=exc.status_code,
        detail={
            "message": exc.message,
            "details": exc.details,
        }
    )
