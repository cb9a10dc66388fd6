"""Custom exceptions for SessionSentinel.

Provides a hierarchy of exceptions for different error types.
All SessionSentinel exceptions inherit from SessionSentinelError.
"""

from typing import Any, Dict, Optional


class SessionSentinelError(Exception):
    """Base exception for all SessionSentinel errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        code: str = "SENTINEL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(SessionSentinelError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFIG_ERROR", details=details)


class InvalidInputError(SessionSentinelError):
    """Raised when input validation fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="INVALID_INPUT", details=details)


class ConflictError(SessionSentinelError):
    """Raised when a record would duplicate an existing one."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFLICT", details=details)


class NotFoundError(SessionSentinelError):
    """Raised when an entity is unknown or not owned by the caller."""

    entity = "entity"

    def __init__(self, entity_id: str, details: Optional[Dict[str, Any]] = None):
        details = details or {}
        details[f"{self.entity}_id"] = entity_id
        self.entity_id = entity_id
        super().__init__(
            f"{self.entity.capitalize()} not found",
            code="NOT_FOUND",
            details=details,
        )


class UserNotFoundError(NotFoundError):
    entity = "user"


class DeviceNotFoundError(NotFoundError):
    entity = "device"


class SessionNotFoundError(NotFoundError):
    entity = "session"


class AlertNotFoundError(NotFoundError):
    entity = "alert"


class AccountNotActiveError(SessionSentinelError):
    """Raised when a login is attempted on a non-active account."""

    def __init__(self, user_id: str, status: str):
        super().__init__(
            f"Account is {status}. Please contact support.",
            code="ACCOUNT_NOT_ACTIVE",
            details={"user_id": user_id, "account_status": status},
        )


class InvalidTokenError(SessionSentinelError):
    """Raised when an access token cannot be decoded or has expired."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message, code="INVALID_TOKEN")
