"""Common utilities - logging, config, exceptions."""

from session_sentinel.common.logging import get_logger
from session_sentinel.common.config import Config, get_config, reset_config
from session_sentinel.common.exceptions import (
    SessionSentinelError,
    ConfigurationError,
    InvalidInputError,
    ConflictError,
    NotFoundError,
    UserNotFoundError,
    DeviceNotFoundError,
    SessionNotFoundError,
    AlertNotFoundError,
    AccountNotActiveError,
    InvalidTokenError,
)

__all__ = [
    # Logging
    "get_logger",
    # Config
    "Config",
    "get_config",
    "reset_config",
    # Exceptions
    "SessionSentinelError",
    "ConfigurationError",
    "InvalidInputError",
    "ConflictError",
    "NotFoundError",
    "UserNotFoundError",
    "DeviceNotFoundError",
    "SessionNotFoundError",
    "AlertNotFoundError",
    "AccountNotActiveError",
    "InvalidTokenError",
]
