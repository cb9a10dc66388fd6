"""SessionSentinel - login risk analysis and session integrity engine."""

__version__ = "0.1.0"
__author__ = "SessionSentinel Team"

# Core exports
from session_sentinel.core.types import AlertSeverity, AlertType, DeviceType

__all__ = [
    "AlertSeverity",
    "AlertType",
    "DeviceType",
]
