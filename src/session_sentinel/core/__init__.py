"""Core types and enums."""

from session_sentinel.core.types import (
    AccountStatus,
    ActivityType,
    AlertSeverity,
    AlertType,
    DeviceType,
    SEVERITY_WEIGHTS,
    SubscriptionTier,
    TIER_LIMITS,
)

__all__ = [
    "AccountStatus",
    "ActivityType",
    "AlertSeverity",
    "AlertType",
    "DeviceType",
    "SEVERITY_WEIGHTS",
    "SubscriptionTier",
    "TIER_LIMITS",
]
