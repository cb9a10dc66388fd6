"""Core types and enums."""

from enum import Enum
from typing import Dict, Tuple


class DeviceType(str, Enum):
    """Device categories inferred from the user agent."""
    WEB = "web"
    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"


class AccountStatus(str, Enum):
    """Account lifecycle states owned by the identity layer."""
    ACTIVE = "active"
    SUSPENDED = "suspended"
    LOCKED = "locked"
    PENDING_VERIFICATION = "pending_verification"


class SubscriptionTier(str, Enum):
    """Subscription tiers and their default limits."""
    FREE = "free"
    BASIC = "basic"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"

    @property
    def max_concurrent_sessions(self) -> int:
        return TIER_LIMITS[self][0]

    @property
    def max_devices_allowed(self) -> int:
        return TIER_LIMITS[self][1]


# tier -> (max concurrent sessions, max devices)
TIER_LIMITS: Dict[SubscriptionTier, Tuple[int, int]] = {
    SubscriptionTier.FREE: (1, 2),
    SubscriptionTier.BASIC: (2, 3),
    SubscriptionTier.PREMIUM: (3, 5),
    SubscriptionTier.ENTERPRISE: (5, 10),
}


class AlertType(str, Enum):
    """Closed set of risk alert types."""
    SUSPICIOUS_DEVICE = "suspicious_device"
    CONCURRENT_SESSIONS = "concurrent_sessions"
    IMPOSSIBLE_TRAVEL = "impossible_travel"
    UNUSUAL_BEHAVIOR = "unusual_behavior"
    HIGH_RISK_SCORE = "high_risk_score"
    MULTIPLE_LOCATIONS = "multiple_locations"
    RAPID_DEVICE_SWITCHING = "rapid_device_switching"


class ActivityType(str, Enum):
    """Client-reported in-session activity."""
    LOGIN = "login"
    LOGOUT = "logout"
    COURSE_VIEW = "course_view"
    VIDEO_WATCH = "video_watch"
    QUIZ_ATTEMPT = "quiz_attempt"
    DOWNLOAD = "download"
    PROFILE_UPDATE = "profile_update"
    SETTINGS_CHANGE = "settings_change"


class AlertSeverity(str, Enum):
    """Alert severities. Each carries a fixed account-aggregate weight."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def weight(self) -> int:
        return SEVERITY_WEIGHTS[self]


SEVERITY_WEIGHTS: Dict[AlertSeverity, int] = {
    AlertSeverity.CRITICAL: 25,
    AlertSeverity.HIGH: 15,
    AlertSeverity.MEDIUM: 8,
    AlertSeverity.LOW: 3,
}
