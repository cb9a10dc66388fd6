"""Centralized constants for SessionSentinel."""


# ===== DEVICE IDENTITY =====
class DeviceConstants:
    FINGERPRINT_DELIMITER = "|"
    INITIAL_TRUST_SCORE = 50.0
    TRUST_INCREMENT = 5.0
    EXPLICIT_TRUST_FLOOR = 90.0
    TRUST_SCORE_MIN = 0.0
    TRUST_SCORE_MAX = 100.0


# ===== SESSION LEDGER =====
class SessionConstants:
    INACTIVITY_TIMEOUT_HOURS = 24
    SWEEP_INTERVAL_SECONDS = 900.0
    SWEEP_JOIN_TIMEOUT_SECONDS = 5.0
    DEFAULT_HISTORY_LIMIT = 10
    API_HISTORY_LIMIT = 20
    CONCURRENT_CHECK_WARNING_COUNT = 2
    CAP_REACHED_WARNING = (
        "Maximum concurrent sessions reached. Oldest session will be terminated."
    )


# ===== RISK SCORING =====
class RiskConstants:
    SCORE_MIN = 0.0
    SCORE_MAX = 100.0
    EARTH_RADIUS_KM = 6371.0
    SCORE_DECIMALS = 2


# ===== ACCOUNT AGGREGATE =====
class AggregateConstants:
    WINDOW_DAYS = 7
    SCORE_CAP = 100.0


# ===== MONITORING =====
class MonitoringConstants:
    DEFAULT_BATCH_SIZE = 20
    CLOUDWATCH_MAX_BATCH = 20
    DEFAULT_NAMESPACE = "SessionSentinel"


# ===== ACTIVITY =====
class ActivityConstants:
    DEFAULT_HISTORY_LIMIT = 50
