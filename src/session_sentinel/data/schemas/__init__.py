"""Data schemas - canonical Pydantic definitions."""

from session_sentinel.data.schemas.user import User
from session_sentinel.data.schemas.device import Device, DeviceFingerprint, DeviceSummary
from session_sentinel.data.schemas.session import Session, GeoLocation
from session_sentinel.data.schemas.risk_alert import RiskAlert
from session_sentinel.data.schemas.activity import ActivityLog

__all__ = [
    "User",
    "Device",
    "DeviceFingerprint",
    "DeviceSummary",
    "Session",
    "GeoLocation",
    "RiskAlert",
    "ActivityLog",
]
