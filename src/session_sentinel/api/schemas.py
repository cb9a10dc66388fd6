"""API Schemas - Request/Response models for the API Gateway.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from session_sentinel.core.types import ActivityType
from session_sentinel.data.schemas import (
    ActivityLog,
    Device,
    DeviceFingerprint,
    DeviceSummary,
    GeoLocation,
    RiskAlert,
    Session,
)
from session_sentinel.risk.schema import RiskAssessment


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class LoginRequest(BaseModel):
    """Request body for POST /auth/login.

    Credentials are verified upstream; the caller is identified by the
    X-User-Id header. The session IP is the connecting client address.
    """
    fingerprint: DeviceFingerprint = Field(
        default_factory=DeviceFingerprint,
        description="Client-reported device attributes"
    )
    location: Optional[GeoLocation] = Field(
        default=None, description="Caller-resolved location of the source IP"
    )
    user_agent: Optional[str] = Field(default=None)

    model_config = {
        "json_schema_extra": {
            "example": {
                "fingerprint": {
                    "user_agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0",
                    "screen_resolution": "1920x1080",
                    "timezone": "America/New_York",
                    "language": "en-US",
                    "platform": "Win32",
                    "hardware_concurrency": 8,
                },
                "location": {
                    "city": "New York",
                    "country": "US",
                    "latitude": 40.7128,
                    "longitude": -74.0060,
                },
            }
        }
    }


class TrackActivityRequest(BaseModel):
    """Request body for POST /activity/track.

    The user and session come from the bearer token.
    """
    activity_type: ActivityType
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "json_schema_extra": {
            "example": {
                "activity_type": "video_watch",
                "metadata": {"video_id": "vid_42", "position_seconds": 310},
            }
        }
    }


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class LoginResponse(BaseModel):
    """Response for POST /auth/login."""
    access_token: str = Field(..., description="Signed session token")
    user: Dict[str, Any] = Field(..., description="User record without credentials")
    device: DeviceSummary
    session_id: str
    risk_score: float = Field(
        ..., ge=0.0, le=100.0,
        description="Composite risk of this login"
    )
    risk_breakdown: RiskAssessment
    warnings: List[str] = Field(default_factory=list)
    alerts: List[RiskAlert] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str


class LogoutResponse(MessageResponse):
    session_id: str


class DeviceListResponse(BaseModel):
    count: int
    devices: List[Device]


class DeviceActionResponse(MessageResponse):
    device: Device


class SessionListResponse(BaseModel):
    count: int
    sessions: List[Session]


class ConcurrentCheckResponse(BaseModel):
    current_sessions: int
    max_allowed: int
    message: str


class AccountRiskResponse(BaseModel):
    """Account-level aggregate over unresolved alerts (not a login score)."""
    user_id: str
    risk_score: float = Field(..., ge=0.0, le=100.0)
    timestamp: datetime


class VerifyResponse(BaseModel):
    valid: bool
    user: Dict[str, str]


class ActivityTrackResponse(MessageResponse):
    activity: ActivityLog


class ActivityListResponse(BaseModel):
    count: int
    activities: List[ActivityLog]


class AlertListResponse(BaseModel):
    count: int
    alerts: List[RiskAlert]


class AlertActionResponse(MessageResponse):
    alert: RiskAlert


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human-readable error message")
    request_id: Optional[str] = Field(
        default=None, description="Request ID for debugging"
    )
