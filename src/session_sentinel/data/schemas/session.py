"""Session schema - canonical definition."""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from session_sentinel.common.clock import utc_now


class GeoLocation(BaseModel):
    """Caller-supplied geographic location. Every field is optional."""
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    city: Optional[str] = Field(default=None)
    country: Optional[str] = Field(default=None, description="Country name or code")
    country_code: Optional[str] = Field(default=None, min_length=2, max_length=2)

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class Session(BaseModel):
    """Session entity schema.

    Active until terminated by logout, evicted at the concurrency cap,
    or expired by the inactivity sweep. Never reactivated.
    """
    id: str = Field(default_factory=lambda: f"sess_{uuid4().hex}")
    user_id: str = Field(..., description="Associated user identifier")
    device_id: str = Field(..., description="Associated device identifier")
    ip_address: str = Field(..., description="Client IP address")
    location: Optional[GeoLocation] = Field(default=None)
    user_agent: Optional[str] = Field(default=None)
    started_at: datetime = Field(default_factory=utc_now)
    ended_at: Optional[datetime] = Field(default=None)
    is_active: bool = Field(default=True)
    last_activity_at: datetime = Field(default_factory=utc_now)
    risk_score: float = Field(
        default=0.0, ge=0.0, le=100.0,
        description="Composite risk of the login that opened this session"
    )

    model_config = {
        "validate_assignment": True,
        "json_schema_extra": {
            "example": {
                "id": "sess_abc123",
                "user_id": "user_abc123",
                "device_id": "dev_xyz789",
                "ip_address": "192.168.1.100",
                "location": {
                    "city": "New York",
                    "country": "US",
                    "latitude": 40.7128,
                    "longitude": -74.0060,
                },
                "started_at": "2026-01-25T14:30:00Z",
                "is_active": True,
                "risk_score": 12.5,
            }
        }
    }

    @property
    def country(self) -> Optional[str]:
        return self.location.country if self.location is not None else None

    @property
    def has_coordinates(self) -> bool:
        return self.location is not None and self.location.has_coordinates
