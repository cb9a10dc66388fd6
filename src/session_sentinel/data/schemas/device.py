"""Device schemas - canonical definition."""

from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional, Tuple
from uuid import uuid4

from pydantic import BaseModel, Field

from session_sentinel.common.clock import utc_now
from session_sentinel.core.types import DeviceType


class DeviceFingerprint(BaseModel):
    """Client-reported device attributes. Any field may be absent."""
    user_agent: Optional[str] = Field(default=None)
    screen_resolution: Optional[str] = Field(default=None)
    timezone: Optional[str] = Field(default=None)
    language: Optional[str] = Field(default=None)
    platform: Optional[str] = Field(default=None)
    hardware_concurrency: Optional[int] = Field(default=None, ge=0)
    canvas: Optional[str] = Field(default=None, description="Canvas rendering signature")
    webgl: Optional[str] = Field(default=None, description="WebGL renderer signature")

    # Hash input order. Changing it changes every stored fingerprint.
    HASH_FIELDS: ClassVar[Tuple[str, ...]] = (
        "user_agent",
        "screen_resolution",
        "timezone",
        "language",
        "platform",
        "hardware_concurrency",
        "canvas",
        "webgl",
    )

    def components(self) -> List[str]:
        """Attribute values in hash order, empty string for absent fields."""
        values = []
        for name in self.HASH_FIELDS:
            value = getattr(self, name)
            values.append("" if value is None else str(value))
        return values

    def attributes(self) -> Dict[str, Any]:
        """Present attributes only, for merging into device metadata."""
        return self.model_dump(exclude_none=True)

    model_config = {
        "json_schema_extra": {
            "example": {
                "user_agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0",
                "screen_resolution": "1920x1080",
                "timezone": "America/New_York",
                "language": "en-US",
                "platform": "Win32",
                "hardware_concurrency": 8,
                "canvas": "c4f1e2",
                "webgl": "ANGLE (NVIDIA)",
            }
        }
    }


class Device(BaseModel):
    """Device entity schema.

    Exactly one device exists per (user_id, fingerprint_hash).
    """
    id: str = Field(default_factory=lambda: f"dev_{uuid4().hex}")
    user_id: str = Field(..., description="Owning user")
    fingerprint_hash: str = Field(..., min_length=64, max_length=64)
    device_name: Optional[str] = Field(default=None)
    device_type: DeviceType = Field(default=DeviceType.WEB)
    trust_score: float = Field(default=50.0, ge=0.0, le=100.0)
    is_trusted: bool = Field(default=False)
    first_seen_at: datetime = Field(default_factory=utc_now)
    last_seen_at: datetime = Field(default_factory=utc_now)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"validate_assignment": True}

    def summary(self, is_new: bool) -> "DeviceSummary":
        return DeviceSummary(
            id=self.id,
            is_new=is_new,
            is_trusted=self.is_trusted,
            trust_score=self.trust_score,
        )


class DeviceSummary(BaseModel):
    """Device view returned with a login result."""
    id: str
    is_new: bool
    is_trusted: bool
    trust_score: float
