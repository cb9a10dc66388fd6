"""ActivityLog schema - canonical definition."""

from datetime import datetime
from typing import Any, Dict
from uuid import uuid4

from pydantic import BaseModel, Field

from session_sentinel.common.clock import utc_now
from session_sentinel.core.types import ActivityType


class ActivityLog(BaseModel):
    """One client-reported action inside a session.

    Append-only. risk_score carries the composite of the login that
    opened the session, so activity can be filtered by login risk.
    """
    id: str = Field(default_factory=lambda: f"act_{uuid4().hex}")
    user_id: str
    session_id: str
    activity_type: ActivityType
    timestamp: datetime = Field(default_factory=utc_now)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    risk_score: float = Field(default=0.0, ge=0.0, le=100.0)

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": "act_abc123",
                "user_id": "user_abc123",
                "session_id": "sess_abc123",
                "activity_type": "video_watch",
                "timestamp": "2026-01-25T14:42:00Z",
                "metadata": {"video_id": "vid_42", "position_seconds": 310},
                "risk_score": 12.5,
            }
        }
    }
