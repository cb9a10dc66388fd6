"""RiskAlert schema - canonical definition."""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from session_sentinel.common.clock import utc_now
from session_sentinel.core.types import AlertSeverity, AlertType


class RiskAlert(BaseModel):
    """Risk alert entity schema.

    Created by a login evaluation, resolved only by an explicit action.
    """
    id: str = Field(default_factory=lambda: f"alt_{uuid4().hex}")
    user_id: str = Field(..., description="Target user account")
    alert_type: AlertType
    severity: AlertSeverity
    description: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    is_resolved: bool = Field(default=False)
    resolved_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)

    model_config = {
        "validate_assignment": True,
        "json_schema_extra": {
            "example": {
                "id": "alt_abc123",
                "user_id": "user_abc123",
                "alert_type": "impossible_travel",
                "severity": "critical",
                "description": "Physical travel between locations is impossible in given timeframe",
                "metadata": {"location_risk": 80.0, "session_id": "sess_abc123"},
                "is_resolved": False,
            }
        }
    }
