"""Risk Evaluator input and output schemas."""

from datetime import datetime
from typing import List, Tuple

from pydantic import BaseModel, Field

from session_sentinel.data.schemas import Device, Session, User

IMPOSSIBLE_TRAVEL_SIGNAL = "impossible_travel"


class EvaluationContext(BaseModel):
    """Everything one login evaluation reads, assembled once by the caller.

    prior_sessions are the user's sessions that were active when the
    login arrived, oldest first. They do not include the new session.
    """
    user: User
    device: Device
    session: Session
    prior_sessions: Tuple[Session, ...] = Field(default_factory=tuple)
    evaluated_at: datetime

    model_config = {"frozen": True}


class RiskAssessment(BaseModel):
    """Sub-scores and composite for one login.

    composite_score is the per-login figure. It is unrelated to the
    account-level aggregate kept on User.risk_score.
    """
    device_risk: float = Field(..., ge=0.0, le=100.0)
    location_risk: float = Field(..., ge=0.0, le=100.0)
    behavioral_risk: float = Field(..., ge=0.0, le=100.0)
    session_risk: float = Field(..., ge=0.0, le=100.0)
    composite_score: float = Field(..., ge=0.0, le=100.0)
    signals: List[str] = Field(
        default_factory=list,
        description="Names of the scoring rules that contributed",
    )

    @property
    def impossible_travel(self) -> bool:
        return IMPOSSIBLE_TRAVEL_SIGNAL in self.signals

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "device_risk": 60.0,
                "location_risk": 80.0,
                "behavioral_risk": 0.0,
                "session_risk": 50.0,
                "composite_score": 48.0,
                "signals": ["new_device", "moderate_trust", "untrusted_device",
                            "impossible_travel", "session_cap_reached"],
            }
        }
    }
