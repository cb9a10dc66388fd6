"""User schema - canonical definition."""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from session_sentinel.common.clock import utc_now
from session_sentinel.core.types import AccountStatus, SubscriptionTier


class User(BaseModel):
    """User entity schema.

    Owned by the identity layer. SessionSentinel reads it and only writes
    the account-level risk_score and last_login_at.
    """
    id: str = Field(default_factory=lambda: f"user_{uuid4().hex}")
    email: str = Field(..., description="Login email address")
    password_hash: Optional[str] = Field(
        default=None, description="Credential hash, never returned to clients"
    )
    account_status: AccountStatus = Field(default=AccountStatus.ACTIVE)
    subscription_tier: SubscriptionTier = Field(default=SubscriptionTier.FREE)
    max_concurrent_sessions: int = Field(default=1, ge=1)
    max_devices_allowed: int = Field(default=2, ge=1)
    risk_score: float = Field(
        default=0.0, ge=0.0, le=100.0,
        description="Aggregate account risk from unresolved alerts (not a login score)"
    )
    last_login_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)

    model_config = {
        "validate_assignment": True,
        "json_schema_extra": {
            "example": {
                "id": "user_abc123",
                "email": "ada@example.com",
                "account_status": "active",
                "subscription_tier": "basic",
                "max_concurrent_sessions": 2,
                "max_devices_allowed": 3,
                "risk_score": 0.0,
            }
        }
    }

    @classmethod
    def for_tier(cls, email: str, tier: SubscriptionTier, **kwargs: Any) -> "User":
        """Create a user with the default limits of a subscription tier."""
        return cls(
            email=email,
            subscription_tier=tier,
            max_concurrent_sessions=tier.max_concurrent_sessions,
            max_devices_allowed=tier.max_devices_allowed,
            **kwargs,
        )

    def sanitized(self) -> Dict[str, Any]:
        """Public view of the user without credential material."""
        return self.model_dump(mode="json", exclude={"password_hash"})
