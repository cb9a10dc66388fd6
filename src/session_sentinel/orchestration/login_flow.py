"""Login Flow - the per-login pipeline.

Order of operations for one login:
1. Account status check
2. Device identity resolution (trust bump or registration)
3. Session ledger: snapshot active sessions, evict oldest at cap, open session
4. Risk evaluation over the snapshot
5. Alert generation and warnings
6. last_login_at and account aggregate refresh
7. Token issuance

Steps 2-6 run under the user's lock so concurrent logins for the same
account cannot both slip under the session cap or lose a trust bump.
"""

import time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from session_sentinel.alerts import AccountRiskAggregator, AlertGenerator
from session_sentinel.auth import TokenIssuer
from session_sentinel.common.clock import Clock, utc_now
from session_sentinel.common.constants import SessionConstants
from session_sentinel.common.exceptions import AccountNotActiveError, UserNotFoundError
from session_sentinel.common.logging import get_logger
from session_sentinel.core.types import AccountStatus
from session_sentinel.data.schemas import (
    DeviceFingerprint,
    DeviceSummary,
    GeoLocation,
    RiskAlert,
)
from session_sentinel.devices import DeviceIdentityResolver
from session_sentinel.risk import EvaluationContext, RiskAssessment, RiskEvaluator
from session_sentinel.sessions import KeyedLock, SessionLedger
from session_sentinel.storage.base import UserStore

logger = get_logger(__name__)


class LoginAttempt(BaseModel):
    """A login whose credentials were already verified upstream."""
    user_id: str
    fingerprint: DeviceFingerprint = Field(default_factory=DeviceFingerprint)
    ip_address: str
    location: Optional[GeoLocation] = None
    user_agent: Optional[str] = Field(
        default=None, description="Falls back to the fingerprint's user agent"
    )


class LoginResult(BaseModel):
    access_token: str
    user: Dict[str, Any] = Field(..., description="Sanitized user record")
    device: DeviceSummary
    session_id: str
    composite_risk_score: float = Field(..., ge=0.0, le=100.0)
    assessment: RiskAssessment
    warnings: List[str] = Field(default_factory=list)
    alerts: List[RiskAlert] = Field(default_factory=list)


class LoginFlow:
    """Wires the resolver, ledger, evaluator and alerting into one login."""

    def __init__(
        self,
        users: UserStore,
        resolver: DeviceIdentityResolver,
        ledger: SessionLedger,
        evaluator: RiskEvaluator,
        alerts: AlertGenerator,
        aggregator: AccountRiskAggregator,
        issuer: TokenIssuer,
        locks: Optional[KeyedLock] = None,
        clock: Optional[Clock] = None,
        metrics: Optional[Any] = None,
    ):
        self.users = users
        self.resolver = resolver
        self.ledger = ledger
        self.evaluator = evaluator
        self.alerts = alerts
        self.aggregator = aggregator
        self.issuer = issuer
        self.locks = locks or KeyedLock()
        self._clock = clock or utc_now
        self.metrics = metrics

    def login(self, attempt: LoginAttempt) -> LoginResult:
        """Evaluate a login and open its session.

        Raises:
            UserNotFoundError: If the user is unknown
            AccountNotActiveError: If the account is not ACTIVE
        """
        started = time.perf_counter()

        with self.locks.hold(attempt.user_id):
            user = self.users.get(attempt.user_id)
            if user is None:
                raise UserNotFoundError(attempt.user_id)
            if user.account_status != AccountStatus.ACTIVE:
                raise AccountNotActiveError(user.id, user.account_status.value)

            resolution = self.resolver.resolve(user.id, attempt.fingerprint)
            device = resolution.device

            opening = self.ledger.open_session(
                user,
                device_id=device.id,
                ip_address=attempt.ip_address,
                location=attempt.location,
                user_agent=attempt.user_agent or attempt.fingerprint.user_agent,
            )

            now = self._clock()
            assessment = self.evaluator.evaluate(EvaluationContext(
                user=user,
                device=device,
                session=opening.session,
                prior_sessions=opening.prior_sessions,
                evaluated_at=now,
            ))
            session = self.ledger.record_risk(opening.session.id, assessment.composite_score)

            outcome = self.alerts.generate(
                user.id, assessment, device, session, opening.prior_sessions
            )
            warnings = list(outcome.warnings)
            if opening.cap_reached:
                warnings.append(SessionConstants.CAP_REACHED_WARNING)

            user.last_login_at = now
            self.users.save(user)
            user = self.aggregator.refresh(user.id)

        token = self.issuer.issue(user, session.id)
        latency_ms = (time.perf_counter() - started) * 1000

        logger.info(
            f"Login for user {user.id}: session={session.id} "
            f"composite={assessment.composite_score:.2f} "
            f"alerts={len(outcome.alerts)} evicted={opening.cap_reached}"
        )
        self._record_metrics(assessment, outcome.alerts, opening.cap_reached,
                             resolution.is_new, latency_ms)

        return LoginResult(
            access_token=token,
            user=user.sanitized(),
            device=device.summary(is_new=resolution.is_new),
            session_id=session.id,
            composite_risk_score=assessment.composite_score,
            assessment=assessment,
            warnings=warnings,
            alerts=list(outcome.alerts),
        )

    def logout(self, token: str) -> str:
        """End the session a token was issued for.

        Returns:
            The terminated session id

        Raises:
            InvalidTokenError: If the token does not validate
            SessionNotFoundError: If its session no longer exists
        """
        claims = self.issuer.decode(token)
        session = self.ledger.terminate(claims["session_id"])
        logger.info(f"Logout for user {claims['sub']}: session={session.id}")
        return session.id

    def _record_metrics(self, assessment, alerts, evicted, new_device, latency_ms) -> None:
        if self.metrics is None:
            return
        try:
            self.metrics.record_login_evaluation(
                composite_score=assessment.composite_score,
                alert_types=[a.alert_type.value for a in alerts],
                evicted=evicted,
                new_device=new_device,
                latency_ms=latency_ms,
            )
        except IOError as e:
            # Metrics failure should not fail the login
            logger.error(f"Failed to record login metrics: {e}")
