"""Sentinel Service - wires the engine together for the API layer.

Owns the stores, the per-user lock table, the login flow and the
background sweeper. The gateway talks only to this class.
"""

from typing import Any, Dict, List, Optional

from session_sentinel.activity import ActivityTracker
from session_sentinel.alerts import AccountRiskAggregator, AlertGenerator
from session_sentinel.api.schemas import (
    AccountRiskResponse,
    ConcurrentCheckResponse,
    LoginRequest,
    LoginResponse,
    VerifyResponse,
)
from session_sentinel.auth import TokenIssuer
from session_sentinel.common.clock import Clock, utc_now
from session_sentinel.common.config import Config, RiskConfig, get_config, load_risk_config
from session_sentinel.common.constants import ActivityConstants, SessionConstants
from session_sentinel.common.exceptions import (
    InvalidTokenError,
    SessionNotFoundError,
    UserNotFoundError,
)
from session_sentinel.common.logging import get_logger
from session_sentinel.core.types import AccountStatus, ActivityType
from session_sentinel.data.schemas import ActivityLog, Device, RiskAlert, Session, User
from session_sentinel.devices import DeviceIdentityResolver
from session_sentinel.monitoring import MetricsCollector
from session_sentinel.orchestration import LoginAttempt, LoginFlow
from session_sentinel.risk import RiskEvaluator
from session_sentinel.sessions import InactivitySweeper, KeyedLock, SessionLedger
from session_sentinel.storage import (
    ActivityStore,
    AlertStore,
    DeviceStore,
    InMemoryActivityStore,
    InMemoryAlertStore,
    InMemoryDeviceStore,
    InMemorySessionStore,
    InMemoryUserStore,
    SessionStore,
    UserStore,
)

logger = get_logger(__name__)


def _load_rules(config: Config) -> RiskConfig:
    rules_file = config.resolved_risk_rules_file
    if config.risk_rules_file is None and not rules_file.exists():
        logger.info("No risk rules file found, using built-in defaults")
        return RiskConfig()
    return load_risk_config(rules_file)


class SentinelService:
    """Service facade over the login-risk engine.

    Every dependency can be injected; anything omitted is built from the
    Config (in-memory stores, rules from the configured YAML file).
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        risk_config: Optional[RiskConfig] = None,
        users: Optional[UserStore] = None,
        devices: Optional[DeviceStore] = None,
        sessions: Optional[SessionStore] = None,
        alerts: Optional[AlertStore] = None,
        clock: Optional[Clock] = None,
        metrics: Optional[MetricsCollector] = None,
        activities: Optional[ActivityStore] = None,
    ):
        self.config = config or get_config()
        self.risk_config = risk_config or _load_rules(self.config)
        self.clock = clock or utc_now

        self.users = users or InMemoryUserStore()
        self.locks = KeyedLock()

        self.resolver = DeviceIdentityResolver(devices or InMemoryDeviceStore(), clock=self.clock)
        self.ledger = SessionLedger(
            sessions or InMemorySessionStore(),
            clock=self.clock,
            inactivity_timeout_hours=self.config.inactivity_timeout_hours,
        )
        self.activity = ActivityTracker(
            activities or InMemoryActivityStore(), self.ledger, clock=self.clock
        )
        alert_store = alerts or InMemoryAlertStore()
        self.alerts = AlertGenerator(alert_store, self.risk_config.alerts, clock=self.clock)
        self.aggregator = AccountRiskAggregator(alert_store, self.users, clock=self.clock)
        self.issuer = TokenIssuer(
            secret=self.config.token_secret,
            algorithm=self.config.token_algorithm,
            expire_minutes=self.config.token_expire_minutes,
            clock=self.clock,
        )

        if metrics is None and self.config.metrics_enabled:
            metrics = MetricsCollector.from_config(self.config)
        self.metrics = metrics

        self.flow = LoginFlow(
            users=self.users,
            resolver=self.resolver,
            ledger=self.ledger,
            evaluator=RiskEvaluator(self.risk_config),
            alerts=self.alerts,
            aggregator=self.aggregator,
            issuer=self.issuer,
            locks=self.locks,
            clock=self.clock,
            metrics=self.metrics,
        )
        self.sweeper = InactivitySweeper(
            self.ledger,
            interval_seconds=self.config.sweep_interval_seconds,
            metrics=self.metrics,
        )

    def start(self) -> None:
        """Start background work (the inactivity sweeper, if enabled)."""
        if self.config.sweep_enabled:
            self.sweeper.start()

    def shutdown(self) -> None:
        self.sweeper.shutdown()
        if self.metrics is not None:
            try:
                self.metrics.shutdown()
            except IOError as e:
                logger.error(f"Failed to flush metrics on shutdown: {e}")
        logger.info("SentinelService shutdown complete")

    # ----- users -----

    def register_user(self, user: User) -> User:
        """Add a user record (normally owned by the identity layer)."""
        return self.users.add(user)

    def get_user(self, user_id: str) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    # ----- auth -----

    def login(self, user_id: str, request: LoginRequest, client_ip: str) -> LoginResponse:
        result = self.flow.login(LoginAttempt(
            user_id=user_id,
            fingerprint=request.fingerprint,
            ip_address=client_ip,
            location=request.location,
            user_agent=request.user_agent,
        ))
        return LoginResponse(
            access_token=result.access_token,
            user=result.user,
            device=result.device,
            session_id=result.session_id,
            risk_score=result.composite_risk_score,
            risk_breakdown=result.assessment,
            warnings=result.warnings,
            alerts=result.alerts,
        )

    def logout(self, token: str) -> str:
        return self.flow.logout(token)

    def verify_token(self, token: str) -> VerifyResponse:
        """Check a token and that its account can still use it."""
        claims = self.issuer.decode(token)
        user = self.users.get(claims["sub"])
        if user is None or user.account_status != AccountStatus.ACTIVE:
            raise InvalidTokenError("Invalid or inactive account")
        return VerifyResponse(
            valid=True,
            user={
                "user_id": user.id,
                "email": user.email,
                "session_id": claims["session_id"],
            },
        )

    # ----- devices -----

    def list_devices(self, user_id: str) -> List[Device]:
        return self.resolver.list_devices(user_id)

    def trust_device(self, user_id: str, device_id: str) -> Device:
        with self.locks.hold(user_id):
            return self.resolver.trust_device(device_id, user_id)

    def remove_device(self, user_id: str, device_id: str) -> None:
        with self.locks.hold(user_id):
            self.resolver.remove_device(device_id, user_id)

    # ----- sessions -----

    def active_sessions(self, user_id: str) -> List[Session]:
        return self.ledger.active_sessions(user_id)

    def session_history(
        self, user_id: str, limit: int = SessionConstants.API_HISTORY_LIMIT
    ) -> List[Session]:
        return self.ledger.recent_sessions(user_id, limit=limit)

    def concurrent_check(self, user_id: str) -> ConcurrentCheckResponse:
        user = self.get_user(user_id)
        count = self.ledger.concurrent_count(user_id)
        message = (
            "Multiple concurrent sessions detected"
            if count > SessionConstants.CONCURRENT_CHECK_WARNING_COUNT
            else "Normal usage"
        )
        return ConcurrentCheckResponse(
            current_sessions=count,
            max_allowed=user.max_concurrent_sessions,
            message=message,
        )

    def terminate_session(self, user_id: str, session_id: str) -> Session:
        # The ledger terminates unconditionally; ownership is checked here.
        session = self.ledger.get_session(session_id)
        if session.user_id != user_id:
            raise SessionNotFoundError(session_id)
        return self.ledger.terminate(session_id)

    # ----- risk -----

    def account_risk(self, user_id: str) -> AccountRiskResponse:
        with self.locks.hold(user_id):
            user = self.aggregator.refresh(user_id)
        return AccountRiskResponse(
            user_id=user.id,
            risk_score=user.risk_score,
            timestamp=self.clock(),
        )

    def list_alerts(self, user_id: str, unresolved_only: bool = False) -> List[RiskAlert]:
        return self.alerts.list_alerts(user_id, unresolved_only=unresolved_only)

    def resolve_alert(self, user_id: str, alert_id: str) -> RiskAlert:
        with self.locks.hold(user_id):
            alert = self.alerts.resolve_alert(alert_id, user_id=user_id)
            self.aggregator.refresh(user_id)
        return alert

    # ----- activity -----

    def track_activity(
        self,
        token: str,
        activity_type: ActivityType,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ActivityLog:
        """Record activity in the session named by the token."""
        claims = self.issuer.decode(token)
        return self.activity.track(
            claims["sub"], claims["session_id"], activity_type, metadata
        )

    def activity_history(
        self, user_id: str, limit: int = ActivityConstants.DEFAULT_HISTORY_LIMIT
    ) -> List[ActivityLog]:
        return self.activity.history(user_id, limit=limit)

    def session_activity(self, user_id: str, session_id: str) -> List[ActivityLog]:
        return self.activity.session_activity(user_id, session_id)
