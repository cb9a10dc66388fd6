"""Alert Generator - turns a RiskAssessment into persisted alerts.

Every rule is checked independently, so one login can raise several
alerts. Each alert that fires also yields one warning string for the
caller, in rule order.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from session_sentinel.common.clock import Clock, utc_now
from session_sentinel.common.config.risk import AlertThresholds
from session_sentinel.common.exceptions import AlertNotFoundError
from session_sentinel.common.logging import get_logger
from session_sentinel.core.types import AlertSeverity, AlertType
from session_sentinel.data.schemas import Device, RiskAlert, Session
from session_sentinel.risk.schema import RiskAssessment
from session_sentinel.storage.base import AlertStore

logger = get_logger(__name__)


class AlertWarnings:
    CRITICAL_RISK = "Critical risk detected. Account may be suspended."
    HIGH_RISK = "High risk detected. Please verify your identity."
    SUSPICIOUS_DEVICE = "Suspicious device detected."
    IMPOSSIBLE_TRAVEL = "Impossible travel detected."
    CONCURRENT_SESSIONS = "Multiple concurrent sessions detected."


@dataclass(frozen=True)
class AlertDraft:
    """An alert that a rule decided to raise, before persistence."""
    alert_type: AlertType
    severity: AlertSeverity
    description: str
    warning: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AlertOutcome:
    alerts: Tuple[RiskAlert, ...] = ()
    warnings: Tuple[str, ...] = ()


class AlertGenerator:
    """Applies alert thresholds and persists the resulting alerts."""

    def __init__(
        self,
        store: AlertStore,
        thresholds: Optional[AlertThresholds] = None,
        clock: Optional[Clock] = None,
    ):
        self._store = store
        self.thresholds = thresholds or AlertThresholds()
        self._clock = clock or utc_now

    def draft(
        self,
        assessment: RiskAssessment,
        device: Device,
        session: Session,
        prior_sessions: Sequence[Session] = (),
    ) -> List[AlertDraft]:
        """Decide which alerts a login raises, without persisting anything."""
        t = self.thresholds
        score = assessment.composite_score
        drafts: List[AlertDraft] = []

        if score >= t.critical_risk:
            drafts.append(AlertDraft(
                alert_type=AlertType.HIGH_RISK_SCORE,
                severity=AlertSeverity.CRITICAL,
                description=f"Critical risk score: {score:.2f}",
                warning=AlertWarnings.CRITICAL_RISK,
                metadata={
                    "total_risk_score": score,
                    "device_risk": assessment.device_risk,
                    "location_risk": assessment.location_risk,
                    "behavioral_risk": assessment.behavioral_risk,
                    "session_risk": assessment.session_risk,
                },
            ))
        elif score >= t.high_risk:
            drafts.append(AlertDraft(
                alert_type=AlertType.HIGH_RISK_SCORE,
                severity=AlertSeverity.HIGH,
                description=f"High risk score: {score:.2f}",
                warning=AlertWarnings.HIGH_RISK,
                metadata={"total_risk_score": score},
            ))

        if assessment.device_risk > t.suspicious_device and not device.is_trusted:
            drafts.append(AlertDraft(
                alert_type=AlertType.SUSPICIOUS_DEVICE,
                severity=AlertSeverity.HIGH,
                description="Login from suspicious or unknown device",
                warning=AlertWarnings.SUSPICIOUS_DEVICE,
                metadata={"device_id": device.id, "device_risk": assessment.device_risk},
            ))

        # A detected impossible trip alerts even when the score sits at the threshold.
        if assessment.location_risk > t.impossible_travel or assessment.impossible_travel:
            drafts.append(AlertDraft(
                alert_type=AlertType.IMPOSSIBLE_TRAVEL,
                severity=AlertSeverity.CRITICAL,
                description="Physical travel between locations is impossible in given timeframe",
                warning=AlertWarnings.IMPOSSIBLE_TRAVEL,
                metadata={"location_risk": assessment.location_risk, "session_id": session.id},
            ))

        if assessment.session_risk > t.concurrent_sessions:
            drafts.append(AlertDraft(
                alert_type=AlertType.CONCURRENT_SESSIONS,
                severity=AlertSeverity.MEDIUM,
                description="Account accessed from multiple locations simultaneously",
                warning=AlertWarnings.CONCURRENT_SESSIONS,
                metadata={"active_sessions": len(prior_sessions) + 1},
            ))

        return drafts

    def generate(
        self,
        user_id: str,
        assessment: RiskAssessment,
        device: Device,
        session: Session,
        prior_sessions: Sequence[Session] = (),
    ) -> AlertOutcome:
        """Persist one alert per triggered rule.

        Returns:
            AlertOutcome with the stored alerts and their warnings, in rule order
        """
        drafts = self.draft(assessment, device, session, prior_sessions)
        now = self._clock()

        alerts = []
        for d in drafts:
            alert = self._store.add(RiskAlert(
                user_id=user_id,
                alert_type=d.alert_type,
                severity=d.severity,
                description=d.description,
                metadata=d.metadata,
                created_at=now,
            ))
            logger.warning(
                f"Raised {d.severity.value} {d.alert_type.value} alert {alert.id} "
                f"for user {user_id}"
            )
            alerts.append(alert)

        return AlertOutcome(
            alerts=tuple(alerts),
            warnings=tuple(d.warning for d in drafts),
        )

    def list_alerts(self, user_id: str, unresolved_only: bool = False) -> List[RiskAlert]:
        return self._store.list_by_user(user_id, unresolved_only=unresolved_only)

    def resolve_alert(self, alert_id: str, user_id: Optional[str] = None) -> RiskAlert:
        """Mark an alert resolved. Resolving a resolved alert changes nothing.

        Args:
            alert_id: Alert to resolve
            user_id: When given, the alert must belong to this user

        Raises:
            AlertNotFoundError: If unknown or owned by another user
        """
        alert = self._store.get(alert_id)
        if alert is None or (user_id is not None and alert.user_id != user_id):
            raise AlertNotFoundError(alert_id)
        if alert.is_resolved:
            return alert

        alert.is_resolved = True
        alert.resolved_at = self._clock()
        alert = self._store.save(alert)
        logger.info(f"Resolved alert {alert_id}")
        return alert
