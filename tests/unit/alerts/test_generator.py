"""Tests for the Alert Generator rules and alert resolution."""

import pytest

from session_sentinel.alerts import AlertGenerator, AlertWarnings
from session_sentinel.common.config import AlertThresholds
from session_sentinel.common.exceptions import AlertNotFoundError
from session_sentinel.core.types import AlertSeverity, AlertType
from session_sentinel.data.schemas import Device
from session_sentinel.risk import RiskAssessment


def assessment(composite=0.0, device=0.0, location=0.0, behavioral=0.0, session=0.0,
               signals=()):
    return RiskAssessment(
        device_risk=device,
        location_risk=location,
        behavioral_risk=behavioral,
        session_risk=session,
        composite_score=composite,
        signals=list(signals),
    )


@pytest.fixture
def generator(alert_store, clock):
    return AlertGenerator(alert_store, clock=clock)


@pytest.fixture
def device():
    return Device(user_id="user_1", fingerprint_hash="b" * 64)


@pytest.fixture
def session(make_session):
    return make_session()


class TestRiskScoreRule:

    @pytest.mark.parametrize("score,severity", [
        (80.0, AlertSeverity.CRITICAL),
        (95.5, AlertSeverity.CRITICAL),
        (79.99, AlertSeverity.HIGH),
        (60.0, AlertSeverity.HIGH),
    ])
    def test_score_bands(self, generator, device, session, score, severity):
        drafts = generator.draft(assessment(composite=score), device, session)

        assert len(drafts) == 1
        assert drafts[0].alert_type == AlertType.HIGH_RISK_SCORE
        assert drafts[0].severity == severity

    def test_below_high_band(self, generator, device, session):
        assert generator.draft(assessment(composite=59.99), device, session) == []

    def test_critical_is_not_also_high(self, generator, device, session):
        drafts = generator.draft(assessment(composite=90.0), device, session)

        assert [d.severity for d in drafts] == [AlertSeverity.CRITICAL]

    def test_critical_description_and_metadata(self, generator, device, session):
        drafts = generator.draft(
            assessment(composite=82.5, device=90, location=80, behavioral=60, session=100),
            device, session,
        )
        critical = drafts[0]

        assert critical.description == "Critical risk score: 82.50"
        assert critical.warning == AlertWarnings.CRITICAL_RISK
        assert critical.metadata == {
            "total_risk_score": 82.5,
            "device_risk": 90.0,
            "location_risk": 80.0,
            "behavioral_risk": 60.0,
            "session_risk": 100.0,
        }

    def test_high_description(self, generator, device, session):
        draft = generator.draft(assessment(composite=61.0), device, session)[0]

        assert draft.description == "High risk score: 61.00"
        assert draft.warning == AlertWarnings.HIGH_RISK
        assert draft.metadata == {"total_risk_score": 61.0}


class TestSuspiciousDeviceRule:

    def test_fires_above_threshold_for_untrusted(self, generator, device, session):
        draft = generator.draft(assessment(device=75.0), device, session)[0]

        assert draft.alert_type == AlertType.SUSPICIOUS_DEVICE
        assert draft.severity == AlertSeverity.HIGH
        assert draft.metadata == {"device_id": device.id, "device_risk": 75.0}

    def test_threshold_is_exclusive(self, generator, device, session):
        assert generator.draft(assessment(device=70.0), device, session) == []

    def test_trusted_device_never_alerts(self, generator, device, session):
        device.is_trusted = True

        assert generator.draft(assessment(device=100.0), device, session) == []


class TestImpossibleTravelRule:

    def test_detected_trip_alerts(self, generator, device, session):
        drafts = generator.draft(
            assessment(location=80.0, signals=["impossible_travel"]), device, session
        )

        assert len(drafts) == 1
        assert drafts[0].alert_type == AlertType.IMPOSSIBLE_TRAVEL
        assert drafts[0].severity == AlertSeverity.CRITICAL
        assert drafts[0].metadata == {"location_risk": 80.0, "session_id": session.id}
        assert drafts[0].warning == AlertWarnings.IMPOSSIBLE_TRAVEL

    def test_score_at_threshold_without_trip(self, generator, device, session):
        drafts = generator.draft(
            assessment(location=80.0, signals=["suspicious_travel", "suspicious_travel"]),
            device, session,
        )

        assert drafts == []

    def test_score_above_threshold(self, generator, device, session):
        drafts = generator.draft(assessment(location=100.0), device, session)

        assert [d.alert_type for d in drafts] == [AlertType.IMPOSSIBLE_TRAVEL]


class TestConcurrentSessionsRule:

    def test_fires_above_threshold(self, generator, device, session, make_session):
        priors = (make_session(), make_session())

        draft = generator.draft(assessment(session=70.0), device, session, priors)[0]

        assert draft.alert_type == AlertType.CONCURRENT_SESSIONS
        assert draft.severity == AlertSeverity.MEDIUM
        assert draft.metadata == {"active_sessions": 3}

    def test_threshold_is_exclusive(self, generator, device, session):
        assert generator.draft(assessment(session=60.0), device, session) == []


class TestGenerate:

    def test_rules_are_independent_and_ordered(self, generator, alert_store, device, session):
        outcome = generator.generate(
            "user_1",
            assessment(composite=85.0, device=90.0, location=100.0, session=80.0,
                       signals=["impossible_travel"]),
            device, session,
        )

        assert [a.alert_type for a in outcome.alerts] == [
            AlertType.HIGH_RISK_SCORE,
            AlertType.SUSPICIOUS_DEVICE,
            AlertType.IMPOSSIBLE_TRAVEL,
            AlertType.CONCURRENT_SESSIONS,
        ]
        assert outcome.warnings == (
            AlertWarnings.CRITICAL_RISK,
            AlertWarnings.SUSPICIOUS_DEVICE,
            AlertWarnings.IMPOSSIBLE_TRAVEL,
            AlertWarnings.CONCURRENT_SESSIONS,
        )
        assert len(alert_store.list_by_user("user_1")) == 4

    def test_alerts_are_persisted_unresolved(self, generator, alert_store, clock, device,
                                             session):
        outcome = generator.generate("user_1", assessment(composite=65.0), device, session)

        stored = alert_store.get(outcome.alerts[0].id)
        assert stored.user_id == "user_1"
        assert stored.is_resolved is False
        assert stored.created_at == clock.now

    def test_nothing_raised(self, generator, alert_store, device, session):
        outcome = generator.generate("user_1", assessment(), device, session)

        assert outcome.alerts == ()
        assert outcome.warnings == ()
        assert alert_store.list_by_user("user_1") == []


class TestResolveAlert:

    @pytest.fixture
    def alert(self, generator, device, session):
        return generator.generate("user_1", assessment(composite=65.0), device, session).alerts[0]

    def test_resolve(self, generator, clock, alert):
        clock.advance(minutes=5)

        resolved = generator.resolve_alert(alert.id, user_id="user_1")

        assert resolved.is_resolved is True
        assert resolved.resolved_at == clock.now

    def test_resolve_twice_keeps_first_timestamp(self, generator, clock, alert):
        first = generator.resolve_alert(alert.id)
        clock.advance(hours=1)

        second = generator.resolve_alert(alert.id)

        assert second.resolved_at == first.resolved_at

    def test_unknown_alert(self, generator):
        with pytest.raises(AlertNotFoundError):
            generator.resolve_alert("alt_missing")

    def test_other_users_alert(self, generator, alert):
        with pytest.raises(AlertNotFoundError):
            generator.resolve_alert(alert.id, user_id="user_2")

    def test_list_unresolved_only(self, generator, clock, device, session, alert):
        clock.advance(minutes=1)
        second = generator.generate("user_1", assessment(composite=90.0), device,
                                    session).alerts[0]
        generator.resolve_alert(alert.id)

        assert [a.id for a in generator.list_alerts("user_1")] == [second.id, alert.id]
        assert [a.id for a in generator.list_alerts("user_1", unresolved_only=True)] == [
            second.id
        ]

    def test_list_is_per_user(self, generator, alert):
        assert generator.list_alerts("user_2") == []


def test_custom_thresholds(alert_store, clock, device, session):
    generator = AlertGenerator(
        alert_store, thresholds=AlertThresholds(critical_risk=50.0, high_risk=30.0), clock=clock
    )

    drafts = generator.draft(assessment(composite=55.0), device, session)

    assert drafts[0].severity == AlertSeverity.CRITICAL
