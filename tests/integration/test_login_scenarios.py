"""Integration tests for SessionSentinel.

End-to-end login scenarios through the service facade, with in-memory
stores and a fixed clock.
"""

import threading

import pytest

from session_sentinel.alerts import AlertWarnings
from session_sentinel.api.schemas import LoginRequest
from session_sentinel.api.service import SentinelService
from session_sentinel.common.constants import SessionConstants
from session_sentinel.core.types import AlertType, SubscriptionTier
from session_sentinel.data.schemas import DeviceFingerprint, User
from session_sentinel.storage import InMemoryAlertStore


@pytest.fixture
def service(test_config, risk_config, clock):
    service = SentinelService(config=test_config, risk_config=risk_config, clock=clock)
    yield service
    service.shutdown()


def register(service, email, tier):
    return service.register_user(User.for_tier(email, tier))


class TestSessionCap:
    """A FREE account holds one session at a time."""

    def test_second_login_evicts_first(self, service, clock, laptop_fingerprint,
                                       phone_fingerprint, locations):
        user = register(service, "free@example.com", SubscriptionTier.FREE)

        first = service.login(user.id, LoginRequest(
            fingerprint=laptop_fingerprint, location=locations["new_york"]), "10.0.0.1")
        clock.advance(hours=2)
        second = service.login(user.id, LoginRequest(
            fingerprint=phone_fingerprint, location=locations["boston"]), "10.0.0.2")

        active = service.active_sessions(user.id)
        assert [s.id for s in active] == [second.session_id]
        assert service.ledger.get_session(first.session_id).is_active is False
        assert second.risk_breakdown.session_risk == 50.0
        assert second.warnings[-1] == SessionConstants.CAP_REACHED_WARNING
        assert len(service.session_history(user.id)) == 2

    def test_concurrent_logins_respect_cap(self, service, locations):
        user = register(service, "race@example.com", SubscriptionTier.FREE)
        errors = []

        def login(i):
            try:
                service.login(user.id, LoginRequest(
                    fingerprint=DeviceFingerprint(platform="Win32", hardware_concurrency=i),
                    location=locations["new_york"],
                ), f"10.0.0.{i}")
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=login, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert service.ledger.concurrent_count(user.id) == 1
        assert len(service.session_history(user.id, limit=50)) == 8
        assert len(service.list_devices(user.id)) == 8


class TestDeviceReputation:

    def test_returning_device_after_sweep(self, service, clock, laptop_fingerprint, locations):
        """The new-device penalty applies only while the device is young."""
        user = register(service, "loyal@example.com", SubscriptionTier.FREE)
        request = LoginRequest(fingerprint=laptop_fingerprint, location=locations["new_york"])

        first = service.login(user.id, request, "10.0.0.1")
        clock.advance(hours=25)
        expired = service.sweeper.run_once()
        second = service.login(user.id, request, "10.0.0.1")

        assert first.risk_breakdown.device_risk == 75.0
        assert expired == 1
        assert second.device.id == first.device.id
        assert second.device.is_new is False
        assert second.device.trust_score == 55.0
        assert second.risk_breakdown.device_risk == 35.0
        assert second.risk_score == 10.5
        assert second.warnings == []
        assert second.alerts == []

    def test_trusted_device_scores_zero(self, service, clock, laptop_fingerprint, locations):
        user = register(service, "trusting@example.com", SubscriptionTier.PREMIUM)
        request = LoginRequest(fingerprint=laptop_fingerprint, location=locations["new_york"])

        first = service.login(user.id, request, "10.0.0.1")
        service.trust_device(user.id, first.device.id)
        clock.advance(days=2)
        service.sweeper.run_once()
        second = service.login(user.id, request, "10.0.0.1")

        assert second.device.is_trusted is True
        assert second.device.trust_score == 95.0
        assert second.risk_breakdown.device_risk == 0.0


class TestImpossibleTravel:

    def test_new_york_then_tokyo(self, service, clock, laptop_fingerprint, phone_fingerprint,
                                 locations):
        user = register(service, "traveler@example.com", SubscriptionTier.PREMIUM)

        service.login(user.id, LoginRequest(
            fingerprint=laptop_fingerprint, location=locations["new_york"]), "10.0.0.1")
        clock.advance(minutes=45)
        result = service.login(user.id, LoginRequest(
            fingerprint=phone_fingerprint, location=locations["tokyo"]), "10.0.0.2")

        assert result.risk_breakdown.location_risk == 80.0
        assert result.risk_breakdown.session_risk == 20.0
        assert result.risk_score == 46.5
        assert [a.alert_type for a in result.alerts] == [
            AlertType.SUSPICIOUS_DEVICE,
            AlertType.IMPOSSIBLE_TRAVEL,
        ]
        assert result.warnings == [
            AlertWarnings.SUSPICIOUS_DEVICE,
            AlertWarnings.IMPOSSIBLE_TRAVEL,
        ]
        assert service.ledger.concurrent_count(user.id) == 2

        # 15 + 15 + 25
        assert service.account_risk(user.id).risk_score == 55.0

    def test_resolving_alerts_lowers_account_risk(self, service, clock, laptop_fingerprint,
                                                  phone_fingerprint, locations):
        user = register(service, "resolver@example.com", SubscriptionTier.PREMIUM)
        service.login(user.id, LoginRequest(
            fingerprint=laptop_fingerprint, location=locations["new_york"]), "10.0.0.1")
        clock.advance(minutes=45)
        service.login(user.id, LoginRequest(
            fingerprint=phone_fingerprint, location=locations["tokyo"]), "10.0.0.2")

        for alert in service.list_alerts(user.id, unresolved_only=True):
            service.resolve_alert(user.id, alert.id)

        assert service.get_user(user.id).risk_score == 0.0


class InterleavingAlertStore(InMemoryAlertStore):
    """Runs a callback the next time unresolved alerts are read."""

    def __init__(self):
        super().__init__()
        self.on_read = None

    def list_unresolved_since(self, user_id, since):
        alerts = super().list_unresolved_since(user_id, since)
        callback, self.on_read = self.on_read, None
        if callback is not None:
            callback()
        return alerts


class TestAccountRiskConsistency:
    """Account risk refreshes serialize with logins for the same user."""

    @pytest.mark.parametrize("operation", ["account_risk", "resolve_alert"])
    def test_refresh_does_not_overwrite_concurrent_login(
        self, test_config, risk_config, clock, laptop_fingerprint, phone_fingerprint,
        locations, operation,
    ):
        alerts = InterleavingAlertStore()
        service = SentinelService(config=test_config, risk_config=risk_config,
                                  alerts=alerts, clock=clock)
        user = register(service, "interleave@example.com", SubscriptionTier.BASIC)
        service.login(user.id, LoginRequest(
            fingerprint=laptop_fingerprint, location=locations["new_york"]), "10.0.0.1")
        alert = service.list_alerts(user.id)[0]
        clock.advance(hours=1)

        second = threading.Thread(target=service.login, args=(user.id, LoginRequest(
            fingerprint=phone_fingerprint, location=locations["boston"]), "10.0.0.2"))

        def start_second_login():
            second.start()
            second.join(timeout=0.5)

        alerts.on_read = start_second_login
        if operation == "account_risk":
            service.account_risk(user.id)
        else:
            service.resolve_alert(user.id, alert.id)
        second.join(timeout=5)

        stored = service.get_user(user.id)
        assert not second.is_alive()
        assert stored.last_login_at == clock.now
        assert stored.risk_score == service.aggregator.calculate(user.id)
        assert len(service.session_history(user.id)) == 2
        service.shutdown()


class TestIsolation:

    def test_users_do_not_share_devices_or_sessions(self, service, laptop_fingerprint,
                                                    locations):
        ada = register(service, "ada@example.com", SubscriptionTier.BASIC)
        bob = register(service, "bob@example.com", SubscriptionTier.BASIC)
        request = LoginRequest(fingerprint=laptop_fingerprint, location=locations["london"])

        a = service.login(ada.id, request, "10.0.0.1")
        b = service.login(bob.id, request, "10.0.0.2")

        assert a.device.id != b.device.id
        assert b.device.is_new is True
        assert [s.id for s in service.active_sessions(ada.id)] == [a.session_id]
        assert [s.id for s in service.active_sessions(bob.id)] == [b.session_id]
