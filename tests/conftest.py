"""Shared fixtures: a controllable clock, in-memory stores, sample data."""

from datetime import datetime, timedelta, timezone

import pytest

from session_sentinel.common.config import Config, RiskConfig
from session_sentinel.core.types import SubscriptionTier
from session_sentinel.data.schemas import DeviceFingerprint, GeoLocation, Session, User
from session_sentinel.storage import (
    InMemoryActivityStore,
    InMemoryAlertStore,
    InMemoryDeviceStore,
    InMemorySessionStore,
    InMemoryUserStore,
)


BASE_TIME = datetime(2026, 3, 2, 14, 0, tzinfo=timezone.utc)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = BASE_TIME):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def device_store():
    return InMemoryDeviceStore()


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture
def alert_store():
    return InMemoryAlertStore()


@pytest.fixture
def activity_store():
    return InMemoryActivityStore()


@pytest.fixture
def user(user_store):
    """A registered FREE-tier user (one concurrent session)."""
    return user_store.add(User.for_tier("ada@example.com", SubscriptionTier.FREE))


@pytest.fixture
def test_config():
    """Config with background work disabled."""
    return Config(sweep_enabled=False, metrics_enabled=False)


@pytest.fixture
def risk_config():
    return RiskConfig()


@pytest.fixture
def locations():
    return {
        "new_york": GeoLocation(
            city="New York", country="US", country_code="US",
            latitude=40.7128, longitude=-74.0060,
        ),
        "boston": GeoLocation(
            city="Boston", country="US", country_code="US",
            latitude=42.3601, longitude=-71.0589,
        ),
        "tokyo": GeoLocation(
            city="Tokyo", country="JP", country_code="JP",
            latitude=35.6762, longitude=139.6503,
        ),
        "london": GeoLocation(
            city="London", country="GB", country_code="GB",
            latitude=51.5074, longitude=-0.1278,
        ),
        "paris": GeoLocation(
            city="Paris", country="FR", country_code="FR",
            latitude=48.8566, longitude=2.3522,
        ),
    }


@pytest.fixture
def laptop_fingerprint():
    return DeviceFingerprint(
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0",
        screen_resolution="1920x1080",
        timezone="America/New_York",
        language="en-US",
        platform="Win32",
        hardware_concurrency=8,
        canvas="c4f1e2",
        webgl="ANGLE (NVIDIA)",
    )


@pytest.fixture
def phone_fingerprint():
    return DeviceFingerprint(
        user_agent="Mozilla/5.0 (Linux; Android 12) Mobile Safari/537.36",
        screen_resolution="1080x2400",
        timezone="Asia/Tokyo",
        language="ja-JP",
        platform="Linux armv8l",
        hardware_concurrency=8,
    )


@pytest.fixture
def make_session():
    """Factory for Session records at a given time and place."""

    def _make(user_id="user_1", device_id="dev_1", started_at=BASE_TIME,
              location=None, is_active=True, **kwargs):
        return Session(
            user_id=user_id,
            device_id=device_id,
            ip_address=kwargs.pop("ip_address", "203.0.113.10"),
            location=location,
            started_at=started_at,
            last_activity_at=kwargs.pop("last_activity_at", started_at),
            is_active=is_active,
            **kwargs,
        )

    return _make
