"""Tests for the Session Ledger."""

import pytest

from session_sentinel.common.exceptions import InvalidInputError, SessionNotFoundError
from session_sentinel.core.types import SubscriptionTier
from session_sentinel.data.schemas import User
from session_sentinel.sessions import SessionLedger


@pytest.fixture
def ledger(session_store, clock):
    return SessionLedger(session_store, clock=clock)


def _user(cap: int) -> User:
    return User(email=f"cap{cap}@example.com", max_concurrent_sessions=cap)


class TestOpenSession:
    """Session creation and cap enforcement."""

    def test_first_login_opens_session(self, ledger, clock, user, locations):
        opening = ledger.open_session(user, "dev_1", "198.51.100.7",
                                      location=locations["new_york"], user_agent="ua")

        session = opening.session
        assert session.is_active is True
        assert session.started_at == clock.now
        assert session.last_activity_at == clock.now
        assert session.ip_address == "198.51.100.7"
        assert session.location.city == "New York"
        assert session.user_agent == "ua"
        assert opening.prior_sessions == ()
        assert opening.evicted is None
        assert opening.cap_reached is False

    def test_under_cap_keeps_existing_sessions(self, ledger, clock):
        user = _user(3)
        ledger.open_session(user, "dev_1", "ip")
        clock.advance(minutes=1)
        opening = ledger.open_session(user, "dev_2", "ip")

        assert opening.evicted is None
        assert len(opening.prior_sessions) == 1
        assert ledger.concurrent_count(user.id) == 2

    @pytest.mark.parametrize("cap", [1, 2, 3, 5])
    def test_at_cap_evicts_exactly_the_oldest(self, ledger, clock, cap):
        user = _user(cap)
        opened = []
        for i in range(cap):
            opened.append(ledger.open_session(user, f"dev_{i}", "ip").session)
            clock.advance(minutes=10)

        opening = ledger.open_session(user, "dev_new", "ip")

        assert opening.evicted.id == opened[0].id
        assert opening.cap_reached is True
        assert ledger.concurrent_count(user.id) == cap
        evicted = ledger.get_session(opened[0].id)
        assert evicted.is_active is False
        assert evicted.ended_at == clock.now
        for survivor in opened[1:]:
            assert ledger.get_session(survivor.id).is_active is True

    def test_prior_snapshot_is_taken_before_eviction(self, ledger, clock):
        user = _user(1)
        first = ledger.open_session(user, "dev_1", "ip").session
        clock.advance(minutes=5)

        opening = ledger.open_session(user, "dev_2", "ip")

        assert [s.id for s in opening.prior_sessions] == [first.id]
        assert opening.prior_sessions[0].is_active is True
        assert opening.prior_sessions[0].ended_at is None
        assert ledger.get_session(first.id).is_active is False

    def test_over_cap_evicts_only_one(self, ledger, session_store, clock, make_session):
        user = _user(2)
        for i in range(4):
            session_store.add(make_session(user_id=user.id, device_id=f"dev_{i}",
                                           started_at=clock.now))
            clock.advance(minutes=1)

        opening = ledger.open_session(user, "dev_new", "ip")

        assert len(opening.prior_sessions) == 4
        assert ledger.concurrent_count(user.id) == 4

    def test_tier_limits(self, ledger, clock):
        user = User.for_tier("basic@example.com", SubscriptionTier.BASIC)
        for i in range(3):
            ledger.open_session(user, f"dev_{i}", "ip")
            clock.advance(minutes=1)

        assert ledger.concurrent_count(user.id) == 2


class TestTerminate:

    def test_terminate_active_session(self, ledger, clock, user):
        session = ledger.open_session(user, "dev_1", "ip").session
        clock.advance(hours=1)

        ended = ledger.terminate(session.id)

        assert ended.is_active is False
        assert ended.ended_at == clock.now

    def test_terminate_is_idempotent(self, ledger, clock, user):
        session = ledger.open_session(user, "dev_1", "ip").session
        first = ledger.terminate(session.id)
        clock.advance(hours=1)

        second = ledger.terminate(session.id)

        assert second.is_active is False
        assert second.ended_at == first.ended_at

    def test_terminate_after_sweep_keeps_sweep_end_time(self, ledger, clock, user):
        session = ledger.open_session(user, "dev_1", "ip").session
        clock.advance(hours=25)
        assert ledger.sweep_inactive() == 1
        swept_at = clock.now
        clock.advance(minutes=5)

        ended = ledger.terminate(session.id)

        assert ended.is_active is False
        assert ended.ended_at == swept_at

    def test_terminate_unknown_session(self, ledger):
        with pytest.raises(SessionNotFoundError):
            ledger.terminate("sess_missing")

    def test_get_unknown_session(self, ledger):
        with pytest.raises(SessionNotFoundError):
            ledger.get_session("sess_missing")


class TestSweep:

    def test_sweep_expires_only_idle_sessions(self, ledger, session_store, clock, make_session):
        stale = session_store.add(make_session(started_at=clock.now))
        clock.advance(hours=20)
        fresh = session_store.add(make_session(started_at=clock.now))
        clock.advance(hours=5)

        assert ledger.sweep_inactive() == 1
        assert ledger.get_session(stale.id).is_active is False
        assert ledger.get_session(stale.id).ended_at == clock.now
        assert ledger.get_session(fresh.id).is_active is True

    def test_touch_keeps_session_alive(self, ledger, clock, user):
        session = ledger.open_session(user, "dev_1", "ip").session
        clock.advance(hours=23)
        ledger.touch(session.id)
        clock.advance(hours=23)

        assert ledger.sweep_inactive() == 0
        assert ledger.get_session(session.id).is_active is True

    def test_sweep_leaves_ended_sessions_alone(self, ledger, clock, user):
        session = ledger.open_session(user, "dev_1", "ip").session
        ended = ledger.terminate(session.id)
        clock.advance(days=3)

        assert ledger.sweep_inactive() == 0
        assert ledger.get_session(session.id).ended_at == ended.ended_at

    def test_touch_does_not_revive(self, ledger, user):
        session = ledger.open_session(user, "dev_1", "ip").session
        ledger.terminate(session.id)

        assert ledger.touch(session.id).is_active is False

    def test_touch_after_sweep_does_not_revive(self, ledger, clock, user):
        session = ledger.open_session(user, "dev_1", "ip").session
        clock.advance(hours=25)
        ledger.sweep_inactive()
        swept = ledger.get_session(session.id)
        clock.advance(minutes=1)

        touched = ledger.touch(session.id)

        assert touched.is_active is False
        assert touched.last_activity_at == swept.last_activity_at
        assert ledger.active_sessions(user.id) == []

    def test_custom_timeout(self, session_store, clock, make_session):
        ledger = SessionLedger(session_store, clock=clock, inactivity_timeout_hours=1)
        session_store.add(make_session(started_at=clock.now))
        clock.advance(minutes=61)

        assert ledger.sweep_inactive() == 1


class TestQueries:

    def test_active_sessions_newest_first(self, ledger, clock):
        user = _user(5)
        first = ledger.open_session(user, "dev_1", "ip").session
        clock.advance(minutes=1)
        second = ledger.open_session(user, "dev_2", "ip").session

        assert [s.id for s in ledger.active_sessions(user.id)] == [second.id, first.id]

    def test_recent_sessions_includes_ended_and_limits(self, ledger, clock):
        user = _user(1)
        ids = []
        for i in range(12):
            ids.append(ledger.open_session(user, f"dev_{i}", "ip").session.id)
            clock.advance(minutes=1)

        recent = ledger.recent_sessions(user.id)

        assert len(recent) == 10
        assert recent[0].id == ids[-1]
        assert len(ledger.recent_sessions(user.id, limit=20)) == 12

    @pytest.mark.parametrize("limit", [0, -3])
    def test_recent_sessions_rejects_non_positive_limit(self, ledger, user, limit):
        with pytest.raises(InvalidInputError):
            ledger.recent_sessions(user.id, limit=limit)

    def test_record_risk(self, ledger, user):
        session = ledger.open_session(user, "dev_1", "ip").session

        assert ledger.record_risk(session.id, 42.5).risk_score == 42.5
