"""Tests for the background inactivity sweeper and per-user locks."""

import threading
import time
from unittest.mock import MagicMock

import pytest

from session_sentinel.sessions import InactivitySweeper, KeyedLock, SessionLedger


@pytest.fixture
def ledger(session_store, clock):
    return SessionLedger(session_store, clock=clock)


class TestInactivitySweeper:

    def test_run_once_updates_stats(self, ledger, session_store, clock, make_session):
        session_store.add(make_session(started_at=clock.now))
        clock.advance(hours=25)
        sweeper = InactivitySweeper(ledger, interval_seconds=60)

        assert sweeper.run_once() == 1

        stats = sweeper.get_stats()
        assert stats["runs"] == 1
        assert stats["sessions_expired"] == 1
        assert stats["failures"] == 0
        assert stats["last_run_at"] is not None

    def test_run_once_reports_to_metrics(self, ledger):
        metrics = MagicMock()
        sweeper = InactivitySweeper(ledger, metrics=metrics)

        sweeper.run_once()

        metrics.record_sweep.assert_called_once_with(0)

    def test_background_thread_sweeps_and_stops(self, ledger, session_store, clock,
                                                make_session):
        session = session_store.add(make_session(started_at=clock.now))
        clock.advance(hours=25)
        sweeper = InactivitySweeper(ledger, interval_seconds=0.01)

        sweeper.start()
        try:
            deadline = time.monotonic() + 2.0
            while sweeper.get_stats()["runs"] == 0 and time.monotonic() < deadline:
                time.sleep(0.01)
            assert sweeper.is_running
        finally:
            sweeper.shutdown()

        assert not sweeper.is_running
        assert ledger.get_session(session.id).is_active is False

    def test_loop_survives_failures(self):
        ledger = MagicMock()
        ledger.sweep_inactive.side_effect = RuntimeError("store down")
        sweeper = InactivitySweeper(ledger, interval_seconds=0.01)

        sweeper.start()
        try:
            deadline = time.monotonic() + 2.0
            while sweeper.get_stats()["failures"] < 2 and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            sweeper.shutdown()

        assert sweeper.get_stats()["failures"] >= 2

    def test_shutdown_without_start(self, ledger):
        sweeper = InactivitySweeper(ledger)

        sweeper.shutdown()

        assert not sweeper.is_running


class TestKeyedLock:

    def test_same_key_is_serialized(self):
        locks = KeyedLock()
        counter = {"value": 0}

        def bump():
            for _ in range(200):
                with locks.hold("user_1"):
                    current = counter["value"]
                    time.sleep(0)
                    counter["value"] = current + 1

        threads = [threading.Thread(target=bump) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert counter["value"] == 800

    def test_reentrant_for_same_key(self):
        locks = KeyedLock()

        with locks.hold("user_1"):
            with locks.hold("user_1"):
                pass

    def test_idle_keys_are_released(self):
        locks = KeyedLock()
        for i in range(100):
            with locks.hold(f"user_{i}"):
                assert len(locks) == 1

        assert len(locks) == 0

    def test_key_kept_while_held(self):
        locks = KeyedLock()

        with locks.hold("a"):
            with locks.hold("a"):
                with locks.hold("b"):
                    assert len(locks) == 2
            assert len(locks) == 1

        assert len(locks) == 0

    def test_lock_released_after_exception(self):
        locks = KeyedLock()

        with pytest.raises(RuntimeError):
            with locks.hold("a"):
                raise RuntimeError("boom")

        assert len(locks) == 0
        acquired = []

        def take():
            with locks.hold("a"):
                acquired.append(True)

        worker = threading.Thread(target=take)
        worker.start()
        worker.join(timeout=5)
        assert acquired == [True]
