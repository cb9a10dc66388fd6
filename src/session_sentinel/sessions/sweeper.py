"""Inactivity Sweeper - periodic background expiry of idle sessions."""

import atexit
import threading
from datetime import datetime
from typing import Any, Dict, Optional

from session_sentinel.common.clock import utc_now
from session_sentinel.common.constants import SessionConstants
from session_sentinel.common.logging import get_logger
from session_sentinel.sessions.ledger import SessionLedger

logger = get_logger(__name__)


class InactivitySweeper:
    """Runs SessionLedger.sweep_inactive on a fixed interval.

    Independent of request traffic and takes no per-user locks.
    """

    DEFAULT_INTERVAL = SessionConstants.SWEEP_INTERVAL_SECONDS
    DEFAULT_JOIN_TIMEOUT = SessionConstants.SWEEP_JOIN_TIMEOUT_SECONDS

    def __init__(
        self,
        ledger: SessionLedger,
        interval_seconds: float = DEFAULT_INTERVAL,
        metrics: Optional[Any] = None,
    ):
        """Initialize the sweeper. Call start() to launch the thread.

        Args:
            ledger: Ledger whose sessions are swept
            interval_seconds: Pause between sweeps
            metrics: Optional MetricsCollector receiving record_sweep()
        """
        self.ledger = ledger
        self.interval_seconds = interval_seconds
        self.metrics = metrics

        self._shutdown_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self._runs = 0
        self._failures = 0
        self._sessions_expired = 0
        self._last_run_at: Optional[datetime] = None
        self._stats_lock = threading.Lock()

        atexit.register(self.shutdown)

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._shutdown_event.clear()
        self._thread = threading.Thread(
            target=self._sweep_loop,
            name="InactivitySweeper",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"Inactivity sweeper started (interval={self.interval_seconds}s)")

    def _sweep_loop(self) -> None:
        # Event.wait doubles as an interruptible sleep.
        while not self._shutdown_event.wait(self.interval_seconds):
            try:
                self.run_once()
            except Exception as e:
                with self._stats_lock:
                    self._failures += 1
                logger.error(f"Inactivity sweep failed: {e}")
        logger.info("Inactivity sweeper stopped")

    def run_once(self) -> int:
        """Sweep now, on the calling thread.

        Returns:
            Number of sessions expired
        """
        expired = self.ledger.sweep_inactive()
        with self._stats_lock:
            self._runs += 1
            self._sessions_expired += expired
            self._last_run_at = utc_now()
        if self.metrics is not None:
            self.metrics.record_sweep(expired)
        return expired

    def shutdown(self, timeout: Optional[float] = None) -> None:
        if self._shutdown_event.is_set():
            return
        self._shutdown_event.set()

        timeout = timeout if timeout is not None else self.DEFAULT_JOIN_TIMEOUT
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Inactivity sweeper did not stop cleanly")

    def get_stats(self) -> Dict[str, Any]:
        with self._stats_lock:
            return {
                "runs": self._runs,
                "failures": self._failures,
                "sessions_expired": self._sessions_expired,
                "last_run_at": self._last_run_at.isoformat() if self._last_run_at else None,
                "interval_seconds": self.interval_seconds,
            }

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and not self._shutdown_event.is_set()
        )
