"""Session Ledger - module init."""

from session_sentinel.sessions.ledger import SessionLedger, SessionOpening
from session_sentinel.sessions.locks import KeyedLock
from session_sentinel.sessions.sweeper import InactivitySweeper

__all__ = ["InactivitySweeper", "KeyedLock", "SessionLedger", "SessionOpening"]
