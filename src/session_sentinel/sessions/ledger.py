"""Session Ledger - active and historical sessions per account.

Enforces the per-user concurrency cap by evicting the single oldest
active session when a login arrives at or above the cap, and expires
idle sessions through the inactivity sweep. A session that has been
deactivated is never reactivated.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional, Tuple

from session_sentinel.common.clock import Clock, utc_now
from session_sentinel.common.constants import SessionConstants
from session_sentinel.common.exceptions import InvalidInputError, SessionNotFoundError
from session_sentinel.common.logging import get_logger
from session_sentinel.data.schemas import GeoLocation, Session, User
from session_sentinel.storage.base import SessionStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionOpening:
    """Result of opening a session for a login.

    Attributes:
        session: The newly created active session
        prior_sessions: Sessions that were active before this login,
            oldest first, read before any eviction
        evicted: The session deactivated to make room, if any
    """
    session: Session
    prior_sessions: Tuple[Session, ...]
    evicted: Optional[Session] = None

    @property
    def cap_reached(self) -> bool:
        return self.evicted is not None


class SessionLedger:
    """Tracks sessions and enforces concurrency limits."""

    def __init__(
        self,
        store: SessionStore,
        clock: Optional[Clock] = None,
        inactivity_timeout_hours: float = SessionConstants.INACTIVITY_TIMEOUT_HOURS,
    ):
        self._store = store
        self._clock = clock or utc_now
        self.inactivity_timeout = timedelta(hours=inactivity_timeout_hours)

    def open_session(
        self,
        user: User,
        device_id: str,
        ip_address: str,
        location: Optional[GeoLocation] = None,
        user_agent: Optional[str] = None,
    ) -> SessionOpening:
        """Open a session for a login, evicting the oldest one at the cap.

        Exactly one session is evicted per login no matter how far over
        the cap the user is.

        Args:
            user: Logging-in user (supplies max_concurrent_sessions)
            device_id: Resolved device
            ip_address: Source IP
            location: Caller-supplied location, if known
            user_agent: Raw user agent string

        Returns:
            SessionOpening with the new session and the pre-login snapshot
        """
        prior = tuple(self._store.list_active(user.id))

        evicted = None
        if len(prior) >= user.max_concurrent_sessions:
            evicted = self._deactivate(prior[0].id)
            logger.info(
                f"Session cap {user.max_concurrent_sessions} reached for user {user.id}; "
                f"evicted oldest session {evicted.id}"
            )

        now = self._clock()
        session = self._store.add(Session(
            user_id=user.id,
            device_id=device_id,
            ip_address=ip_address,
            location=location,
            user_agent=user_agent,
            started_at=now,
            last_activity_at=now,
            is_active=True,
        ))
        logger.debug(f"Opened session {session.id} for user {user.id} on device {device_id}")
        return SessionOpening(session=session, prior_sessions=prior, evicted=evicted)

    def get_session(self, session_id: str) -> Session:
        session = self._store.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def terminate(self, session_id: str) -> Session:
        """End a session. Already-ended sessions are returned unchanged.

        Raises:
            SessionNotFoundError: If the session id is unknown
        """
        ended = self._store.deactivate(session_id, ended_at=self._clock())
        if ended is None:
            return self.get_session(session_id)
        logger.info(f"Terminated session {session_id}")
        return ended

    def touch(self, session_id: str) -> Session:
        """Record activity on a session so the sweep leaves it alone.

        Ended sessions are returned unchanged; activity never revives them.
        """
        touched = self._store.touch(session_id, at=self._clock())
        return touched if touched is not None else self.get_session(session_id)

    def record_risk(self, session_id: str, risk_score: float) -> Session:
        """Store the composite risk of the login that opened this session."""
        session = self._store.set_risk_score(session_id, risk_score)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def sweep_inactive(self) -> int:
        """Deactivate every active session idle longer than the timeout.

        Returns:
            Number of sessions deactivated
        """
        now = self._clock()
        expired = self._store.deactivate_stale(now - self.inactivity_timeout, ended_at=now)
        if expired:
            logger.info(f"Inactivity sweep expired {expired} session(s)")
        return expired

    def active_sessions(self, user_id: str) -> List[Session]:
        """Active sessions, newest first."""
        return list(reversed(self._store.list_active(user_id)))

    def recent_sessions(
        self, user_id: str, limit: int = SessionConstants.DEFAULT_HISTORY_LIMIT
    ) -> List[Session]:
        if limit < 1:
            raise InvalidInputError("limit must be at least 1", details={"limit": limit})
        return self._store.list_by_user(user_id, limit=limit)

    def concurrent_count(self, user_id: str) -> int:
        return self._store.count_active(user_id)

    def _deactivate(self, session_id: str) -> Session:
        # Snapshot records handed to callers are never modified.
        ended = self._store.deactivate(session_id, ended_at=self._clock())
        return ended if ended is not None else self.get_session(session_id)
