"""Activity Tracker - in-session actions reported by clients.

Each tracked action is stored against the session it happened in and
counts as activity for the inactivity sweep.
"""

from typing import Any, Dict, List, Optional

from session_sentinel.common.clock import Clock, utc_now
from session_sentinel.common.constants import ActivityConstants
from session_sentinel.common.exceptions import (
    InvalidInputError,
    InvalidTokenError,
    SessionNotFoundError,
)
from session_sentinel.common.logging import get_logger
from session_sentinel.core.types import ActivityType
from session_sentinel.data.schemas import ActivityLog, Session
from session_sentinel.sessions.ledger import SessionLedger
from session_sentinel.storage.base import ActivityStore

logger = get_logger(__name__)


class ActivityTracker:
    """Records and lists activity for a user's sessions."""

    def __init__(
        self,
        store: ActivityStore,
        ledger: SessionLedger,
        clock: Optional[Clock] = None,
    ):
        self._store = store
        self._ledger = ledger
        self._clock = clock or utc_now

    def _owned_session(self, user_id: str, session_id: str) -> Session:
        session = self._ledger.get_session(session_id)
        if session.user_id != user_id:
            raise SessionNotFoundError(session_id)
        return session

    def track(
        self,
        user_id: str,
        session_id: str,
        activity_type: ActivityType,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ActivityLog:
        """Record one action and refresh the session's last activity.

        Raises:
            SessionNotFoundError: If the session is unknown or not the user's
            InvalidTokenError: If the session has already ended
        """
        session = self._owned_session(user_id, session_id)
        if not session.is_active:
            raise InvalidTokenError("Session has ended")

        self._ledger.touch(session_id)
        activity = self._store.add(ActivityLog(
            user_id=user_id,
            session_id=session_id,
            activity_type=activity_type,
            timestamp=self._clock(),
            metadata=metadata or {},
            risk_score=session.risk_score,
        ))
        logger.debug(f"Tracked {activity_type.value} for user {user_id} in session {session_id}")
        return activity

    def history(
        self, user_id: str, limit: int = ActivityConstants.DEFAULT_HISTORY_LIMIT
    ) -> List[ActivityLog]:
        """Most recent activity across all of a user's sessions, newest first."""
        if limit < 1:
            raise InvalidInputError("limit must be at least 1", details={"limit": limit})
        return self._store.list_by_user(user_id, limit=limit)

    def session_activity(self, user_id: str, session_id: str) -> List[ActivityLog]:
        self._owned_session(user_id, session_id)
        return self._store.list_by_session(session_id)
