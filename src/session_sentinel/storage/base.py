"""Repository interfaces - abstraction over durable persistence.

The engine only talks to these interfaces. Implementations must be
thread-safe and must hand out copies, so a caller mutating a returned
record never changes stored state until it calls ``save``.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from session_sentinel.data.schemas import ActivityLog, Device, RiskAlert, Session, User


class UserStore(ABC):
    """CRUD store for users."""

    @abstractmethod
    def get(self, user_id: str) -> Optional[User]:
        """Return the user or None if unknown."""

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[User]:
        """Return the user registered with this email, if any."""

    @abstractmethod
    def add(self, user: User) -> User:
        """Insert a new user.

        Raises:
            ConflictError: If the id or email is already registered
        """

    @abstractmethod
    def save(self, user: User) -> User:
        """Persist changes to an existing user."""


class DeviceStore(ABC):
    """CRUD store for devices."""

    @abstractmethod
    def get(self, device_id: str) -> Optional[Device]:
        """Return the device or None if unknown."""

    @abstractmethod
    def find_by_fingerprint(self, user_id: str, fingerprint_hash: str) -> Optional[Device]:
        """Return the user's device with this fingerprint hash, if any."""

    @abstractmethod
    def list_by_user(self, user_id: str) -> List[Device]:
        """All devices of a user, most recently seen first."""

    @abstractmethod
    def add(self, device: Device) -> Device:
        """Insert a new device.

        Raises:
            ConflictError: If the user already has a device with this hash
        """

    @abstractmethod
    def save(self, device: Device) -> Device:
        """Persist changes to an existing device."""

    @abstractmethod
    def delete(self, device_id: str, user_id: str) -> bool:
        """Delete a device owned by user_id. Returns False if nothing matched."""


class SessionStore(ABC):
    """CRUD store for sessions."""

    @abstractmethod
    def get(self, session_id: str) -> Optional[Session]:
        """Return the session or None if unknown."""

    @abstractmethod
    def add(self, session: Session) -> Session:
        """Insert a new session."""

    @abstractmethod
    def save(self, session: Session) -> Session:
        """Persist changes to an existing session."""

    @abstractmethod
    def list_active(self, user_id: str) -> List[Session]:
        """Active sessions of a user ordered by started_at ascending."""

    @abstractmethod
    def list_by_user(self, user_id: str, limit: Optional[int] = None) -> List[Session]:
        """All sessions of a user, newest first, optionally limited."""

    @abstractmethod
    def count_active(self, user_id: str) -> int:
        """Number of active sessions for a user."""

    @abstractmethod
    def deactivate(self, session_id: str, ended_at: datetime) -> Optional[Session]:
        """Atomically end an active session.

        Returns:
            The ended session, or None if it is unknown or already inactive
        """

    @abstractmethod
    def touch(self, session_id: str, at: datetime) -> Optional[Session]:
        """Atomically set last_activity_at on an active session.

        Returns:
            The updated session, or None if it is unknown or inactive
        """

    @abstractmethod
    def set_risk_score(self, session_id: str, risk_score: float) -> Optional[Session]:
        """Atomically store the login composite. None if the session is unknown."""

    @abstractmethod
    def deactivate_stale(self, cutoff: datetime, ended_at: datetime) -> int:
        """Bulk-deactivate active sessions with last_activity_at before cutoff.

        Returns:
            Number of sessions deactivated
        """


class AlertStore(ABC):
    """CRUD store for risk alerts."""

    @abstractmethod
    def get(self, alert_id: str) -> Optional[RiskAlert]:
        """Return the alert or None if unknown."""

    @abstractmethod
    def add(self, alert: RiskAlert) -> RiskAlert:
        """Insert a new alert."""

    @abstractmethod
    def save(self, alert: RiskAlert) -> RiskAlert:
        """Persist changes to an existing alert."""

    @abstractmethod
    def list_by_user(self, user_id: str, unresolved_only: bool = False) -> List[RiskAlert]:
        """Alerts of a user ordered by created_at descending."""

    @abstractmethod
    def list_unresolved_since(self, user_id: str, since: datetime) -> List[RiskAlert]:
        """Unresolved alerts of a user created after ``since``."""


class ActivityStore(ABC):
    """Append-only store for activity records."""

    @abstractmethod
    def add(self, activity: ActivityLog) -> ActivityLog:
        """Insert a new activity record."""

    @abstractmethod
    def list_by_user(self, user_id: str, limit: Optional[int] = None) -> List[ActivityLog]:
        """Activity of a user, newest first, optionally limited."""

    @abstractmethod
    def list_by_session(self, session_id: str) -> List[ActivityLog]:
        """Activity recorded against one session, newest first."""
