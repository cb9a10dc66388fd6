"""In-memory repositories.

Process-local, thread-safe implementations of the store interfaces.
Records are copied on the way in and on the way out.
"""

import threading
from datetime import datetime
from typing import Dict, List, Optional, TypeVar

from pydantic import BaseModel

from session_sentinel.common.exceptions import ConflictError
from session_sentinel.common.logging import get_logger
from session_sentinel.data.schemas import ActivityLog, Device, RiskAlert, Session, User
from session_sentinel.storage.base import (
    ActivityStore,
    AlertStore,
    DeviceStore,
    SessionStore,
    UserStore,
)

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _copy(record: ModelT) -> ModelT:
    return record.model_copy(deep=True)


class _MemoryTable:
    """Dict-backed table guarded by a single lock."""

    def __init__(self) -> None:
        self._rows: Dict[str, BaseModel] = {}
        self._lock = threading.RLock()

    def _require(self, record_id: str, kind: str) -> None:
        if record_id not in self._rows:
            raise KeyError(f"{kind} {record_id} does not exist; add it first")


class InMemoryUserStore(_MemoryTable, UserStore):

    def get(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self._rows.get(user_id)
            return _copy(user) if user is not None else None

    def find_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            for user in self._rows.values():
                if user.email == email:
                    return _copy(user)
            return None

    def add(self, user: User) -> User:
        with self._lock:
            if user.id in self._rows:
                raise ConflictError("User already exists", details={"user_id": user.id})
            if any(existing.email == user.email for existing in self._rows.values()):
                raise ConflictError("Email already registered", details={"email": user.email})
            self._rows[user.id] = _copy(user)
            return _copy(user)

    def save(self, user: User) -> User:
        with self._lock:
            self._require(user.id, "User")
            self._rows[user.id] = _copy(user)
            return _copy(user)


class InMemoryDeviceStore(_MemoryTable, DeviceStore):

    def get(self, device_id: str) -> Optional[Device]:
        with self._lock:
            device = self._rows.get(device_id)
            return _copy(device) if device is not None else None

    def find_by_fingerprint(self, user_id: str, fingerprint_hash: str) -> Optional[Device]:
        with self._lock:
            for device in self._rows.values():
                if device.user_id == user_id and device.fingerprint_hash == fingerprint_hash:
                    return _copy(device)
            return None

    def list_by_user(self, user_id: str) -> List[Device]:
        with self._lock:
            devices = [_copy(d) for d in self._rows.values() if d.user_id == user_id]
        return sorted(devices, key=lambda d: d.last_seen_at, reverse=True)

    def add(self, device: Device) -> Device:
        with self._lock:
            if device.id in self._rows:
                raise ConflictError("Device already exists", details={"device_id": device.id})
            for existing in self._rows.values():
                if (existing.user_id == device.user_id
                        and existing.fingerprint_hash == device.fingerprint_hash):
                    raise ConflictError(
                        "Device fingerprint already registered for user",
                        details={"user_id": device.user_id, "device_id": existing.id},
                    )
            self._rows[device.id] = _copy(device)
            return _copy(device)

    def save(self, device: Device) -> Device:
        with self._lock:
            self._require(device.id, "Device")
            self._rows[device.id] = _copy(device)
            return _copy(device)

    def delete(self, device_id: str, user_id: str) -> bool:
        with self._lock:
            device = self._rows.get(device_id)
            if device is None or device.user_id != user_id:
                return False
            del self._rows[device_id]
            return True


class InMemorySessionStore(_MemoryTable, SessionStore):

    def get(self, session_id: str) -> Optional[Session]:
        with self._lock:
            session = self._rows.get(session_id)
            return _copy(session) if session is not None else None

    def add(self, session: Session) -> Session:
        with self._lock:
            if session.id in self._rows:
                raise ConflictError("Session already exists", details={"session_id": session.id})
            self._rows[session.id] = _copy(session)
            return _copy(session)

    def save(self, session: Session) -> Session:
        with self._lock:
            self._require(session.id, "Session")
            self._rows[session.id] = _copy(session)
            return _copy(session)

    def list_active(self, user_id: str) -> List[Session]:
        with self._lock:
            sessions = [
                _copy(s) for s in self._rows.values()
                if s.user_id == user_id and s.is_active
            ]
        return sorted(sessions, key=lambda s: s.started_at)

    def list_by_user(self, user_id: str, limit: Optional[int] = None) -> List[Session]:
        with self._lock:
            sessions = [_copy(s) for s in self._rows.values() if s.user_id == user_id]
        sessions.sort(key=lambda s: s.started_at, reverse=True)
        return sessions[:limit] if limit is not None else sessions

    def count_active(self, user_id: str) -> int:
        with self._lock:
            return sum(1 for s in self._rows.values() if s.user_id == user_id and s.is_active)

    def deactivate(self, session_id: str, ended_at: datetime) -> Optional[Session]:
        with self._lock:
            session = self._rows.get(session_id)
            if session is None or not session.is_active:
                return None
            session.is_active = False
            session.ended_at = ended_at
            return _copy(session)

    def touch(self, session_id: str, at: datetime) -> Optional[Session]:
        with self._lock:
            session = self._rows.get(session_id)
            if session is None or not session.is_active:
                return None
            session.last_activity_at = at
            return _copy(session)

    def set_risk_score(self, session_id: str, risk_score: float) -> Optional[Session]:
        with self._lock:
            session = self._rows.get(session_id)
            if session is None:
                return None
            session.risk_score = risk_score
            return _copy(session)

    def deactivate_stale(self, cutoff: datetime, ended_at: datetime) -> int:
        count = 0
        with self._lock:
            for session in self._rows.values():
                if session.is_active and session.last_activity_at < cutoff:
                    session.is_active = False
                    session.ended_at = ended_at
                    count += 1
        return count


class InMemoryAlertStore(_MemoryTable, AlertStore):

    def get(self, alert_id: str) -> Optional[RiskAlert]:
        with self._lock:
            alert = self._rows.get(alert_id)
            return _copy(alert) if alert is not None else None

    def add(self, alert: RiskAlert) -> RiskAlert:
        with self._lock:
            if alert.id in self._rows:
                raise ConflictError("Alert already exists", details={"alert_id": alert.id})
            self._rows[alert.id] = _copy(alert)
            return _copy(alert)

    def save(self, alert: RiskAlert) -> RiskAlert:
        with self._lock:
            self._require(alert.id, "Alert")
            self._rows[alert.id] = _copy(alert)
            return _copy(alert)

    def list_by_user(self, user_id: str, unresolved_only: bool = False) -> List[RiskAlert]:
        with self._lock:
            alerts = [
                _copy(a) for a in self._rows.values()
                if a.user_id == user_id and not (unresolved_only and a.is_resolved)
            ]
        return sorted(alerts, key=lambda a: a.created_at, reverse=True)

    def list_unresolved_since(self, user_id: str, since: datetime) -> List[RiskAlert]:
        with self._lock:
            return [
                _copy(a) for a in self._rows.values()
                if a.user_id == user_id and not a.is_resolved and a.created_at > since
            ]


class InMemoryActivityStore(_MemoryTable, ActivityStore):

    def add(self, activity: ActivityLog) -> ActivityLog:
        with self._lock:
            if activity.id in self._rows:
                raise ConflictError(
                    "Activity already exists", details={"activity_id": activity.id}
                )
            self._rows[activity.id] = _copy(activity)
            return _copy(activity)

    def list_by_user(self, user_id: str, limit: Optional[int] = None) -> List[ActivityLog]:
        with self._lock:
            activities = [_copy(a) for a in self._rows.values() if a.user_id == user_id]
        activities.sort(key=lambda a: a.timestamp, reverse=True)
        return activities[:limit] if limit is not None else activities

    def list_by_session(self, session_id: str) -> List[ActivityLog]:
        with self._lock:
            activities = [_copy(a) for a in self._rows.values() if a.session_id == session_id]
        return sorted(activities, key=lambda a: a.timestamp, reverse=True)
