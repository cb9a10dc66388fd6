"""Storage - repository interfaces and in-memory backends."""

from session_sentinel.storage.base import (
    ActivityStore,
    AlertStore,
    DeviceStore,
    SessionStore,
    UserStore,
)
from session_sentinel.storage.memory import (
    InMemoryActivityStore,
    InMemoryAlertStore,
    InMemoryDeviceStore,
    InMemorySessionStore,
    InMemoryUserStore,
)

__all__ = [
    "ActivityStore",
    "AlertStore",
    "DeviceStore",
    "SessionStore",
    "UserStore",
    "InMemoryActivityStore",
    "InMemoryAlertStore",
    "InMemoryDeviceStore",
    "InMemorySessionStore",
    "InMemoryUserStore",
]
