"""Per-key locking for read-then-write sequences on shared user state."""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List


class KeyedLock:
    """Hands out one lock per key.

    Re-entrant, so a holder can call another locked operation for the
    same key. A key's lock is dropped once no thread holds or waits on
    it, so the table only grows with concurrently active keys.
    """

    def __init__(self) -> None:
        # key -> [lock, number of threads holding or waiting]
        self._locks: Dict[str, List] = {}
        self._guard = threading.Lock()

    def _acquire_entry(self, key: str) -> threading.RLock:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = [threading.RLock(), 0]
                self._locks[key] = entry
            entry[1] += 1
            return entry[0]

    def _release_entry(self, key: str) -> None:
        with self._guard:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._acquire_entry(key)
        try:
            with lock:
                yield
        finally:
            self._release_entry(key)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
