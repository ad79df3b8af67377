"""Per-key mutual exclusion for in-process writers"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class KeyedLock:
    """One lock per key, created on first use and kept for the process lifetime"""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._lock_for(key):
            yield


# Shared by every request handled by this process
producer_locks = KeyedLock()
