"""
In-process mutual exclusion keyed by room number or booking id.

The record stores offer no read-modify-write atomicity, so the
scan -> check -> append sequence of a booking is serialized here. This
only covers writers inside the current process.

A key's lock exists only while some thread holds it or waits for it, so
the registry does not grow with every booking id ever looked up.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

logger = logging.getLogger(__name__)

# Serializes booking id allocation across rooms
BOOKING_IDS_KEY = "booking-ids"


class _KeyLock:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.RLock()
        # Threads holding or waiting on `lock`; guarded by the registry
        self.users = 0


class KeyedLockRegistry:
    """Hands out one re-entrant lock per key."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, _KeyLock] = {}

    def _checkout(self, key: str) -> _KeyLock:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = _KeyLock()
                self._locks[key] = entry
            entry.users += 1
            return entry

    def _checkin(self, key: str, entry: _KeyLock) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0 and self._locks.get(key) is entry:
                del self._locks[key]

    @contextmanager
    def hold(self, key: str, timeout: Optional[float] = None) -> Iterator[None]:
        """
        Hold the lock for `key` for the duration of the block.

        Raises TimeoutError if `timeout` seconds pass without acquiring it.
        """
        entry = self._checkout(key)
        try:
            acquired = entry.lock.acquire(timeout=-1 if timeout is None else timeout)
            if not acquired:
                logger.warning(f"Lock contention on {key}")
                raise TimeoutError(f"Timed out waiting for lock on {key}")
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            self._checkin(key, entry)

    def room(self, room_number: str, timeout: Optional[float] = None):
        return self.hold(f"room:{normalize_key(room_number)}", timeout)

    def booking(self, booking_id: str, timeout: Optional[float] = None):
        return self.hold(f"booking:{normalize_key(booking_id)}", timeout)

    def booking_ids(self, timeout: Optional[float] = None):
        return self.hold(BOOKING_IDS_KEY, timeout)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def __contains__(self, key: str) -> bool:
        with self._guard:
            return key in self._locks


def normalize_key(value) -> str:
    return str(value if value is not None else "").strip()
