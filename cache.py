"""In-memory keyed cache whose entries expire a fixed time after they are stored."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Invalidatable(Protocol):
    """Anything that can drop the results it has cached."""

    def clear_cache(self) -> None:
        ...


@dataclass
class _Entry:
    value: Any
    expires: float


class MemoryCache:
    """Thread-safe get-or-compute store keyed by string.

    Computation is serialized per key: while one caller runs the factory for a
    key, other callers for the same key wait and then reuse its result.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._key_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def _live_entry(self, key: str) -> _Entry | None:
        # Caller holds self._lock
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires <= self._clock():
            del self._entries[key]
            return None
        return entry

    def try_get(self, key: str) -> tuple[bool, Any]:
        """Return (True, value) for a live entry, else (False, None)."""
        with self._lock:
            entry = self._live_entry(key)
        if entry is None:
            return False, None
        return True, entry.value

    def get_or_add(self, key: str, factory: Callable[[], Any], ttl: float) -> Any:
        """Return the cached value for key, computing and storing it if needed.

        ttl is in seconds. If factory raises, nothing is stored.
        """
        found, value = self.try_get(key)
        if found:
            logger.debug("Cache hit for %s", key)
            return value

        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())
        with key_lock:
            found, value = self.try_get(key)
            if found:
                logger.debug("Cache hit for %s after wait", key)
                return value
            logger.debug("Cache miss for %s", key)
            value = factory()
            with self._lock:
                self._entries[key] = _Entry(value, self._clock() + ttl)
            return value

    def _drop_key_lock(self, key: str) -> None:
        # Caller holds self._lock. Locks held by a running factory are kept
        key_lock = self._key_locks.get(key)
        if key_lock is not None and not key_lock.locked():
            del self._key_locks[key]

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)
            self._drop_key_lock(key)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            for key in list(self._key_locks):
                self._drop_key_lock(key)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return self._live_entry(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for key in list(self._entries) if self._live_entry(key) is not None)


_default_cache = MemoryCache()


def default_cache() -> MemoryCache:
    """Return the process-wide cache shared by readers that don't bring their own."""
    return _default_cache
