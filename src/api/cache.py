"""
Query Cache

Keeps fetched rows per query identifier until they expire or are invalidated.
"""

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


@dataclass
class CacheEntry:
    """Cached value with its storage time."""
    value: Any
    stored_at: float  # Unix timestamp


class QueryCache:
    """
    Key -> value cache for dashboard queries.

    Entries are independent. An entry is served until `ttl` seconds have
    passed (no expiry when ttl is None) or until it is invalidated.
    """

    def __init__(self, ttl: Optional[float] = None, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def _is_fresh(self, entry: CacheEntry) -> bool:
        if self.ttl is None:
            return True
        return self._clock() - entry.stored_at < self.ttl

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value for key, or default if missing/expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            if not self._is_fresh(entry):
                del self._entries[key]
                return default
            return entry.value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(value=value, stored_at=self._clock())

    def get_or_fetch(self, key: str, fetcher: Callable[[], Any]) -> Any:
        """
        Return the cached value, calling fetcher on a miss.

        Fetch failures propagate and leave the cache untouched.
        """
        sentinel = object()
        value = self.get(key, sentinel)
        if value is not sentinel:
            return value
        value = fetcher()
        self.set(key, value)
        return value

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one entry, or every entry when key is None."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def __contains__(self, key: str) -> bool:
        sentinel = object()
        return self.get(key, sentinel) is not sentinel

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
