"""In-memory TTL cache for small, slow-changing documents."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    value: V
    stored_at: float
    ttl: float

    def is_valid(self, now: float) -> bool:
        # A clock that moved backwards keeps the entry alive a little longer.
        return now - self.stored_at < self.ttl


class TTLCache(Generic[V]):
    """
    Read-through memoization helper with a per-entry TTL.
    Expired entries are dropped when read. Writers are expected to either
    tolerate staleness up to the TTL or ``set`` the fresh value themselves.
    """

    def __init__(self, max_items: Optional[int] = None, clock: Optional[Callable[[], float]] = None) -> None:
        if max_items is not None and max_items < 1:
            raise ValueError("max_items must be at least 1")
        self.max_items = max_items
        self._clock = clock or time.time
        self._store: Dict[str, CacheEntry[V]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def get(self, key: str) -> Optional[V]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if not entry.is_valid(self._clock()):
                self._store.pop(key, None)
                return None
            return entry.value

    def set(self, key: str, value: V, ttl: float) -> None:
        with self._lock:
            now = self._clock()

            # basic eviction: if full, drop the entry stored longest ago
            if self.max_items is not None and key not in self._store and len(self._store) >= self.max_items:
                oldest_key = min(self._store.items(), key=lambda kv: kv[1].stored_at)[0]
                self._store.pop(oldest_key, None)

            self._store[key] = CacheEntry(value=value, stored_at=now, ttl=ttl)
