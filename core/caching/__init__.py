"""
VELO Core Caching - Per-User TTL Cache
======================================
Holds resolved membership and super-admin results between navigations.

Entries are scoped to a user id so sign-out can flush everything
that user resolved. Time is injected; the cache never reads the
system clock itself.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Tuple


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    user_id: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    invalidations: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "invalidations": self.invalidations,
            "hit_rate": round(self.hit_rate, 4),
        }


_MISSING = object()


class UserScopedCache:
    """
    LRU cache with per-entry TTL, keyed by (namespace, user_id).

    Thread-safe: a single lock guards the ordered map because guard
    adapters share one resolver across request threads.
    """

    def __init__(self, max_size: int = 1000) -> None:
        if max_size < 1:
            raise ValueError("max_size must be >= 1.")
        self._max_size = max_size
        self._entries: "OrderedDict[Tuple[str, str], CacheEntry]" = OrderedDict()
        self._stats = CacheStats()
        self._lock = threading.Lock()

    def get(self, namespace: str, user_id: str, now: datetime) -> Any:
        """Return the cached value, or MISSING on a miss or expired entry."""
        key = (namespace, user_id)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats.misses += 1
                return _MISSING

            if entry.is_expired(now):
                del self._entries[key]
                self._stats.evictions += 1
                self._stats.misses += 1
                return _MISSING

            self._entries.move_to_end(key)
            self._stats.hits += 1
            return entry.value

    def put(
        self,
        namespace: str,
        user_id: str,
        value: Any,
        now: datetime,
        ttl_seconds: int,
    ) -> None:
        key = (namespace, user_id)
        with self._lock:
            if key not in self._entries and len(self._entries) >= self._max_size:
                self._entries.popitem(last=False)
                self._stats.evictions += 1

            self._entries[key] = CacheEntry(
                value=value,
                user_id=user_id,
                expires_at=now + timedelta(seconds=ttl_seconds),
            )
            self._entries.move_to_end(key)

    def invalidate_user(self, user_id: str) -> int:
        """Drop every entry resolved for user_id. Returns the count."""
        with self._lock:
            keys = [k for k, e in self._entries.items() if e.user_id == user_id]
            for key in keys:
                del self._entries[key]
            self._stats.invalidations += len(keys)
            return len(keys)

    def invalidate_matching(self, predicate: Callable[[Any], bool]) -> int:
        """Drop every entry whose value satisfies predicate. Returns the count."""
        with self._lock:
            keys = [k for k, e in self._entries.items() if predicate(e.value)]
            for key in keys:
                del self._entries[key]
            self._stats.invalidations += len(keys)
            return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    @property
    def stats(self) -> CacheStats:
        return self._stats

    @property
    def size(self) -> int:
        return len(self._entries)

    @staticmethod
    def is_missing(value: Any) -> bool:
        return value is _MISSING


__all__ = [
    "CacheEntry",
    "CacheStats",
    "UserScopedCache",
]
