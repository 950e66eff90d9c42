from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from ..common.datetime_utils import now_millis
from ..core.constants import DEFAULT_CACHE_MAX_ENTRIES, DEFAULT_CACHE_TTL_MS

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    timestamp: int


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int
    evictions: int
    size: int

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return (self.hits / lookups) * 100 if lookups else 0.0


class TTLCache:
    """In-memory cache with a fixed time-to-live and a size cap.

    - an entry older than `ttl_ms` (strictly) is dropped when it is read
    - when an insert takes the cache past `max_entries`, the single entry with
      the oldest insertion timestamp is evicted, stale or not
    - `clock` returns milliseconds; inject a fake one in tests

    `None` is not a cacheable value: `get` returns None for a miss.
    """

    def __init__(
        self,
        *,
        ttl_ms: int = DEFAULT_CACHE_TTL_MS,
        max_entries: int = DEFAULT_CACHE_MAX_ENTRIES,
        clock: Callable[[], int] = now_millis,
    ):
        self._ttl_ms = int(ttl_ms)
        self._max_entries = int(max_entries)
        self._clock = clock
        self._entries: dict[str, CacheEntry[Any]] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if self._clock() - entry.timestamp > self._ttl_ms:
                del self._entries[key]
                self._misses += 1
                return None
            self._hits += 1
            return entry.value

    def set(self, key: str, value: Any) -> None:
        if value is None:
            raise ValueError("None cannot be cached")
        with self._lock:
            self._entries[key] = CacheEntry(value=value, timestamp=self._clock())
            if len(self._entries) > self._max_entries:
                oldest = min(self._entries, key=lambda k: self._entries[k].timestamp)
                del self._entries[oldest]
                self._evictions += 1

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one key, or everything when no key is given."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                size=len(self._entries),
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries
