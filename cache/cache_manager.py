"""
Response Cache - Single slot, time-boxed

Holds at most one aggregated /api/macro-data payload.

- get(): the entry while it is younger than the TTL, else None
- peek(): the entry regardless of age (stale fallback)
- put(): replaces the slot with a new entry

Reads never evict: a stale entry stays available as a fallback until the
next successful aggregation replaces it. The slot is process-local, so a
cold cache after a restart is normal.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from config import config


@dataclass(frozen=True)
class CacheEntry:
    """Cached payload and the epoch millis it was fetched at."""
    payload: Dict[str, Any]
    fetched_at_ms: int


class ResponseCache:
    """
    Single-slot cache with TTL.

    The clock returns epoch seconds (time.time by default) and is injectable
    so tests can move time forward without sleeping.
    """

    def __init__(self, ttl_seconds: int = 900, clock: Callable[[], float] = time.time):
        self._ttl_ms = int(ttl_seconds * 1000)
        self._clock = clock
        self._entry: Optional[CacheEntry] = None

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_ms / 1000

    def now_ms(self) -> int:
        return int(self._clock() * 1000)

    def is_fresh(self, entry: CacheEntry) -> bool:
        return self.now_ms() - entry.fetched_at_ms < self._ttl_ms

    def get(self) -> Optional[CacheEntry]:
        """Get the entry if present and not expired."""
        entry = self._entry
        if entry is None or not self.is_fresh(entry):
            return None
        return entry

    def peek(self) -> Optional[CacheEntry]:
        """Get the entry even if it is stale."""
        return self._entry

    def put(self, payload: Dict[str, Any]) -> CacheEntry:
        """Replace the slot with payload stamped at the current time."""
        entry = CacheEntry(payload=payload, fetched_at_ms=self.now_ms())
        # Single assignment: readers see the old entry or the new one
        self._entry = entry
        return entry

    def age_minutes(self, entry: CacheEntry) -> int:
        """Age of an entry in whole minutes (rounded)."""
        age_ms = max(0, self.now_ms() - entry.fetched_at_ms)
        return int(age_ms / 60000 + 0.5)

    def clear(self) -> None:
        """Drop the cached entry."""
        self._entry = None

    def stats(self) -> dict:
        """Get cache statistics."""
        entry = self._entry
        if entry is None:
            return {'populated': False, 'fresh': False, 'age_minutes': None, 'ttl_seconds': self.ttl_seconds}
        return {
            'populated': True,
            'fresh': self.is_fresh(entry),
            'age_minutes': self.age_minutes(entry),
            'ttl_seconds': self.ttl_seconds,
        }


# Global cache instance
response_cache = ResponseCache(ttl_seconds=config.macro_cache_ttl)
