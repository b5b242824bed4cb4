"""TTL Cache Module - Time-to-live keyed storage.

Philosophy:
- Lazy invalidation: stale entries are ignored on read, not evicted
- Explicit sweeping: cleanup_expired() removes stale entries on demand
- Clock injection for deterministic tests

Public API (the "studs"):
    CacheEntry: Cached value plus the epoch-seconds timestamp it was written at
    TTLCache: Keyed store of CacheEntry objects
"""

import logging
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 300


@dataclass
class CacheEntry(Generic[T]):
    """Cached value with its write timestamp.

    Attributes:
        data: Cached value
        timestamp: Epoch seconds at which the value was written
    """

    data: T
    timestamp: float

    def age(self, now: float) -> float:
        """Seconds since the entry was written."""
        return now - self.timestamp

    def is_valid(self, ttl_seconds: float, now: float) -> bool:
        """An entry is valid while its age is strictly below the TTL."""
        return self.age(now) < ttl_seconds


class TTLCache(Generic[T]):
    """Keyed store whose entries expire after ttl_seconds.

    Example:
        >>> cache = TTLCache(ttl_seconds=300)
        >>> cache.set("2024-01-01_2024-01-31", summary)
        >>> cache.get("2024-01-01_2024-01-31") is summary
        True
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}

    def get(self, key: str) -> T | None:
        """Return the cached value, or None when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if not entry.is_valid(self.ttl_seconds, self._clock()):
            return None

        return entry.data

    def set(self, key: str, value: T) -> None:
        """Store value under key, superseding any previous entry."""
        self._entries[key] = CacheEntry(data=value, timestamp=self._clock())

    def invalidate(self, key: str) -> None:
        """Remove a single entry."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()

    def cleanup_expired(self) -> int:
        """Delete entries older than the TTL.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [
            key for key, entry in self._entries.items() if entry.age(now) > self.ttl_seconds
        ]
        for key in expired:
            del self._entries[key]

        if expired:
            logger.debug(f"Removed {len(expired)} expired cache entries")
        return len(expired)

    def keys(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


__all__ = ["DEFAULT_TTL_SECONDS", "CacheEntry", "TTLCache"]
