"""
Per-collection read cache with a freshness window.

Each collection gets its own entry and timestamp, so reloading a hot
collection never forces a reload of a cold one.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional

from core.logging import get_logger


logger = get_logger(__name__)


DEFAULT_TTL_MS = 5000


@dataclass
class CacheEntry:
    value: Any
    loaded_at: float  # clock() seconds


class CollectionCache:
    """
    TTL cache keyed by collection.

    A value is served while ``clock() - loaded_at`` is below the TTL.
    Stale entries are dropped on access.
    """

    def __init__(
        self,
        ttl_ms: int = DEFAULT_TTL_MS,
        clock: Optional[Callable[[], float]] = None,
    ):
        self._ttl_ms = ttl_ms
        self._ttl_seconds = ttl_ms / 1000.0
        self._clock = clock or time.monotonic
        self._entries: dict[Hashable, CacheEntry] = {}

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    def get(self, key: Hashable) -> Optional[Any]:
        """Return the cached value if still fresh, otherwise None."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.loaded_at >= self._ttl_seconds:
            del self._entries[key]
            logger.debug("Cache entry expired", key=str(key))
            return None
        return entry.value

    def put(self, key: Hashable, value: Any) -> None:
        """Store a value stamped with the current time."""
        self._entries[key] = CacheEntry(value=value, loaded_at=self._clock())

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None
