"""In-memory result cache with a fixed expiration window."""

import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from ..config import CACHE_TTL
from ..utils.logging import get_logger

logger = get_logger(__name__)


def normalize_query(query: str) -> str:
    """Normalize a free-text query for use as a cache key."""
    return " ".join(query.lower().split())


class TTLCache:
    """Maps keys to values that expire a fixed time after being stored.

    Callers see identical behavior whether or not a value is cached; the
    cache only saves remote round trips.
    """

    def __init__(
        self,
        ttl: float = CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}

    def get(self, key: Hashable) -> Optional[Any]:
        """Return the cached value, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl:
            self._entries.pop(key, None)
            logger.debug(f"Cache entry expired: {key!r}")
            return None
        return value

    def put(self, key: Hashable, value: Any) -> None:
        """Store a value, replacing any existing entry."""
        self._entries[key] = (self._clock(), value)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        self.purge_expired()
        return len(self._entries)

    def purge_expired(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        expired = [k for k, (t, _) in self._entries.items() if now - t >= self.ttl]
        for key in expired:
            self._entries.pop(key, None)
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()
