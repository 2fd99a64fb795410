"""In-memory TTL cache for fetched content and API results."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL = 3600.0  # seconds


class ContentCache:
    """Key/value cache with per-entry expiry.

    Entries are only evicted when they are read after expiry or when
    purge_expired() runs; there is no size bound.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any, ttl: float = DEFAULT_TTL) -> None:
        self._entries[key] = (value, self._clock() + ttl)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        now = self._clock()
        expired = [k for k, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        if not lookups:
            return 0.0
        return self.hits / lookups

    async def get_or_fetch(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[T]],
        ttl: float = DEFAULT_TTL,
    ) -> T:
        """Return the cached value for key, calling fetcher on a miss.

        Fetcher exceptions propagate and nothing is stored.
        """
        cached = self.get(key)
        if cached is not None:
            self.hits += 1
            logger.debug("Cache hit for %s", key)
            return cached

        self.misses += 1
        data = await fetcher()
        self.set(key, data, ttl)
        logger.debug("Cache miss for %s - data cached", key)
        return data


def cache_key(kind: str, params: Any) -> str:
    """Build a cache key of the form ``kind:<compact json>``."""
    try:
        return f"{kind}:{json.dumps(params, separators=(',', ':'), ensure_ascii=False)}"
    except (TypeError, ValueError):
        return f"{kind}:{params}"
