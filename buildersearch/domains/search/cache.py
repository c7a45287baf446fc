"""
Query Cache - In-memory caching of search responses by exact parameters.

Keys are the compact JSON of the request parameters in the order they were
received, so ``{"query": "a", "limit": 5}`` and ``{"limit": 5, "query": "a"}``
are different entries. Entries never expire. Without ``max_size`` the cache
grows for the lifetime of the process; with it, the least recently used
entry is evicted.
"""

from __future__ import annotations

import json
import logging
from collections import OrderedDict
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .models import SearchResponse

logger = logging.getLogger(__name__)

__all__ = ["CacheEntry", "QueryCache"]


@dataclass
class CacheEntry:
    """Stored response plus bookkeeping."""

    key: str
    response: SearchResponse
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    hit_count: int = 0


class QueryCache:
    """
    Exact-match response cache.

    Not thread-safe on its own; ``SearchRankingEngine`` serializes access.
    """

    def __init__(self, max_size: int | None = None) -> None:
        """
        Initialize cache.

        Args:
            max_size: Maximum number of entries, None for unbounded
        """
        if max_size is not None and max_size < 1:
            raise ValueError("max_size must be positive or None")
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._max_size = max_size

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> CacheEntry | None:
        """Get a cached entry, counting the hit."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._max_size is not None:
            self._entries.move_to_end(key)

        entry.hit_count += 1
        logger.debug("Cache hit: %s (hits: %d)", key[:64], entry.hit_count)
        return entry

    def set(self, key: str, response: SearchResponse) -> None:
        """Cache a response."""
        if key in self._entries:
            self._entries.move_to_end(key)
        self._entries[key] = CacheEntry(key=key, response=response)

        if self._max_size is not None:
            while len(self._entries) > self._max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted cache entry: %s", evicted[:64])

    def clear(self) -> int:
        """Clear all entries and return how many were dropped."""
        count = len(self._entries)
        self._entries.clear()
        logger.info("Cleared %d cache entries", count)
        return count

    def stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        return {
            "size": len(self._entries),
            "max_size": self._max_size,
            "total_hits": sum(e.hit_count for e in self._entries.values()),
        }

    @staticmethod
    def generate_key(params: Mapping[str, Any]) -> str:
        """Serialize parameters to a key, preserving key order."""
        return json.dumps(
            params, separators=(",", ":"), ensure_ascii=False, default=str
        )
