"""
Sorter & Limiter - Stable ordering of scored results.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from .models import Record, SortBy

__all__ = ["sort_results", "rank", "parse_timestamp"]


def sort_results(results: Sequence[Record], sort_by: SortBy | str) -> list[Record]:
    """
    Stable-sort results in descending order of the chosen key.

    Records tied on the key keep their input order.
    """
    sort_by = SortBy(sort_by)

    if sort_by is SortBy.RECENCY:
        return sorted(results, key=_recency_key, reverse=True)
    if sort_by is SortBy.POPULARITY:
        return sorted(results, key=_popularity_key, reverse=True)
    return sorted(results, key=_relevance_key, reverse=True)


def rank(results: Sequence[Record], sort_by: SortBy | str, limit: int) -> list[Record]:
    """Sort then keep the first ``limit`` results."""
    if limit <= 0:
        return []
    return sort_results(results, sort_by)[:limit]


def parse_timestamp(value: Any) -> float | None:
    """
    Parse a ``createdAt`` value to epoch seconds.

    Accepts ISO-8601 strings (naive values are taken as UTC), datetimes and
    epoch milliseconds. Returns None for anything else.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value / 1000.0
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def _relevance_key(record: Record) -> float:
    return record.get("relevanceScore", 0.0)


def _recency_key(record: Record) -> tuple[bool, float]:
    # Undated records sort after every dated one
    timestamp = parse_timestamp(record.get("createdAt"))
    return (timestamp is not None, timestamp or 0.0)


def _popularity_key(record: Record) -> float:
    views = record.get("views")
    if isinstance(views, bool) or not isinstance(views, (int, float)):
        return 0
    return views
