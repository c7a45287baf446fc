"""Tests for the query cache."""

import pytest

from .cache import QueryCache
from .models import SearchResponse, SearchStats


def _response(query: str) -> SearchResponse:
    return SearchResponse(
        query=query,
        filters={},
        result_count=0,
        results=[],
        execution_time=1,
        stats=SearchStats(),
    )


def test_generate_key_is_order_sensitive():
    """Test the same parameters in a different order give a different key."""
    first = QueryCache.generate_key({"query": "red", "limit": 5})
    second = QueryCache.generate_key({"limit": 5, "query": "red"})

    assert first != second
    assert first == QueryCache.generate_key({"query": "red", "limit": 5})


def test_generate_key_includes_nested_filters():
    """Test filters are part of the key."""
    base = QueryCache.generate_key({"query": "red", "filters": {"status": "a"}})
    other = QueryCache.generate_key({"query": "red", "filters": {"status": "b"}})
    assert base != other


def test_get_and_set():
    """Test stored responses come back with hit counts."""
    cache = QueryCache()
    cache.set("k", _response("red"))

    entry = cache.get("k")
    assert entry is not None
    assert entry.response.query == "red"
    assert entry.hit_count == 1
    assert cache.get("k").hit_count == 2
    assert cache.get("missing") is None


def test_unbounded_by_default():
    """Test the cache keeps every entry without a max size."""
    cache = QueryCache()
    for i in range(500):
        cache.set(str(i), _response(str(i)))
    assert len(cache) == 500


def test_lru_eviction_when_bounded():
    """Test the least recently used entry is evicted first."""
    cache = QueryCache(max_size=2)
    cache.set("a", _response("a"))
    cache.set("b", _response("b"))
    cache.get("a")  # "b" is now least recently used
    cache.set("c", _response("c"))

    assert "a" in cache
    assert "b" not in cache
    assert "c" in cache


def test_clear_returns_count():
    """Test clear empties the cache."""
    cache = QueryCache()
    cache.set("a", _response("a"))
    cache.set("b", _response("b"))

    assert cache.clear() == 2
    assert len(cache) == 0
    assert cache.stats()["size"] == 0


def test_invalid_max_size():
    """Test zero or negative max size is rejected."""
    with pytest.raises(ValueError):
        QueryCache(max_size=0)
