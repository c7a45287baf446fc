"""
Search Ranking Engine - Keyword search over schema-less records.

Pipeline per query:
1. Fetch every candidate record from the store (the only await)
2. Apply structured filters (AND)
3. Score relevance per record
4. Stable-sort by relevance, recency or popularity
5. Truncate to the limit

``execute`` wraps the pipeline with an exact-parameter response cache and
running statistics. ``advanced_search`` adds facets and bypasses the cache.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from buildersearch.config.errors import SearchError

from .cache import QueryCache
from .contracts import RecordStore
from .facets import generate_facets
from .filters import apply_filters
from .index import InvertedIndex, build_inverted_index
from .models import (
    AdvancedSearchParams,
    AdvancedSearchResponse,
    EngineStats,
    Record,
    SearchParams,
    SearchResponse,
    SearchStats,
    SortBy,
)
from .ranking import rank
from .scoring import score_record
from .text import tokenize

logger = logging.getLogger(__name__)

__all__ = ["SearchRankingEngine"]

ParamsT = TypeVar("ParamsT", bound=SearchParams)

DEFAULT_INDEX = "default"


class SearchRankingEngine:
    """
    Search engine owning its cache and counters.

    One instance per deployment (or per test). The cache map and counters are
    guarded by a lock, so an instance can be shared across threads and
    concurrent requests without lost updates.

    Example:
        >>> engine = SearchRankingEngine(JSONFileRecordStore("data/search_index.json"))
        >>> response = await engine.execute({"query": "red shoes", "sortBy": "relevance"})
        >>> response.results[0]["relevanceScore"]
        100.0
    """

    def __init__(
        self,
        store: RecordStore,
        cache_max_entries: int | None = None,
        default_limit: int = 10,
        advanced_default_limit: int = 20,
    ) -> None:
        """
        Initialize search engine.

        Args:
            store: Source of candidate records
            cache_max_entries: LRU bound for the query cache (None = unbounded)
            default_limit: Limit used by ``execute`` when none is given
            advanced_default_limit: Limit used by ``advanced_search`` when none is given
        """
        self._store = store
        self._cache = QueryCache(max_size=cache_max_entries)
        self._indexes: dict[str, InvertedIndex] = {}
        self._default_limit = default_limit
        self._advanced_default_limit = advanced_default_limit
        self._lock = threading.Lock()

        self._queries_executed = 0
        self._cache_hits = 0
        self._average_time = 0.0

    @property
    def indexes(self) -> dict[str, InvertedIndex]:
        """Registered inverted indexes by name."""
        return dict(self._indexes)

    async def execute(self, params: SearchParams | Mapping[str, Any]) -> SearchResponse:
        """
        Run a search, serving exact repeats from the cache.

        Args:
            params: ``{query, filters, limit, sortBy}`` as a mapping or model

        Returns:
            Search response; ``from_cache`` is True on a cache hit, in which
            case ``execution_time`` is the cost of the lookup alone

        Raises:
            SearchError: If the parameters fail validation
        """
        start = time.perf_counter()
        parsed, raw = self._parse(params, SearchParams, self._default_limit)
        cache_key = QueryCache.generate_key(raw)

        with self._lock:
            entry = self._cache.get(cache_key)
            if entry is not None:
                self._cache_hits += 1
                stats = self._snapshot()

        if entry is not None:
            return entry.response.model_copy(
                update={
                    "from_cache": True,
                    "execution_time": _elapsed_ms(start),
                    "stats": stats,
                }
            )

        found = await self._run(
            parsed.query,
            parsed.filters,
            parsed.limit,
            parsed.sort_by,
        )
        results = found if found is not None else []

        with self._lock:
            self._queries_executed += 1
            self._average_time = (self._average_time + _elapsed_ms(start)) / 2
            stats = self._snapshot()

        response = SearchResponse(
            query=parsed.query,
            filters=parsed.filters,
            result_count=len(results),
            results=results,
            execution_time=_elapsed_ms(start),
            stats=stats,
        )

        # Degraded responses are never cached
        if found is not None:
            with self._lock:
                self._cache.set(cache_key, response)

        logger.info(
            "Search: query='%s' sort=%s -> %d results in %dms",
            (parsed.query or "")[:50],
            parsed.sort_by.value,
            response.result_count,
            response.execution_time,
        )
        return response

    async def search(
        self,
        query: str | None,
        filters: Mapping[str, Any] | None = None,
        limit: int | None = None,
        sort_by: SortBy | str = SortBy.RELEVANCE,
    ) -> list[Record]:
        """
        Core pipeline without caching or statistics.

        Store failures are logged and yield an empty list, so callers cannot
        tell an unavailable store from a query with no matches.

        Args:
            query: Free-text query
            filters: Field filters (literal, collection of literals, or {min, max})
            limit: Maximum results (defaults to the engine's default limit)
            sort_by: relevance, recency or popularity

        Returns:
            Scored records, best first
        """
        found = await self._run(query, filters, limit, sort_by)
        return found if found is not None else []

    async def _run(
        self,
        query: str | None,
        filters: Mapping[str, Any] | None,
        limit: int | None,
        sort_by: SortBy | str,
    ) -> list[Record] | None:
        """Pipeline result, or None when the store could not be read."""
        keywords = tokenize(query)
        if limit is None:
            limit = self._default_limit

        records = await self._fetch_records()
        if records is None:
            return None

        candidates = apply_filters(records, filters)
        scored = [score_record(record, keywords) for record in candidates]
        return rank(scored, sort_by, limit)

    async def advanced_search(
        self,
        params: AdvancedSearchParams | Mapping[str, Any],
    ) -> AdvancedSearchResponse:
        """
        Run a search and compute facets over the returned results.

        Not cached and not counted in the statistics.

        Raises:
            SearchError: If the parameters fail validation
        """
        start = time.perf_counter()
        parsed, _ = self._parse(
            params, AdvancedSearchParams, self._advanced_default_limit
        )

        results = await self.search(
            parsed.query,
            parsed.filters,
            parsed.limit,
            parsed.sort_by,
        )
        facets = generate_facets(results, parsed.facet_fields)

        return AdvancedSearchResponse(
            query=parsed.query,
            result_count=len(results),
            results=results,
            facets=facets,
            applied_filters=parsed.filters,
            execution_time=f"{_elapsed_ms(start)}ms",
        )

    async def build_index(self, records: Sequence[Record] | None = None) -> InvertedIndex:
        """
        Build and register the default inverted index.

        The index is advisory: ``search`` keeps scanning every record.

        Args:
            records: Records to index (fetched from the store when omitted)
        """
        if records is None:
            records = await self._store.find({}) or []

        index = build_inverted_index(records)
        with self._lock:
            self._indexes[DEFAULT_INDEX] = index

        logger.info("Built inverted index: %d tokens over %d records", len(index), len(records))
        return index

    def get_stats(self) -> EngineStats:
        """Counters plus cache size and number of registered indexes."""
        with self._lock:
            return EngineStats(
                **self._snapshot().model_dump(),
                cached_queries=len(self._cache),
                indexed_fields=len(self._indexes),
            )

    def clear_cache(self) -> int:
        """Drop every cached response and reset the hit counter."""
        with self._lock:
            count = self._cache.clear()
            self._cache_hits = 0
        return count

    async def _fetch_records(self) -> list[Record] | None:
        try:
            return await self._store.find({}) or []
        except Exception:
            logger.exception("Record store failed, returning no results")
            return None

    def _snapshot(self) -> SearchStats:
        return SearchStats(
            queries_executed=self._queries_executed,
            cache_hits=self._cache_hits,
            average_time=self._average_time,
        )

    @staticmethod
    def _parse(
        params: BaseModel | Mapping[str, Any],
        model: type[ParamsT],
        default_limit: int,
    ) -> tuple[ParamsT, dict[str, Any]]:
        """Validate params and return them with the mapping used as cache key."""
        if isinstance(params, BaseModel):
            raw = params.model_dump(by_alias=True, exclude_unset=True, mode="json")
        else:
            raw = dict(params)

        try:
            parsed = model.model_validate(raw)
        except ValidationError as e:
            raise SearchError(
                "Invalid search parameters",
                details={
                    "errors": [
                        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                        for err in e.errors()
                    ]
                },
            ) from e

        if "limit" not in parsed.model_fields_set:
            parsed = parsed.model_copy(update={"limit": default_limit})
        return parsed, raw


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
