"""
Search Models - Data types for search domain.

Wire names are camelCase (``sortBy``, ``resultCount``...) to match the
JSON contract consumed by the AI Builder frontend; Python attributes stay
snake_case.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# One schema-less searchable item from the record store
Record = dict[str, Any]


class SortBy(str, Enum):
    """Result orderings."""

    RELEVANCE = "relevance"
    RECENCY = "recency"
    POPULARITY = "popularity"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchParams(_CamelModel):
    """Parameters accepted by ``SearchRankingEngine.execute``."""

    query: str | None = None
    filters: dict[str, Any] = Field(default_factory=dict)
    limit: int = Field(default=10, ge=0)
    sort_by: SortBy = SortBy.RELEVANCE

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


class AdvancedSearchParams(SearchParams):
    """Parameters for faceted search."""

    limit: int = Field(default=20, ge=0)
    facet_fields: list[str] = Field(default_factory=list)


class SearchStats(_CamelModel):
    """Running engine counters."""

    queries_executed: int = 0
    cache_hits: int = 0
    # Blended as (avg + latest) / 2, not an arithmetic mean
    average_time: float = 0.0


class EngineStats(SearchStats):
    """Counters plus cache and index sizes."""

    cached_queries: int = 0
    indexed_fields: int = 0


class FacetValue(_CamelModel):
    """One distinct field value and how often it occurs."""

    value: Any
    count: int


class SearchResponse(_CamelModel):
    """Result of ``execute``."""

    query: str | None
    filters: dict[str, Any] | None = None
    result_count: int
    results: list[Record]
    execution_time: int  # milliseconds
    stats: SearchStats
    from_cache: bool = False


class AdvancedSearchResponse(_CamelModel):
    """Result of ``advanced_search``."""

    query: str | None
    result_count: int
    results: list[Record]
    facets: dict[str, list[FacetValue]]
    applied_filters: dict[str, Any]
    execution_time: str  # informal, e.g. "12ms"
