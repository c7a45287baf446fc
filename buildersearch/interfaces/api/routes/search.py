"""
Search Routes - Record search, faceted search and engine maintenance.

Responses use the ``{success, message, data}`` envelope expected by the
AI Builder frontend.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from buildersearch.domains.search import SearchRankingEngine, SortBy
from buildersearch.interfaces.api.deps import get_search_engine

router = APIRouter()


class SearchRequest(BaseModel):
    """Search request body."""

    query: str = Field(..., min_length=1, description="Search query")
    filters: dict[str, Any] = Field(
        default_factory=dict,
        description="Literal, list of literals, or {min, max} per field",
    )
    limit: int = Field(default=10, ge=0)
    sort_by: SortBy = SortBy.RELEVANCE

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AdvancedSearchRequest(SearchRequest):
    """Faceted search request body."""

    limit: int = Field(default=20, ge=0)
    facet_fields: list[str] = Field(default_factory=list)


class ApiResponse(BaseModel):
    """Standard response envelope."""

    success: bool = True
    message: str
    data: Any = None


@router.post("", response_model=ApiResponse)
async def search(
    request: SearchRequest,
    engine: SearchRankingEngine = Depends(get_search_engine),
):
    """
    Search records with filters and ranking.

    - **query**: Search query text
    - **filters**: Field filters
    - **limit**: Maximum results (0 returns none)
    - **sortBy**: relevance, recency or popularity
    """
    # Every field is forwarded so equivalent requests share a cache entry
    response = await engine.execute(request.model_dump(by_alias=True, mode="json"))

    return ApiResponse(
        message="Search completed",
        data=response.model_dump(by_alias=True, mode="json"),
    )


@router.post("/advanced", response_model=ApiResponse)
async def advanced_search(
    request: AdvancedSearchRequest,
    engine: SearchRankingEngine = Depends(get_search_engine),
):
    """
    Search with facets over the returned results.

    - **facetFields**: Fields to compute value counts for
    """
    response = await engine.advanced_search(
        request.model_dump(by_alias=True, mode="json")
    )

    return ApiResponse(
        message="Advanced search completed",
        data=response.model_dump(by_alias=True, mode="json"),
    )


@router.get("/stats", response_model=ApiResponse)
async def search_stats(engine: SearchRankingEngine = Depends(get_search_engine)):
    """Query counters, cache size and index count."""
    return ApiResponse(
        message="Statistics retrieved",
        data={"searchStats": engine.get_stats().model_dump(by_alias=True)},
    )


@router.delete("/cache", response_model=ApiResponse)
async def clear_cache(engine: SearchRankingEngine = Depends(get_search_engine)):
    """Drop every cached search response."""
    cleared = engine.clear_cache()
    return ApiResponse(message="Cache cleared", data={"cleared": cleared})


@router.post("/index", response_model=ApiResponse)
async def build_index(engine: SearchRankingEngine = Depends(get_search_engine)):
    """Build the inverted index from the current store contents."""
    index = await engine.build_index()
    return ApiResponse(
        message="Index built",
        data={"tokens": len(index), "indexes": list(engine.indexes)},
    )
