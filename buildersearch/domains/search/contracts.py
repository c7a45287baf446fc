"""
Search Contracts - Interfaces for search domain.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from .models import (
    AdvancedSearchParams,
    AdvancedSearchResponse,
    Record,
    SearchParams,
    SearchResponse,
)


@runtime_checkable
class RecordStore(Protocol):
    """Contract for anything that can hand the engine its candidate records."""

    async def find(self, query: Mapping[str, Any] | None = None) -> list[Record]:
        """Return records matching ``query`` (all records when empty)."""
        ...


@runtime_checkable
class SearchEngine(Protocol):
    """Contract for search implementations."""

    async def execute(
        self,
        params: SearchParams | Mapping[str, Any],
    ) -> SearchResponse:
        """Execute a (cached) search."""
        ...

    async def advanced_search(
        self,
        params: AdvancedSearchParams | Mapping[str, Any],
    ) -> AdvancedSearchResponse:
        """Execute a faceted search."""
        ...
