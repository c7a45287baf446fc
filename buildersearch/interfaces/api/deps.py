"""
API Dependencies - Dependency injection for FastAPI routes.

Provides singleton instances of the record store and search engine.
"""

from __future__ import annotations

from functools import lru_cache

from buildersearch.adapters import SQLiteRecordStore, create_record_store
from buildersearch.config import get_settings
from buildersearch.domains.search import RecordStore, SearchRankingEngine


@lru_cache
def get_record_store() -> RecordStore:
    """Get record store singleton."""
    return create_record_store(get_settings())


@lru_cache
def get_search_engine() -> SearchRankingEngine:
    """Get search engine singleton (owns the query cache and statistics)."""
    settings = get_settings()
    return SearchRankingEngine(
        get_record_store(),
        cache_max_entries=settings.cache_max_entries,
        default_limit=settings.search_default_limit,
        advanced_default_limit=settings.advanced_search_default_limit,
    )


async def init_services() -> None:
    """
    Initialize services on startup.

    This should be called from the FastAPI lifespan handler.
    """
    store = get_record_store()
    if isinstance(store, SQLiteRecordStore):
        await store.initialize()


async def cleanup_services() -> None:
    """Cleanup services on shutdown."""
    store = get_record_store()
    if isinstance(store, SQLiteRecordStore):
        await store.close()
