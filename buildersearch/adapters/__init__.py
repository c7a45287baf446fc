"""
Adapters - Record store integrations.

All storage access is wrapped here to isolate domains from persistence details.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .jsonfile import JSONFileRecordStore
from .sqlite import SQLiteRecordStore

if TYPE_CHECKING:
    from buildersearch.config import Settings
    from buildersearch.domains.search import RecordStore

__all__ = [
    "SQLiteRecordStore",
    "JSONFileRecordStore",
    "create_record_store",
]


def create_record_store(settings: Settings) -> RecordStore:
    """Build the record store selected by ``settings.record_store``."""
    if settings.record_store == "file":
        return JSONFileRecordStore(settings.records_file)
    return SQLiteRecordStore(
        settings.db_path,
        retry_attempts=settings.store_retry_attempts,
        retry_delay_seconds=settings.store_retry_delay_seconds,
    )
