"""
SQLite Record Store - Schema-less JSON documents in a single table.

Features:
- Async operations via aiosqlite
- Connection retries via tenacity
- Top-level equality queries evaluated over decoded documents
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import aiosqlite
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from buildersearch.config.errors import ErrorCode, StorageError

logger = logging.getLogger(__name__)

__all__ = ["SQLiteRecordStore"]


class SQLiteRecordStore:
    """
    SQLite-backed record store.

    Example:
        >>> store = SQLiteRecordStore("data/buildersearch.db")
        >>> await store.initialize()
        >>> await store.insert_record({"title": "Red Shoes", "views": 5})
        >>> records = await store.find({})
    """

    def __init__(
        self,
        db_path: str | Path,
        retry_attempts: int = 3,
        retry_delay_seconds: float = 2.0,
    ) -> None:
        """
        Initialize store.

        Args:
            db_path: Path to SQLite database file
            retry_attempts: Connection attempts before giving up
            retry_delay_seconds: Fixed delay between connection attempts
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._retry_attempts = retry_attempts
        self._retry_delay = retry_delay_seconds
        self._connection: aiosqlite.Connection | None = None

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection."""
        if self._connection is not None:
            return self._connection

        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(sqlite3.OperationalError),
                stop=stop_after_attempt(self._retry_attempts),
                wait=wait_fixed(self._retry_delay),
            ):
                with attempt:
                    logger.debug(
                        "Connecting to %s (attempt %d/%d)",
                        self.db_path,
                        attempt.retry_state.attempt_number,
                        self._retry_attempts,
                    )
                    connection = await aiosqlite.connect(str(self.db_path))
        except RetryError as e:
            raise StorageError(
                f"Could not open record store: {self.db_path}",
                details={"attempts": self._retry_attempts},
                code=ErrorCode.STORAGE_CONNECTION_FAILED,
            ) from e.last_attempt.exception()

        connection.row_factory = aiosqlite.Row
        self._connection = connection
        return connection

    async def initialize(self) -> None:
        """Initialize database schema."""
        conn = await self._get_connection()

        await conn.executescript("""
            CREATE TABLE IF NOT EXISTS records (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                data TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );
        """)

        await conn.commit()
        logger.info("Record store initialized: %s", self.db_path)

    async def insert_record(self, record: Mapping[str, Any]) -> int:
        """
        Insert one record.

        Returns:
            Row ID
        """
        conn = await self._get_connection()

        try:
            cursor = await conn.execute(
                "INSERT INTO records (data) VALUES (?)",
                (json.dumps(dict(record), default=str),),
            )
            await conn.commit()
        except sqlite3.Error as e:
            raise StorageError(
                "Failed to insert record", code=ErrorCode.STORAGE_WRITE_FAILED
            ) from e

        return cursor.lastrowid

    async def insert_records(self, records: Iterable[Mapping[str, Any]]) -> int:
        """Insert many records in one transaction and return how many were written."""
        conn = await self._get_connection()
        rows = [(json.dumps(dict(record), default=str),) for record in records]

        try:
            await conn.executemany("INSERT INTO records (data) VALUES (?)", rows)
            await conn.commit()
        except sqlite3.Error as e:
            raise StorageError(
                "Failed to insert records",
                details={"count": len(rows)},
                code=ErrorCode.STORAGE_WRITE_FAILED,
            ) from e

        logger.info("Inserted %d records", len(rows))
        return len(rows)

    async def find(self, query: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """
        Find records whose top-level fields equal every ``query`` value.

        Args:
            query: Field/value pairs (empty or None returns everything)

        Returns:
            Decoded records in insertion order
        """
        conn = await self._get_connection()

        try:
            cursor = await conn.execute("SELECT data FROM records ORDER BY id")
            rows = await cursor.fetchall()
            records = [json.loads(row["data"]) for row in rows]
        except (sqlite3.Error, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read records from {self.db_path}") from e

        if not query:
            return records
        return [
            record
            for record in records
            if all(record.get(key) == value for key, value in query.items())
        ]

    async def count(self) -> int:
        """Get total record count."""
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT COUNT(*) FROM records")
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def clear(self) -> int:
        """Delete every record and return how many were removed."""
        conn = await self._get_connection()
        cursor = await conn.execute("DELETE FROM records")
        await conn.commit()
        return cursor.rowcount

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None
