"""Tests for SQLite Record Store."""

import sqlite3
from pathlib import Path
from unittest.mock import patch

import pytest

from buildersearch.config.errors import ErrorCode, StorageError

from .repository import SQLiteRecordStore


@pytest.fixture
async def store(tmp_path: Path):
    """Create a test store with temporary database."""
    store = SQLiteRecordStore(tmp_path / "test.db")
    await store.initialize()
    yield store
    await store.close()


async def test_initialize_creates_table(store: SQLiteRecordStore):
    """Test that initialize creates the records table."""
    conn = await store._get_connection()
    cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    tables = {row[0] for row in await cursor.fetchall()}

    assert "records" in tables


async def test_insert_and_find(store: SQLiteRecordStore):
    """Test records round-trip through the store in insertion order."""
    first_id = await store.insert_record({"title": "Red Shoes", "views": 5})
    await store.insert_record({"name": "Red Hat", "tags": ["hat", "red"]})

    assert first_id > 0

    records = await store.find({})
    assert records == [
        {"title": "Red Shoes", "views": 5},
        {"name": "Red Hat", "tags": ["hat", "red"]},
    ]


async def test_find_with_query(store: SQLiteRecordStore):
    """Test top-level equality queries."""
    await store.insert_records(
        [
            {"title": "A", "status": "active"},
            {"title": "B", "status": "draft"},
            {"title": "C", "status": "active"},
        ]
    )

    active = await store.find({"status": "active"})
    assert [r["title"] for r in active] == ["A", "C"]
    assert len(await store.find(None)) == 3


async def test_insert_records_and_count(store: SQLiteRecordStore):
    """Test bulk insert and count."""
    assert await store.count() == 0

    written = await store.insert_records([{"title": str(i)} for i in range(5)])

    assert written == 5
    assert await store.count() == 5


async def test_clear(store: SQLiteRecordStore):
    """Test clear removes every record."""
    await store.insert_records([{"title": "a"}, {"title": "b"}])

    assert await store.clear() == 2
    assert await store.find({}) == []


async def test_find_empty_store(store: SQLiteRecordStore):
    """Test an empty store finds nothing."""
    assert await store.find({}) == []


async def test_connection_retries_then_fails(tmp_path: Path):
    """Test connection failures are retried and then reported as StorageError."""
    store = SQLiteRecordStore(tmp_path / "retry.db", retry_attempts=2, retry_delay_seconds=0)

    with patch(
        "buildersearch.adapters.sqlite.repository.aiosqlite.connect",
        side_effect=sqlite3.OperationalError("database is locked"),
    ) as connect:
        with pytest.raises(StorageError) as exc_info:
            await store.initialize()

    assert connect.call_count == 2
    assert exc_info.value.code == ErrorCode.STORAGE_CONNECTION_FAILED
