"""
SQLite Adapter - Record storage via aiosqlite.
"""

from .repository import SQLiteRecordStore

__all__ = ["SQLiteRecordStore"]
