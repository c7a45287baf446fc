"""
JSON File Record Store - Records kept as a single JSON array on disk.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from buildersearch.config.errors import StorageError

logger = logging.getLogger(__name__)

__all__ = ["JSONFileRecordStore"]


class JSONFileRecordStore:
    """
    Read-only record store over a JSON array file.

    The file is re-read on every ``find`` so edits show up without a restart.
    A missing file is an empty store; malformed content raises ``StorageError``.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    async def find(self, query: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Return records whose top-level fields equal every ``query`` value."""
        records = self._load()
        if not query:
            return records
        return [
            record
            for record in records
            if all(record.get(key) == value for key, value in query.items())
        ]

    def _load(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            logger.warning("Record file not found: %s", self.path)
            return []

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(
                f"Could not load record file: {self.path}",
                details={"reason": str(e)},
            ) from e

        if not isinstance(data, list):
            raise StorageError(
                f"Record file must contain a JSON array: {self.path}",
                details={"type": type(data).__name__},
            )

        return [item for item in data if isinstance(item, dict)]
