#!/usr/bin/env python3
"""
Record Import Tool - Load search records into the SQLite record store.

Accepts either a JSON array file or a JSONL file (one record per line).

Usage:
    python tools/import_records.py data/search_index.json
    python tools/import_records.py exports/records.jsonl --replace
    python tools/import_records.py data/search_index.json --build-index
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from buildersearch.adapters import SQLiteRecordStore
from buildersearch.config import get_settings
from buildersearch.domains.search import build_inverted_index

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def read_records(source: Path) -> list[dict[str, Any]]:
    """
    Read records from a JSON array or JSONL file.

    Non-object entries are skipped with a warning.
    """
    if source.suffix == ".jsonl":
        items = []
        with open(source, encoding="utf-8") as f:
            for line_no, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    items.append(json.loads(line))
                except json.JSONDecodeError as e:
                    logger.warning("Skipping line %d: %s", line_no, e)
    else:
        with open(source, encoding="utf-8") as f:
            items = json.load(f)
        if not isinstance(items, list):
            raise ValueError(f"{source} must contain a JSON array")

    records = [item for item in items if isinstance(item, dict)]
    skipped = len(items) - len(records)
    if skipped:
        logger.warning("Skipped %d non-object entries", skipped)
    return records


async def import_records(source: Path, db_path: Path, replace: bool) -> int:
    """Insert records from ``source`` into the store at ``db_path``."""
    records = read_records(source)
    store = SQLiteRecordStore(db_path)

    try:
        await store.initialize()
        if replace:
            removed = await store.clear()
            logger.info("Removed %d existing records", removed)
        count = await store.insert_records(records)
        total = await store.count()
    finally:
        await store.close()

    logger.info("Imported %d records from %s (store total: %d)", count, source, total)
    return count


def main() -> int:
    parser = argparse.ArgumentParser(description="Import search records into SQLite")
    parser.add_argument("source", type=Path, help="JSON array or JSONL file")
    parser.add_argument("--db", type=Path, help="Database path (default from settings)")
    parser.add_argument("--replace", action="store_true", help="Delete existing records first")
    parser.add_argument(
        "--build-index",
        action="store_true",
        help="Report inverted index size for the imported records",
    )
    args = parser.parse_args()

    if not args.source.exists():
        logger.error("Source not found: %s", args.source)
        return 1

    db_path = args.db or get_settings().db_path
    asyncio.run(import_records(args.source, db_path, args.replace))

    if args.build_index:
        index = build_inverted_index(read_records(args.source))
        logger.info("Inverted index: %d tokens", len(index))

    return 0


if __name__ == "__main__":
    sys.exit(main())
