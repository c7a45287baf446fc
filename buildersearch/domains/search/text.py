"""
Text Utilities - Query tokenization, record serialization and fuzzy matching.
"""

from __future__ import annotations

import json
import re
from typing import Any

__all__ = ["tokenize", "serialize_record", "fuzzy_match"]

_NON_WORD = re.compile(r"[^\w]", re.ASCII)


def tokenize(query: str | None) -> list[str]:
    """
    Split a free-text query into searchable keywords.

    Lowercases, splits on whitespace, strips everything but ASCII word
    characters and keeps tokens longer than two characters.

    Example:
        >>> tokenize("Red, shoes & a hat!")
        ['red', 'shoes', 'hat']
    """
    if not query:
        return []

    tokens = (_NON_WORD.sub("", word) for word in query.lower().split())
    return [token for token in tokens if len(token) > 2]


def serialize_record(record: dict[str, Any]) -> str:
    """Compact, lowercased JSON text of a record, used for full-text checks."""
    return json.dumps(
        record, separators=(",", ":"), ensure_ascii=False, default=str
    ).lower()


def fuzzy_match(text: str, pattern: str) -> bool:
    """
    Ordered-subsequence containment test.

    True when every character of ``pattern`` occurs in ``text`` in order,
    not necessarily contiguously. Deliberately permissive: "cat" matches
    "cartage".
    """
    pattern_idx = 0
    pattern_len = len(pattern)

    for char in text:
        if pattern_idx == pattern_len:
            break
        if char == pattern[pattern_idx]:
            pattern_idx += 1

    return pattern_idx == pattern_len
