"""
Inverted Index Builder.

Maps each token of a record's ``title`` and ``description`` to the positions
of the records containing it. The search path does not consult these
indexes; every query is still a linear scan over the store contents.
"""

from __future__ import annotations

from collections.abc import Sequence

from .models import Record
from .text import tokenize

__all__ = ["InvertedIndex", "build_inverted_index"]

InvertedIndex = dict[str, list[int]]


def build_inverted_index(records: Sequence[Record]) -> InvertedIndex:
    """
    Build ``token -> [record indices]``.

    A record index appears once per occurrence of the token, so a token
    repeated in title and description lists the record twice.
    """
    index: InvertedIndex = {}

    for position, record in enumerate(records):
        text = f"{_text(record, 'title')} {_text(record, 'description')}"
        for token in tokenize(text):
            index.setdefault(token, []).append(position)

    return index


def _text(record: Record, field: str) -> str:
    value = record.get(field)
    return "" if value is None else str(value)
