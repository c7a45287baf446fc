"""
Relevance Scorer - Weighted multi-field bag-of-words scoring.

Per keyword:
- title (or, failing that, name) substring hit: +10
- description substring hit: +5
- serialized record substring hit: +2
- serialized record fuzzy hit: +1

The sum is normalized against ``len(keywords) * TITLE_WEIGHT`` and capped
at 100.
"""

from __future__ import annotations

from collections.abc import Sequence

from .models import Record
from .text import fuzzy_match, serialize_record

__all__ = [
    "TITLE_WEIGHT",
    "DESCRIPTION_WEIGHT",
    "FULL_TEXT_WEIGHT",
    "FUZZY_WEIGHT",
    "MAX_SCORE",
    "score_relevance",
    "matched_terms",
    "score_record",
]

TITLE_WEIGHT = 10
DESCRIPTION_WEIGHT = 5
FULL_TEXT_WEIGHT = 2
FUZZY_WEIGHT = 1
MAX_SCORE = 100.0


def score_relevance(record: Record, keywords: Sequence[str]) -> float:
    """
    Compute a relevance score in [0, 100].

    Args:
        record: Record to score
        keywords: Tokenized query (see ``tokenize``)

    Returns:
        Normalized score, 0.0 when there are no keywords
    """
    if not keywords:
        return 0.0

    title = _lowered(record, "title")
    name = _lowered(record, "name")
    description = _lowered(record, "description")
    text = serialize_record(record)

    total = 0
    for keyword in keywords:
        # Title takes precedence; name only counts when the title missed
        if title is not None and keyword in title:
            total += TITLE_WEIGHT
        elif name is not None and keyword in name:
            total += TITLE_WEIGHT

        if description is not None and keyword in description:
            total += DESCRIPTION_WEIGHT

        if keyword in text:
            total += FULL_TEXT_WEIGHT

        if fuzzy_match(text, keyword):
            total += FUZZY_WEIGHT

    return min(total / (len(keywords) * TITLE_WEIGHT) * 100, MAX_SCORE)


def matched_terms(record: Record, keywords: Sequence[str]) -> list[str]:
    """Keywords found verbatim in the serialized record, in keyword order."""
    text = serialize_record(record)
    return [keyword for keyword in keywords if keyword in text]


def score_record(record: Record, keywords: Sequence[str]) -> Record:
    """Copy of ``record`` annotated with ``relevanceScore`` and ``matchedTerms``."""
    return {
        **record,
        "relevanceScore": score_relevance(record, keywords),
        "matchedTerms": matched_terms(record, keywords),
    }


def _lowered(record: Record, field: str) -> str | None:
    value = record.get(field)
    return value.lower() if isinstance(value, str) else None
