"""
Facet Generator - Distinct value counts for UI filtering.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from .filters import strict_equals
from .models import FacetValue, Record

__all__ = ["generate_facets"]


def generate_facets(
    results: Sequence[Record],
    facet_fields: Iterable[str],
) -> dict[str, list[FacetValue]]:
    """
    Count distinct values per field across ``results``.

    Values keep first-seen order (not sorted by count). Falsy values
    (missing, None, "", 0, False) are skipped.

    Example:
        >>> generate_facets([{"category": "a"}, {"category": "b"}, {"category": "a"}], ["category"])
        {'category': [FacetValue(value='a', count=2), FacetValue(value='b', count=1)]}
    """
    facets: dict[str, list[FacetValue]] = {}

    for field in facet_fields:
        # (value, count) pairs; list scan keeps unhashable values countable
        counts: list[list[Any]] = []
        for result in results:
            value = result.get(field)
            if not value:
                continue
            for entry in counts:
                if strict_equals(entry[0], value):
                    entry[1] += 1
                    break
            else:
                counts.append([value, 1])

        facets[field] = [FacetValue(value=value, count=count) for value, count in counts]

    return facets
