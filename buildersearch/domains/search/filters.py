"""
Filter Evaluator - Structured AND-filtering over schema-less records.

A filter condition is one of:
- a list, tuple or set of literals: the field value must be a member
- a mapping with ``min`` and/or ``max``: inclusive numeric range
- any other literal: strict equality

Composite literals (mappings without bounds, nested lists) never match a
stored value.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .models import Record

__all__ = ["apply_filters", "matches_filters", "strict_equals"]

_MISSING = object()
_MEMBERSHIP_TYPES = (list, tuple, set, frozenset)


def apply_filters(
    records: Iterable[Record],
    filters: Mapping[str, Any] | None,
) -> list[Record]:
    """Return records satisfying every filter. No filters passes everything."""
    if not filters:
        return list(records)
    return [record for record in records if matches_filters(record, filters)]


def matches_filters(record: Record, filters: Mapping[str, Any]) -> bool:
    """Check a single record against all filters (logical AND)."""
    for field, condition in filters.items():
        value = record.get(field, _MISSING)
        if value is _MISSING:
            return False

        if isinstance(condition, _MEMBERSHIP_TYPES):
            if not any(_literal_matches(value, candidate) for candidate in condition):
                return False
        elif isinstance(condition, Mapping):
            if "min" not in condition and "max" not in condition:
                return False
            if not _in_range(value, condition.get("min"), condition.get("max")):
                return False
        elif not _literal_matches(value, condition):
            return False

    return True


def _literal_matches(value: Any, literal: Any) -> bool:
    if isinstance(literal, (Mapping, *_MEMBERSHIP_TYPES)):
        return False
    return strict_equals(value, literal)


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without bool/number or str/number coercion."""
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if _is_number(left) and _is_number(right):
        return left == right
    return type(left) is type(right) and left == right


def _in_range(value: Any, low: Any, high: Any) -> bool:
    try:
        if low is not None and value < low:
            return False
        if high is not None and value > high:
            return False
    except TypeError:
        # Incomparable types (e.g. str vs int) never satisfy a range
        return False
    return True


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
