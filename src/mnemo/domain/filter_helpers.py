"""Stateless constructors and combinators for ``Filter`` values."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from .filters import (
    COMPOSITE_TYPES,
    AndFilter,
    Filter,
    FilterValidationError,
    LogicalMode,
    MatchCondition,
    MatchValue,
    NotFilter,
    Number,
    OrFilter,
    RangeCondition,
)

_COMPOSITE_KEYS = frozenset(mode.value for mode in LogicalMode)


def create_equality_filter(field: str, value: MatchValue) -> MatchCondition:
    return MatchCondition(key=field, value=value)


def create_range_filter(
    field: str,
    min_value: Number | None = None,
    max_value: Number | None = None,
) -> RangeCondition:
    """Inclusive range on ``field``; at least one bound is required."""
    if min_value is None and max_value is None:
        raise FilterValidationError(
            "Range filter must have at least min or max value", "range", field
        )
    return RangeCondition(key=field, gte=min_value, lte=max_value)


def combine_filters_and(filters: Sequence[Filter]) -> Filter:
    """AND the filters together; a single filter is returned as is."""
    if not filters:
        raise FilterValidationError("Cannot combine empty filter array")
    if len(filters) == 1:
        return filters[0]
    return AndFilter(must=tuple(filters))


def combine_filters_or(filters: Sequence[Filter]) -> Filter:
    """OR the filters together; a single filter is returned as is."""
    if not filters:
        raise FilterValidationError("Cannot combine empty filter array")
    if len(filters) == 1:
        return filters[0]
    return OrFilter(should=tuple(filters))


def negate_filter(value: Filter) -> NotFilter:
    # No double-negation folding: not(not(x)) stays two levels deep.
    return NotFilter(must_not=(value,))


def is_empty_filter(value: Filter | Mapping[str, Any] | None) -> bool:
    """True for no filter or a composite without children.

    Leaves are never empty, whatever their content. Mappings are inspected
    by shape only and never parsed.
    """
    if value is None:
        return True
    if isinstance(value, COMPOSITE_TYPES):
        return len(value.children) == 0
    if isinstance(value, Mapping) and len(value) == 1:
        kind, body = next(iter(value.items()))
        if kind in _COMPOSITE_KEYS:
            return isinstance(body, (list, tuple)) and len(body) == 0
    return False


def serialize_filter(value: Filter) -> str:
    """Indented JSON of the wire shape, for logs and debugging."""
    return json.dumps(value.to_wire(), indent=2)
