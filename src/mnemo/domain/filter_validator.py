"""Structural checks for filter conditions.

Validation is opt-in. Nothing in the builder or the store adapter calls these
functions, so a filter with an empty key or an unbounded range can be built
and sent unless the caller validates it first.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from .filters import (
    COMPOSITE_TYPES,
    LEAF_TYPES,
    Filter,
    FilterValidationError,
    GeoBoundingBoxCondition,
    GeoPoint,
    GeoRadiusCondition,
    MatchCondition,
    RangeCondition,
    parse_filter,
)

_KEY_MESSAGES = {
    "match": "Match filter must have a valid key",
    "range": "Range filter must have a valid key",
    "geo_bounding_box": "Geographic bounding box filter must have a valid key",
    "geo_radius": "Geographic radius filter must have a valid key",
}


def _is_finite_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _as_model(condition: Any) -> Filter:
    if isinstance(condition, LEAF_TYPES + COMPOSITE_TYPES):
        return condition
    if isinstance(condition, Mapping):
        return parse_filter(condition)
    raise FilterValidationError("Filter condition must be a filter model or an object")


def _check_key(condition: Any) -> str:
    key = condition.key
    if not isinstance(key, str) or not key:
        raise FilterValidationError(_KEY_MESSAGES[condition.kind], condition.kind)
    return key


def _validate_geo_point(point: GeoPoint, context: str, kind: str, key: str) -> None:
    if not _is_finite_number(point.lat):
        raise FilterValidationError(
            f"Geographic point {context} latitude must be a finite number", kind, key
        )
    if not _is_finite_number(point.lon):
        raise FilterValidationError(
            f"Geographic point {context} longitude must be a finite number", kind, key
        )
    if not -90 <= point.lat <= 90:
        raise FilterValidationError(
            f"Geographic point {context} latitude must be between -90 and 90", kind, key
        )
    if not -180 <= point.lon <= 180:
        raise FilterValidationError(
            f"Geographic point {context} longitude must be between -180 and 180", kind, key
        )


def validate_filter_condition(condition: Filter | Mapping[str, Any]) -> None:
    """Check a single condition and raise on the first problem found.

    Accepts a filter model or its wire mapping. Composite nodes pass without
    their children being inspected; use ``validate_filter`` to walk a tree.

    Raises:
        FilterValidationError: carrying ``filter_kind`` and, when known, ``field``.
    """
    condition = _as_model(condition)

    if isinstance(condition, MatchCondition):
        key = _check_key(condition)
        if condition.value is None:
            raise FilterValidationError("Match filter must have a value", "match", key)

    elif isinstance(condition, RangeCondition):
        key = _check_key(condition)
        bounds = condition.bounds()
        if not bounds:
            raise FilterValidationError(
                "Range filter must have at least one condition", "range", key
            )
        for value in bounds.values():
            if not _is_finite_number(value):
                raise FilterValidationError(
                    "Range filter values must be finite numbers", "range", key
                )

    elif isinstance(condition, GeoBoundingBoxCondition):
        key = _check_key(condition)
        _validate_geo_point(condition.top_left, "top_left", condition.kind, key)
        _validate_geo_point(condition.bottom_right, "bottom_right", condition.kind, key)

    elif isinstance(condition, GeoRadiusCondition):
        key = _check_key(condition)
        _validate_geo_point(condition.center, "center", condition.kind, key)
        if not _is_finite_number(condition.radius_meters) or condition.radius_meters <= 0:
            raise FilterValidationError(
                "Geographic radius must be a positive number", "geo_radius", key
            )


def validate_filter(value: Filter | Mapping[str, Any]) -> None:
    """Validate every leaf of a filter tree, depth first."""
    value = _as_model(value)
    if isinstance(value, COMPOSITE_TYPES):
        for child in value.children:
            validate_filter(child)
    else:
        validate_filter_condition(value)
