"""Fluent builder for payload filters.

Example::

    query_filter = (
        FilterBuilder()
        .where("ticker").equals("NVDA")
        .and_()
        .where("sentiment").greater_than(0.7)
        .build()
    )

The logical mode is applied when ``build()`` runs, not when a condition is
added. ``.or_()`` between two ``.where()`` calls does not start a sub-group:
the last mode set before ``build()`` wraps every accumulated condition.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .filter_validator import validate_filter_condition
from .filters import (
    Filter,
    FilterValidationError,
    GeoBoundingBoxCondition,
    GeoPoint,
    GeoRadiusCondition,
    LogicalMode,
    MatchCondition,
    MatchValue,
    NotFilter,
    Number,
    OrFilter,
    RangeCondition,
    coerce_filter,
    composite_for,
)

GeoPointLike = GeoPoint | Mapping[str, Any]


def _as_geo_point(point: GeoPointLike, kind: str, field: str) -> GeoPoint:
    if isinstance(point, GeoPoint):
        return point
    try:
        return GeoPoint.model_validate(point)
    except PydanticValidationError as exc:
        raise FilterValidationError(
            f"Geographic point must have numeric lat and lon: {exc.errors()[0]['msg']}",
            kind,
            field,
        ) from exc


def _require_number(value: Any, kind: str, field: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FilterValidationError(
            f"Expected a number for '{field}', got {type(value).__name__}", kind, field
        )


class FilterBuilder:
    """Accumulates conditions and collapses them into one ``Filter``."""

    def __init__(self) -> None:
        self._conditions: list[Filter] = []
        self._mode = LogicalMode.AND

    @property
    def conditions(self) -> tuple[Filter, ...]:
        return tuple(self._conditions)

    @property
    def logical_mode(self) -> LogicalMode:
        return self._mode

    def where(self, field: str) -> FieldFilter:
        """Start a condition on payload ``field``."""
        return FieldFilter(field, self)

    def add_condition(self, condition: Filter | Mapping[str, Any]) -> FilterBuilder:
        """Append a filter model or its wire mapping as one condition."""
        node = coerce_filter(condition)
        if node is None:
            raise FilterValidationError("Condition cannot be None")
        self._conditions.append(node)
        return self

    # -- logical mode -------------------------------------------------------

    def and_(self) -> FilterBuilder:
        self._mode = LogicalMode.AND
        return self

    def or_(self) -> FilterBuilder:
        self._mode = LogicalMode.OR
        return self

    def not_(self) -> FilterBuilder:
        self._mode = LogicalMode.NOT
        return self

    # -- sub-builders -------------------------------------------------------

    def and_all(self, *builders: FilterBuilder) -> FilterBuilder:
        """Append each sub-builder's result as one child; empty ones are skipped."""
        for builder in builders:
            built = builder.build()
            if built is not None:
                self._conditions.append(built)
        return self

    def or_any(self, *builders: FilterBuilder) -> FilterBuilder:
        """Append the sub-builders' results together as a single ``should`` node."""
        alternatives = [built for built in (b.build() for b in builders) if built is not None]
        if alternatives:
            self._conditions.append(OrFilter(should=tuple(alternatives)))
        return self

    # -- output -------------------------------------------------------------

    def build(self) -> Filter | None:
        """Collapse the accumulated conditions.

        Returns ``None`` with no conditions, the condition itself when there is
        exactly one, and otherwise a composite keyed by the current mode.
        Builder state is left untouched.
        """
        if not self._conditions:
            return None
        if len(self._conditions) == 1:
            return self._conditions[0]
        return composite_for(self._mode, tuple(self._conditions))

    def validate(self) -> None:
        """Validate each top-level condition; composite children are not walked.

        Raises:
            FilterValidationError: no conditions, or the first invalid one.
        """
        if not self._conditions:
            raise FilterValidationError("Filter must have at least one condition")
        for condition in self._conditions:
            validate_filter_condition(condition)


class FieldFilter:
    """Predicates on one payload field; each appends to the owning builder."""

    def __init__(self, field: str, builder: FilterBuilder) -> None:
        self._field = field
        self._builder = builder

    @property
    def field(self) -> str:
        return self._field

    def equals(self, value: MatchValue) -> FilterBuilder:
        return self._builder.add_condition(MatchCondition(key=self._field, value=value))

    def not_equals(self, value: MatchValue) -> FilterBuilder:
        match = MatchCondition(key=self._field, value=value)
        return self._builder.add_condition(NotFilter(must_not=(match,)))

    def matches(self, text: str) -> FilterBuilder:
        """Exact text match; same condition as ``equals``."""
        return self.equals(text)

    def contains(self, value: MatchValue) -> FilterBuilder:
        # A match on an array field holds when any element equals the value.
        return self.equals(value)

    def greater_than(self, value: Number) -> FilterBuilder:
        return self._add_range(gt=value)

    def greater_than_or_equal(self, value: Number) -> FilterBuilder:
        return self._add_range(gte=value)

    def less_than(self, value: Number) -> FilterBuilder:
        return self._add_range(lt=value)

    def less_than_or_equal(self, value: Number) -> FilterBuilder:
        return self._add_range(lte=value)

    def in_range(self, min_value: Number, max_value: Number) -> FilterBuilder:
        """Inclusive range; raises before appending if ``min_value > max_value``."""
        _require_number(min_value, "range", self._field)
        _require_number(max_value, "range", self._field)
        if min_value > max_value:
            raise FilterValidationError(
                "Range minimum cannot be greater than maximum", "range", self._field
            )
        return self._add_range(gte=min_value, lte=max_value)

    def _add_range(self, **bounds: Number) -> FilterBuilder:
        for value in bounds.values():
            _require_number(value, "range", self._field)
        return self._builder.add_condition(RangeCondition(key=self._field, **bounds))

    def in_bounding_box(self, top_left: GeoPointLike, bottom_right: GeoPointLike) -> FilterBuilder:
        """Point inside the box. Coordinates are checked only by the validator."""
        kind = "geo_bounding_box"
        return self._builder.add_condition(
            GeoBoundingBoxCondition(
                key=self._field,
                top_left=_as_geo_point(top_left, kind, self._field),
                bottom_right=_as_geo_point(bottom_right, kind, self._field),
            )
        )

    def within_radius(self, center: GeoPointLike, radius_meters: Number) -> FilterBuilder:
        """Point within ``radius_meters``; raises before appending if radius <= 0."""
        _require_number(radius_meters, "geo_radius", self._field)
        if radius_meters <= 0:
            raise FilterValidationError("Radius must be positive", "geo_radius", self._field)
        return self._builder.add_condition(
            GeoRadiusCondition(
                key=self._field,
                center=_as_geo_point(center, "geo_radius", self._field),
                radius_meters=radius_meters,
            )
        )


def create_filter() -> FilterBuilder:
    """Return a new, empty ``FilterBuilder``."""
    return FilterBuilder()
