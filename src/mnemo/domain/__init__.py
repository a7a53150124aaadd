"""Domain types shared across the application."""

from .filter_builder import FieldFilter, FilterBuilder, create_filter
from .filter_helpers import (
    combine_filters_and,
    combine_filters_or,
    create_equality_filter,
    create_range_filter,
    is_empty_filter,
    negate_filter,
    serialize_filter,
)
from .filter_validator import validate_filter, validate_filter_condition
from .filters import (
    AndFilter,
    Filter,
    FilterCondition,
    FilterValidationError,
    GeoBoundingBoxCondition,
    GeoPoint,
    GeoRadiusCondition,
    LogicalMode,
    MatchCondition,
    NotFilter,
    OrFilter,
    RangeCondition,
    filter_to_wire,
    is_filter_wire,
    parse_filter,
)

__all__ = [
    "AndFilter",
    "FieldFilter",
    "Filter",
    "FilterBuilder",
    "FilterCondition",
    "FilterValidationError",
    "GeoBoundingBoxCondition",
    "GeoPoint",
    "GeoRadiusCondition",
    "LogicalMode",
    "MatchCondition",
    "NotFilter",
    "OrFilter",
    "RangeCondition",
    "combine_filters_and",
    "combine_filters_or",
    "create_equality_filter",
    "create_filter",
    "create_range_filter",
    "filter_to_wire",
    "is_empty_filter",
    "is_filter_wire",
    "negate_filter",
    "parse_filter",
    "serialize_filter",
    "validate_filter",
    "validate_filter_condition",
]
