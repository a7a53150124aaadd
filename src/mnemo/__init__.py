"""mnemo: vector memory SDK for Qdrant with composable query filters."""

from .domain import (
    AndFilter,
    FieldFilter,
    Filter,
    FilterBuilder,
    FilterValidationError,
    GeoBoundingBoxCondition,
    GeoPoint,
    GeoRadiusCondition,
    LogicalMode,
    MatchCondition,
    NotFilter,
    OrFilter,
    RangeCondition,
    combine_filters_and,
    combine_filters_or,
    create_equality_filter,
    create_filter,
    create_range_filter,
    is_empty_filter,
    negate_filter,
    parse_filter,
    serialize_filter,
    validate_filter,
    validate_filter_condition,
)
from .models import MemoryRecord, SearchResult

__version__ = "0.1.0"
__all__ = [
    # Filters
    "AndFilter",
    "FieldFilter",
    "Filter",
    "FilterBuilder",
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
    "is_empty_filter",
    "negate_filter",
    "parse_filter",
    "serialize_filter",
    "validate_filter",
    "validate_filter_condition",
    # Records
    "MemoryRecord",
    "SearchResult",
]
