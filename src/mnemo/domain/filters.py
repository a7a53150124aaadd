"""Typed filter expressions for payload-scoped vector queries.

A ``Filter`` is a tree. Leaves are single-field predicates (match, range,
geo bounding box, geo radius); composites combine child filters with
``must`` (AND), ``should`` (OR) or ``must_not`` (NOT).

Models are frozen and child sequences are tuples, so a filter never changes
after construction. Construction checks types only: semantic rules (empty
keys, missing range bounds, coordinates out of range) are checked by
``filter_validator`` when a caller asks for it.

``to_wire()`` produces the snake_case JSON shape and ``parse_filter()`` reads
it back.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt
from pydantic import ValidationError as PydanticValidationError

MatchValue = Union[bool, int, float, str]
# Strict: strings and bools are not numbers.
Number = Union[StrictInt, StrictFloat]


class FilterValidationError(ValueError):
    """Raised when a filter is structurally invalid."""

    def __init__(
        self,
        message: str,
        filter_kind: str | None = None,
        field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.filter_kind = filter_kind
        self.field = field


class LogicalMode(str, Enum):
    """How a builder wraps two or more accumulated conditions."""

    AND = "must"
    OR = "should"
    NOT = "must_not"


class _FilterModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class GeoPoint(_FilterModel):
    """Geographic coordinates in degrees."""

    lat: Number = Field(..., description="Latitude, -90..90")
    lon: Number = Field(..., description="Longitude, -180..180")

    def to_wire(self) -> dict[str, Number]:
        return {"lat": self.lat, "lon": self.lon}


# ---------------------------------------------------------------------------
# Leaf conditions
# ---------------------------------------------------------------------------


class MatchCondition(_FilterModel):
    """Payload field equals ``value``."""

    kind: Literal["match"] = "match"
    key: str = Field(..., description="Payload field name")
    value: MatchValue | None = Field(..., description="Value to match exactly")

    def to_wire(self) -> dict[str, Any]:
        return {"match": {"key": self.key, "value": self.value}}


class RangeCondition(_FilterModel):
    """Numeric comparison on a payload field."""

    kind: Literal["range"] = "range"
    key: str = Field(..., description="Payload field name")
    gte: Number | None = Field(default=None, description="Greater than or equal")
    lte: Number | None = Field(default=None, description="Less than or equal")
    gt: Number | None = Field(default=None, description="Strictly greater than")
    lt: Number | None = Field(default=None, description="Strictly less than")

    def bounds(self) -> dict[str, Number]:
        """Return the bounds that are set, in gte/lte/gt/lt order."""
        pairs = (("gte", self.gte), ("lte", self.lte), ("gt", self.gt), ("lt", self.lt))
        return {name: value for name, value in pairs if value is not None}

    def to_wire(self) -> dict[str, Any]:
        return {"range": {"key": self.key, **self.bounds()}}


class GeoBoundingBoxCondition(_FilterModel):
    """Geo point field lies inside a rectangle."""

    kind: Literal["geo_bounding_box"] = "geo_bounding_box"
    key: str = Field(..., description="Payload field holding a geo point")
    top_left: GeoPoint
    bottom_right: GeoPoint

    def to_wire(self) -> dict[str, Any]:
        return {
            "geo_bounding_box": {
                "key": self.key,
                "bounding_box": {
                    "top_left": self.top_left.to_wire(),
                    "bottom_right": self.bottom_right.to_wire(),
                },
            }
        }


class GeoRadiusCondition(_FilterModel):
    """Geo point field lies within ``radius_meters`` of ``center``."""

    kind: Literal["geo_radius"] = "geo_radius"
    key: str = Field(..., description="Payload field holding a geo point")
    center: GeoPoint
    radius_meters: Number = Field(..., description="Radius in meters")

    def to_wire(self) -> dict[str, Any]:
        return {
            "geo_radius": {
                "key": self.key,
                "center": self.center.to_wire(),
                "radius": self.radius_meters,
            }
        }


# ---------------------------------------------------------------------------
# Composites
# ---------------------------------------------------------------------------


class AndFilter(_FilterModel):
    """All children must hold."""

    kind: Literal["must"] = "must"
    must: tuple[Filter, ...] = ()

    @property
    def children(self) -> tuple[Filter, ...]:
        return self.must

    def to_wire(self) -> dict[str, Any]:
        return {"must": [child.to_wire() for child in self.must]}


class OrFilter(_FilterModel):
    """At least one child must hold."""

    kind: Literal["should"] = "should"
    should: tuple[Filter, ...] = ()

    @property
    def children(self) -> tuple[Filter, ...]:
        return self.should

    def to_wire(self) -> dict[str, Any]:
        return {"should": [child.to_wire() for child in self.should]}


class NotFilter(_FilterModel):
    """No child may hold."""

    kind: Literal["must_not"] = "must_not"
    must_not: tuple[Filter, ...] = ()

    @property
    def children(self) -> tuple[Filter, ...]:
        return self.must_not

    def to_wire(self) -> dict[str, Any]:
        return {"must_not": [child.to_wire() for child in self.must_not]}


FilterCondition = Union[
    MatchCondition,
    RangeCondition,
    GeoBoundingBoxCondition,
    GeoRadiusCondition,
]
CompositeFilter = Union[AndFilter, OrFilter, NotFilter]
Filter = Annotated[
    Union[
        MatchCondition,
        RangeCondition,
        GeoBoundingBoxCondition,
        GeoRadiusCondition,
        AndFilter,
        OrFilter,
        NotFilter,
    ],
    Field(discriminator="kind"),
]

LEAF_TYPES = (MatchCondition, RangeCondition, GeoBoundingBoxCondition, GeoRadiusCondition)
COMPOSITE_TYPES = (AndFilter, OrFilter, NotFilter)

for _model in COMPOSITE_TYPES:
    _model.model_rebuild()

# A composite's kind doubles as the name of its children field.
_COMPOSITES_BY_KEY = {"must": AndFilter, "should": OrFilter, "must_not": NotFilter}
WIRE_KEYS = frozenset({"match", "range", "geo_bounding_box", "geo_radius", *_COMPOSITES_BY_KEY})


def composite_for(mode: LogicalMode, children: tuple[Filter, ...]) -> CompositeFilter:
    """Wrap ``children`` in the composite that ``mode`` names."""
    key = LogicalMode(mode).value
    return _COMPOSITES_BY_KEY[key](**{key: children})


# ---------------------------------------------------------------------------
# Wire codec
# ---------------------------------------------------------------------------


def is_filter_wire(data: Any) -> bool:
    """True if ``data`` looks like a single wire-shaped filter node."""
    return isinstance(data, Mapping) and len(data) == 1 and next(iter(data)) in WIRE_KEYS


def filter_to_wire(value: Filter | None) -> dict[str, Any] | None:
    """Return the wire shape of ``value``, or ``None`` for no filter."""
    if value is None:
        return None
    return value.to_wire()


def parse_filter(data: Mapping[str, Any]) -> Filter:
    """Build a filter model from its wire shape.

    Only the shape is checked here. A range without bounds or a point at
    latitude 200 parses fine; ``validate_filter_condition`` rejects them.

    Raises:
        FilterValidationError: ``data`` is not a recognizable filter node.
    """
    if not is_filter_wire(data):
        raise FilterValidationError(
            f"Filter must be an object with exactly one of {sorted(WIRE_KEYS)}"
        )
    kind, body = next(iter(data.items()))

    if kind in _COMPOSITES_BY_KEY:
        if not isinstance(body, (list, tuple)):
            raise FilterValidationError(f"'{kind}' must hold a list of filters", kind)
        children = tuple(parse_filter(child) for child in body)
        return composite_for(LogicalMode(kind), children)

    if not isinstance(body, Mapping):
        raise FilterValidationError(f"'{kind}' must hold an object", kind)
    key = body.get("key", "")
    try:
        if kind == "match":
            return MatchCondition(key=key, value=body.get("value"))
        if kind == "range":
            return RangeCondition(
                key=key,
                gte=body.get("gte"),
                lte=body.get("lte"),
                gt=body.get("gt"),
                lt=body.get("lt"),
            )
        if kind == "geo_bounding_box":
            box = body.get("bounding_box") or {}
            return GeoBoundingBoxCondition(
                key=key,
                top_left=box.get("top_left"),
                bottom_right=box.get("bottom_right"),
            )
        return GeoRadiusCondition(
            key=key,
            center=body.get("center"),
            radius_meters=body.get("radius"),
        )
    except PydanticValidationError as exc:
        raise FilterValidationError(
            f"Malformed {kind} filter: {exc.errors()[0]['msg']}",
            kind,
            key if isinstance(key, str) else None,
        ) from exc


def coerce_filter(value: Filter | Mapping[str, Any] | None) -> Filter | None:
    """Accept a model, a wire mapping, or ``None``."""
    if value is None or isinstance(value, LEAF_TYPES + COMPOSITE_TYPES):
        return value
    return parse_filter(value)
