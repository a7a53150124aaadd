"""Adapter: Qdrant-based VectorStore implementing VectorStorePort."""

from __future__ import annotations

import logging
import math
import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

import httpx
from qdrant_client import QdrantClient
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    FilterSelector,
    GeoBoundingBox,
    GeoPoint,
    GeoRadius,
    MatchAny,
    MatchValue,
    PointIdsList,
    PointStruct,
    Range,
    VectorParams,
)

from ..config.runtime import MnemoSettings
from ..domain import filters as mf
from ..models.memory import MemoryRecord, SearchResult
from ..ports.vector_store import (
    QueryFilter,
    VectorStoreAuthenticationError,
    VectorStoreConnectionError,
    VectorStoreError,
    VectorStoreValidationError,
)

_LOGGER = logging.getLogger(__name__)

# Payload key holding the caller's memory ID; Qdrant point IDs are UUIDs.
MEMORY_ID_KEY = "memory_id"

_RANGE_KEYS = frozenset({"gte", "lte", "gt", "lt"})


def _error_for_status(status_code: int, message: str, details: Any = None) -> VectorStoreError:
    if status_code in (400, 422):
        return VectorStoreValidationError(message, details)
    if status_code in (401, 403):
        return VectorStoreAuthenticationError(message, status_code)
    if status_code >= 500:
        return VectorStoreConnectionError(message, details, status_code)
    return VectorStoreError(message, status_code, details)


@contextmanager
def _qdrant_errors(operation: str) -> Iterator[None]:
    """Re-raise qdrant-client and transport failures as VectorStoreError."""
    try:
        yield
    except UnexpectedResponse as exc:
        content = exc.content
        if isinstance(content, bytes):
            content = content.decode("utf-8", errors="replace")
        raise _error_for_status(
            exc.status_code,
            f"{operation} failed: HTTP {exc.status_code} {exc.reason_phrase}",
            content,
        ) from exc
    except (ResponseHandlingException, httpx.TransportError) as exc:
        raise VectorStoreConnectionError(f"{operation} failed: {exc}", exc) from exc


class QdrantVectorStore:
    """Concrete VectorStorePort backed by Qdrant."""

    def __init__(self, settings: MnemoSettings, client: QdrantClient | None = None) -> None:
        self._settings = settings
        self._client = client

    def _get_client(self) -> QdrantClient:
        if self._client is None:
            self._client = QdrantClient(
                url=self._settings.qdrant_url,
                api_key=self._settings.qdrant_api_key,
                timeout=self._settings.request_timeout_seconds,
            )
        return self._client

    def _memory_id_to_uuid(self, memory_id: str) -> str:
        return str(uuid.uuid5(self._settings.memory_id_namespace, memory_id))

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    def ensure_collection(self, collection: str, dimension: int, distance: str = "Cosine") -> dict:
        if dimension < 1:
            raise VectorStoreValidationError(f"dimension must be positive, got {dimension}")
        try:
            metric = Distance(distance)
        except ValueError:
            options = ", ".join(d.value for d in Distance)
            raise VectorStoreValidationError(f"Unknown distance {distance!r}; expected one of {options}") from None

        client = self._get_client()
        created = False
        with _qdrant_errors("ensure_collection"):
            if not client.collection_exists(collection_name=collection):
                client.create_collection(
                    collection_name=collection,
                    vectors_config=VectorParams(size=dimension, distance=metric),
                )
                created = True
        if created:
            _LOGGER.info("collection_created", extra={"collection": collection, "dimension": dimension})
        return {
            "name": collection,
            "created": created,
            "dimension": dimension,
            "distance": metric.value,
        }

    def delete_collection(self, collection: str) -> None:
        with _qdrant_errors("delete_collection"):
            self._get_client().delete_collection(collection_name=collection)

    def collection_exists(self, collection: str) -> bool:
        with _qdrant_errors("collection_exists"):
            return self._get_client().collection_exists(collection_name=collection)

    def collection_info(self, collection: str) -> dict:
        with _qdrant_errors("collection_info"):
            info = self._get_client().get_collection(collection_name=collection)
        vectors = info.config.params.vectors
        single = vectors if isinstance(vectors, VectorParams) else None
        return {
            "name": collection,
            "points_count": info.points_count,
            "indexed_vectors_count": info.indexed_vectors_count,
            "status": str(info.status),
            "dimension": single.size if single else None,
            "distance": single.distance.value if single else None,
        }

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search(
        self,
        collection: str,
        vector: list[float],
        top_k: int,
        query_filter: QueryFilter = None,
        score_threshold: float | None = None,
    ) -> list[SearchResult]:
        effective_k = min(top_k, self._settings.max_top_k)
        qf = self.to_qdrant_filter(query_filter)
        with _qdrant_errors("search"):
            response = self._get_client().query_points(
                collection_name=collection,
                query=vector,
                limit=effective_k,
                query_filter=qf,
                score_threshold=score_threshold,
                with_payload=True,
            )
        return [self._to_result(point, point.score) for point in response.points]

    def count(self, collection: str, query_filter: QueryFilter = None, exact: bool = False) -> int:
        qf = self.to_qdrant_filter(query_filter)
        with _qdrant_errors("count"):
            result = self._get_client().count(collection_name=collection, count_filter=qf, exact=exact)
        return result.count

    def retrieve(self, collection: str, memory_ids: list[str]) -> list[SearchResult]:
        if not memory_ids:
            return []
        with _qdrant_errors("retrieve"):
            points = self._get_client().retrieve(
                collection_name=collection,
                ids=[self._memory_id_to_uuid(mid) for mid in memory_ids],
                with_payload=True,
            )
        return [self._to_result(point, 1.0) for point in points]

    @staticmethod
    def _to_result(point: Any, score: float) -> SearchResult:
        payload = dict(point.payload or {})
        memory_id = payload.pop(MEMORY_ID_KEY, None) or str(point.id)
        return SearchResult(id=memory_id, score=score, payload=payload)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def upsert(self, collection: str, records: list[MemoryRecord]) -> int:
        if not records:
            return 0
        points = [
            PointStruct(
                id=self._memory_id_to_uuid(record.id),
                vector=record.vector,
                payload={**record.payload, MEMORY_ID_KEY: record.id},
            )
            for record in records
        ]
        with _qdrant_errors("upsert"):
            self._get_client().upsert(collection_name=collection, points=points, wait=True)
        _LOGGER.debug("points_upserted", extra={"collection": collection, "count": len(points)})
        return len(points)

    def delete(self, collection: str, memory_ids: list[str]) -> None:
        if not memory_ids:
            return
        selector = PointIdsList(points=[self._memory_id_to_uuid(mid) for mid in memory_ids])
        with _qdrant_errors("delete"):
            self._get_client().delete(collection_name=collection, points_selector=selector, wait=True)

    def delete_by_filter(self, collection: str, query_filter: QueryFilter) -> None:
        qf = self.to_qdrant_filter(query_filter)
        if qf is None or self._matches_everything(qf):
            raise VectorStoreValidationError("delete_by_filter requires a non-empty filter")
        with _qdrant_errors("delete_by_filter"):
            self._get_client().delete(
                collection_name=collection,
                points_selector=FilterSelector(filter=qf),
                wait=True,
            )

    @classmethod
    def _matches_everything(cls, node: Filter | FieldCondition) -> bool:
        """True if Qdrant would select every point for ``node``."""
        if not isinstance(node, Filter):
            return False
        if node.must_not:
            return False
        if node.should and not any(cls._matches_everything(child) for child in node.should):
            return False
        return all(cls._matches_everything(child) for child in node.must or [])

    def health_check(self) -> dict:
        try:
            collections = self._get_client().get_collections().collections
        except Exception as exc:
            return {"status": "error", "message": str(exc)}
        return {"status": "ok", "collections": len(collections)}

    # ------------------------------------------------------------------
    # Filter translation: domain Filter / plain dict → Qdrant Filter
    # ------------------------------------------------------------------

    @classmethod
    def to_qdrant_filter(cls, query_filter: QueryFilter) -> Filter | None:
        """Translate any accepted filter form into a qdrant-client Filter.

        Wire-shaped mappings (a single ``match``/``range``/``geo_*``/``must``/
        ``should``/``must_not`` key) are parsed as filters; any other mapping
        is treated as ``{field: value}`` metadata equality.
        """
        if query_filter is None:
            return None
        if isinstance(query_filter, Mapping) and not mf.is_filter_wire(query_filter):
            return cls._filter_spec_to_qdrant(query_filter)
        try:
            node = mf.coerce_filter(query_filter)
        except mf.FilterValidationError as exc:
            raise VectorStoreValidationError(f"Invalid filter: {exc.message}", exc.filter_kind) from exc
        translated = cls._translate_node(node)
        if isinstance(translated, Filter):
            return translated
        return Filter(must=[translated])

    @staticmethod
    def _filter_spec_to_qdrant(filter_spec: Mapping[str, Any]) -> Filter | None:
        """Convert a plain ``{field: value}`` mapping to a Qdrant Filter."""
        if not filter_spec:
            return None
        must = []
        for key, value in filter_spec.items():
            if isinstance(value, list):
                must.append(FieldCondition(key=key, match=MatchAny(any=value)))
            elif isinstance(value, Mapping) and value and set(value) <= _RANGE_KEYS:
                must.append(FieldCondition(key=key, range=Range(**value)))
            else:
                must.append(QdrantVectorStore._match_condition(key, value))
        return Filter(must=must)

    @staticmethod
    def _match_condition(key: str, value: Any) -> FieldCondition:
        # Qdrant matches keywords, integers and booleans only.
        if isinstance(value, float):
            if not math.isfinite(value):
                raise VectorStoreValidationError(f"Cannot match non-finite value on '{key}'")
            return FieldCondition(key=key, range=Range(gte=value, lte=value))
        if not isinstance(value, (bool, int, str)):
            raise VectorStoreValidationError(
                f"Unsupported match value for '{key}': {type(value).__name__}"
            )
        return FieldCondition(key=key, match=MatchValue(value=value))

    @classmethod
    def _translate_node(cls, node: mf.Filter) -> FieldCondition | Filter:
        if isinstance(node, mf.MatchCondition):
            return cls._match_condition(node.key, node.value)
        if isinstance(node, mf.RangeCondition):
            return FieldCondition(key=node.key, range=Range(**node.bounds()))
        if isinstance(node, mf.GeoBoundingBoxCondition):
            return FieldCondition(
                key=node.key,
                geo_bounding_box=GeoBoundingBox(
                    top_left=GeoPoint(lat=node.top_left.lat, lon=node.top_left.lon),
                    bottom_right=GeoPoint(lat=node.bottom_right.lat, lon=node.bottom_right.lon),
                ),
            )
        if isinstance(node, mf.GeoRadiusCondition):
            return FieldCondition(
                key=node.key,
                geo_radius=GeoRadius(
                    center=GeoPoint(lat=node.center.lat, lon=node.center.lon),
                    radius=node.radius_meters,
                ),
            )
        children = [cls._translate_node(child) for child in node.children]
        if isinstance(node, mf.AndFilter):
            return Filter(must=children)
        if isinstance(node, mf.OrFilter):
            return Filter(should=children)
        return Filter(must_not=children)
