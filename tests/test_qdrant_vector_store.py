"""Tests for QdrantVectorStore against a mocked qdrant-client.

Covers filter translation, memory-ID mapping and error mapping. No Qdrant
server is contacted.
"""

import uuid
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
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
    Range,
    VectorParams,
)

from mnemo.adapters.qdrant_vector_store import MEMORY_ID_KEY, QdrantVectorStore
from mnemo.config.runtime import MnemoSettings
from mnemo.domain import filters as mf
from mnemo.domain.filter_builder import FilterBuilder
from mnemo.models.memory import MemoryRecord
from mnemo.ports.vector_store import (
    VectorStoreAuthenticationError,
    VectorStoreConnectionError,
    VectorStoreError,
    VectorStoreValidationError,
)


@pytest.fixture
def settings():
    return MnemoSettings(_env_file=None, max_top_k=50)


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def store(settings, client):
    return QdrantVectorStore(settings, client=client)


def _point_id(settings, memory_id):
    return str(uuid.uuid5(settings.memory_id_namespace, memory_id))


def _unexpected(status, reason="Error"):
    return UnexpectedResponse(status, reason, b'{"status": {"error": "bad"}}', httpx.Headers())


# ---------------------------------------------------------------------------
# Filter translation
# ---------------------------------------------------------------------------


class TestFilterTranslation:
    def test_none(self):
        assert QdrantVectorStore.to_qdrant_filter(None) is None

    def test_leaf_is_wrapped_in_must(self):
        qf = QdrantVectorStore.to_qdrant_filter(mf.MatchCondition(key="ticker", value="NVDA"))
        assert qf == Filter(must=[FieldCondition(key="ticker", match=MatchValue(value="NVDA"))])

    def test_float_match_becomes_closed_range(self):
        qf = QdrantVectorStore.to_qdrant_filter(mf.MatchCondition(key="score", value=0.5))
        assert qf == Filter(must=[FieldCondition(key="score", range=Range(gte=0.5, lte=0.5))])

    def test_bool_match_stays_match(self):
        qf = QdrantVectorStore.to_qdrant_filter(mf.MatchCondition(key="done", value=True))
        assert qf.must[0].match == MatchValue(value=True)

    def test_range(self):
        qf = QdrantVectorStore.to_qdrant_filter(mf.RangeCondition(key="price", gte=100, lt=200))
        assert qf.must[0] == FieldCondition(key="price", range=Range(gte=100, lt=200))

    def test_geo_conditions(self):
        box = mf.GeoBoundingBoxCondition(
            key="loc",
            top_left=mf.GeoPoint(lat=40.8, lon=-74.1),
            bottom_right=mf.GeoPoint(lat=40.6, lon=-73.9),
        )
        radius = mf.GeoRadiusCondition(key="loc", center=mf.GeoPoint(lat=1, lon=2), radius_meters=500)
        qf = QdrantVectorStore.to_qdrant_filter(mf.AndFilter(must=(box, radius)))
        assert qf.must == [
            FieldCondition(
                key="loc",
                geo_bounding_box=GeoBoundingBox(
                    top_left=GeoPoint(lat=40.8, lon=-74.1),
                    bottom_right=GeoPoint(lat=40.6, lon=-73.9),
                ),
            ),
            FieldCondition(key="loc", geo_radius=GeoRadius(center=GeoPoint(lat=1, lon=2), radius=500)),
        ]

    def test_composites_nest(self):
        built = (
            FilterBuilder()
            .where("ticker").equals("NVDA")
            .or_any(FilterBuilder().where("a").equals(1), FilterBuilder().where("b").not_equals(2))
            .build()
        )
        qf = QdrantVectorStore.to_qdrant_filter(built)
        assert qf == Filter(
            must=[
                FieldCondition(key="ticker", match=MatchValue(value="NVDA")),
                Filter(
                    should=[
                        FieldCondition(key="a", match=MatchValue(value=1)),
                        Filter(must_not=[FieldCondition(key="b", match=MatchValue(value=2))]),
                    ]
                ),
            ]
        )

    def test_top_level_or_and_not(self):
        a = mf.MatchCondition(key="a", value=1)
        assert QdrantVectorStore.to_qdrant_filter(mf.OrFilter(should=(a,))).should is not None
        assert QdrantVectorStore.to_qdrant_filter(mf.NotFilter(must_not=(a,))).must_not is not None

    def test_wire_mapping_is_parsed(self):
        qf = QdrantVectorStore.to_qdrant_filter({"should": [{"match": {"key": "a", "value": "x"}}]})
        assert qf == Filter(should=[FieldCondition(key="a", match=MatchValue(value="x"))])

    def test_malformed_wire_mapping_raises_validation(self):
        with pytest.raises(VectorStoreValidationError, match="Invalid filter"):
            QdrantVectorStore.to_qdrant_filter({"must": "not-a-list"})

    def test_plain_mapping(self):
        qf = QdrantVectorStore.to_qdrant_filter(
            {"ticker": "NVDA", "tags": ["ai", "chips"], "sentiment": {"gte": 0.5}, "weight": 1.5}
        )
        assert qf == Filter(
            must=[
                FieldCondition(key="ticker", match=MatchValue(value="NVDA")),
                FieldCondition(key="tags", match=MatchAny(any=["ai", "chips"])),
                FieldCondition(key="sentiment", range=Range(gte=0.5)),
                FieldCondition(key="weight", range=Range(gte=1.5, lte=1.5)),
            ]
        )

    def test_empty_plain_mapping_means_no_filter(self):
        assert QdrantVectorStore.to_qdrant_filter({}) is None

    def test_unsupported_plain_value(self):
        with pytest.raises(VectorStoreValidationError, match="Unsupported match value"):
            QdrantVectorStore.to_qdrant_filter({"meta": {"nested": 1}})

    def test_match_without_value_raises(self):
        with pytest.raises(VectorStoreValidationError):
            QdrantVectorStore.to_qdrant_filter(mf.MatchCondition(key="a", value=None))


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


class TestOperations:
    def test_upsert_maps_ids_and_stores_memory_id(self, store, client, settings):
        count = store.upsert("notes", [MemoryRecord(id="note:1", vector=[0.1, 0.2], payload={"k": "v"})])
        assert count == 1
        kwargs = client.upsert.call_args.kwargs
        assert kwargs["collection_name"] == "notes"
        point = kwargs["points"][0]
        assert point.id == _point_id(settings, "note:1")
        assert point.payload == {"k": "v", MEMORY_ID_KEY: "note:1"}

    def test_upsert_empty_is_noop(self, store, client):
        assert store.upsert("notes", []) == 0
        client.upsert.assert_not_called()

    def test_search_caps_top_k_and_strips_memory_id(self, store, client):
        client.query_points.return_value = SimpleNamespace(
            points=[SimpleNamespace(id="uuid-1", score=0.87, payload={MEMORY_ID_KEY: "note:1", "text": "hi"})]
        )
        results = store.search("notes", [0.1], top_k=500, query_filter={"k": "v"}, score_threshold=0.2)
        kwargs = client.query_points.call_args.kwargs
        assert kwargs["limit"] == 50
        assert kwargs["score_threshold"] == 0.2
        assert kwargs["query_filter"] == Filter(must=[FieldCondition(key="k", match=MatchValue(value="v"))])
        assert results[0].id == "note:1"
        assert results[0].score == 0.87
        assert results[0].payload == {"text": "hi"}

    def test_point_without_memory_id_falls_back_to_point_id(self, store, client):
        client.retrieve.return_value = [SimpleNamespace(id="raw-id", payload=None)]
        results = store.retrieve("notes", ["x"])
        assert results[0].id == "raw-id"
        assert results[0].score == 1.0

    def test_retrieve_maps_ids(self, store, client, settings):
        client.retrieve.return_value = []
        store.retrieve("notes", ["a", "b"])
        assert client.retrieve.call_args.kwargs["ids"] == [_point_id(settings, "a"), _point_id(settings, "b")]

    def test_count(self, store, client):
        client.count.return_value = SimpleNamespace(count=7)
        assert store.count("notes", mf.RangeCondition(key="p", gt=1), exact=True) == 7
        kwargs = client.count.call_args.kwargs
        assert kwargs["exact"] is True
        assert kwargs["count_filter"] == Filter(must=[FieldCondition(key="p", range=Range(gt=1))])

    def test_delete_by_ids(self, store, client, settings):
        store.delete("notes", ["a"])
        selector = client.delete.call_args.kwargs["points_selector"]
        assert selector == PointIdsList(points=[_point_id(settings, "a")])

    def test_delete_by_filter(self, store, client):
        store.delete_by_filter("notes", {"match": {"key": "k", "value": "v"}})
        selector = client.delete.call_args.kwargs["points_selector"]
        assert isinstance(selector, FilterSelector)

    def test_delete_by_filter_requires_filter(self, store, client):
        with pytest.raises(VectorStoreValidationError):
            store.delete_by_filter("notes", None)
        client.delete.assert_not_called()

    @pytest.mark.parametrize(
        "query_filter",
        [
            mf.AndFilter(),
            mf.OrFilter(),
            {"must": []},
            {},
            mf.AndFilter(must=(mf.AndFilter(), mf.OrFilter(should=(mf.AndFilter(),)))),
        ],
    )
    def test_delete_by_filter_refuses_match_all(self, store, client, query_filter):
        with pytest.raises(VectorStoreValidationError, match="non-empty filter"):
            store.delete_by_filter("notes", query_filter)
        client.delete.assert_not_called()

    def test_delete_by_filter_allows_negation(self, store, client):
        store.delete_by_filter("notes", mf.NotFilter(must_not=(mf.MatchCondition(key="keep", value=True),)))
        client.delete.assert_called_once()

    def test_ensure_collection_creates_when_missing(self, store, client):
        client.collection_exists.return_value = False
        result = store.ensure_collection("notes", 384)
        assert result == {"name": "notes", "created": True, "dimension": 384, "distance": "Cosine"}
        assert client.create_collection.call_args.kwargs["vectors_config"] == VectorParams(
            size=384, distance=Distance.COSINE
        )

    def test_ensure_collection_existing(self, store, client):
        client.collection_exists.return_value = True
        assert store.ensure_collection("notes", 384)["created"] is False
        client.create_collection.assert_not_called()

    def test_ensure_collection_rejects_unknown_distance(self, store):
        with pytest.raises(VectorStoreValidationError, match="Unknown distance"):
            store.ensure_collection("notes", 384, distance="Hamming")

    def test_collection_info(self, store, client):
        client.get_collection.return_value = SimpleNamespace(
            config=SimpleNamespace(params=SimpleNamespace(vectors=VectorParams(size=3, distance=Distance.DOT))),
            points_count=5,
            indexed_vectors_count=4,
            status="green",
        )
        info = store.collection_info("notes")
        assert info["dimension"] == 3
        assert info["distance"] == "Dot"
        assert info["points_count"] == 5

    def test_health_check_ok(self, store, client):
        client.get_collections.return_value = SimpleNamespace(collections=[object(), object()])
        assert store.health_check() == {"status": "ok", "collections": 2}

    def test_health_check_never_raises(self, store, client):
        client.get_collections.side_effect = RuntimeError("connection refused")
        assert store.health_check() == {"status": "error", "message": "connection refused"}


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


class TestErrorMapping:
    @pytest.mark.parametrize(
        "status, error_type",
        [
            (400, VectorStoreValidationError),
            (401, VectorStoreAuthenticationError),
            (403, VectorStoreAuthenticationError),
            (500, VectorStoreConnectionError),
            (503, VectorStoreConnectionError),
        ],
    )
    def test_status_codes(self, store, client, status, error_type):
        client.count.side_effect = _unexpected(status)
        with pytest.raises(error_type) as exc_info:
            store.count("notes")
        assert exc_info.value.status_code == status

    def test_unprocessable_entity_is_validation(self, store, client):
        client.count.side_effect = _unexpected(422)
        with pytest.raises(VectorStoreValidationError, match="HTTP 422"):
            store.count("notes")

    def test_other_status_is_base_error(self, store, client):
        client.delete_collection.side_effect = _unexpected(404, "Not Found")
        with pytest.raises(VectorStoreError) as exc_info:
            store.delete_collection("missing")
        assert type(exc_info.value) is VectorStoreError
        assert exc_info.value.status_code == 404
        assert "bad" in exc_info.value.details

    def test_transport_failure(self, store, client):
        client.upsert.side_effect = ResponseHandlingException(httpx.ConnectError("refused"))
        with pytest.raises(VectorStoreConnectionError):
            store.upsert("notes", [MemoryRecord(id="a", vector=[1.0])])

    def test_httpx_transport_error(self, store, client):
        client.collection_exists.side_effect = httpx.ReadTimeout("slow")
        with pytest.raises(VectorStoreConnectionError):
            store.collection_exists("notes")
