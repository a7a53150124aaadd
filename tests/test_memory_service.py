"""Unit tests for MemoryService with fake adapters.

No Qdrant or embedding model required; all dependencies are fakes.
"""

import math

import pytest

from fakes import FIXED_VECTOR, FakeEmbeddingProvider, FakeVectorStore
from mnemo.domain.filter_builder import FilterBuilder
from mnemo.models.memory import MemoryRecord
from mnemo.ports.embedding import EmbedderValidationError
from mnemo.ports.vector_store import VectorStoreValidationError
from mnemo.services.memory_service import MemoryService


@pytest.fixture
def store():
    return FakeVectorStore()


@pytest.fixture
def embedder():
    return FakeEmbeddingProvider()


@pytest.fixture
def service(store, embedder):
    return MemoryService(store, embedder, default_collection="notes", max_batch_size=2, embedding_dimension=3)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_requires_store_and_embedder(self, store, embedder):
        with pytest.raises(VectorStoreValidationError):
            MemoryService(None, embedder)
        with pytest.raises(EmbedderValidationError):
            MemoryService(store, None)

    def test_rejects_zero_batch_size(self, store, embedder):
        with pytest.raises(VectorStoreValidationError):
            MemoryService(store, embedder, max_batch_size=0)

    def test_info(self, service):
        info = service.info()
        assert info["default_collection"] == "notes"
        assert info["embedder"] == "FakeEmbeddingProvider"


class TestWrites:
    def test_store_from_text_embeds_and_upserts(self, service, store, embedder):
        record = service.store_from_text("note:1", "buy milk", {"kind": "todo"})
        assert embedder.texts == ["buy milk"]
        assert record.vector == FIXED_VECTOR
        assert store.points[("notes", "note:1")].payload == {"kind": "todo"}

    def test_store_from_text_uses_explicit_collection(self, service, store):
        service.store_from_text("n", "text", collection="other")
        assert ("other", "n") in store.points

    @pytest.mark.parametrize("memory_id", ["", "   "])
    def test_store_from_text_rejects_blank_id(self, service, memory_id):
        with pytest.raises(VectorStoreValidationError):
            service.store_from_text(memory_id, "text")

    def test_store_from_text_rejects_blank_text(self, service, embedder):
        with pytest.raises(EmbedderValidationError):
            service.store_from_text("id", "  \n")
        assert embedder.texts == []

    def test_upsert_rejects_empty_vector(self, service):
        with pytest.raises(VectorStoreValidationError, match="non-empty"):
            service.upsert(MemoryRecord(id="a", vector=[]))

    def test_upsert_rejects_non_finite_vector(self, service):
        with pytest.raises(VectorStoreValidationError, match="valid numbers"):
            service.upsert(MemoryRecord(id="a", vector=[0.1, math.nan]))

    def test_non_finite_allowed_when_dimension_checks_disabled(self, store, embedder):
        svc = MemoryService(store, embedder, validate_dimensions=False)
        svc.upsert(MemoryRecord(id="a", vector=[math.inf]))
        assert ("default", "a") in store.points

    def test_upsert_batch_chunks_by_max_batch_size(self, service, store):
        records = [MemoryRecord(id=str(i), vector=[1.0, 2.0]) for i in range(5)]
        assert service.upsert_batch(records) == 5
        assert store.upsert_calls == [("notes", 2), ("notes", 2), ("notes", 1)]

    def test_upsert_batch_validates_everything_before_writing(self, service, store):
        records = [MemoryRecord(id="ok", vector=[1.0]), MemoryRecord(id="", vector=[1.0])]
        with pytest.raises(VectorStoreValidationError):
            service.upsert_batch(records)
        assert store.upsert_calls == []

    def test_upsert_batch_rejects_mixed_dimensions(self, service, store):
        records = [MemoryRecord(id="a", vector=[1.0, 2.0]), MemoryRecord(id="b", vector=[1.0])]
        with pytest.raises(VectorStoreValidationError, match="Inconsistent embedding dimensions"):
            service.upsert_batch(records)
        assert store.upsert_calls == []

    def test_upsert_batch_rejects_empty(self, service):
        with pytest.raises(VectorStoreValidationError):
            service.upsert_batch([])

    def test_delete(self, service, store):
        service.store_from_text("a", "text")
        service.delete("a")
        assert store.points == {}

    def test_delete_rejects_blank_id(self, service):
        with pytest.raises(VectorStoreValidationError):
            service.delete(" ")

    def test_delete_by_filter_passes_filter_through(self, service, store):
        f = FilterBuilder().where("kind").equals("todo").build()
        service.delete_by_filter(f)
        assert store.deleted_by_filter == [("notes", f)]


class TestReads:
    def test_search_from_text_passes_filter_unchanged(self, service, store):
        f = FilterBuilder().where("a").equals(1).or_().where("b").equals(2).build()
        service.search_from_text("query", top_k=3, query_filter=f)
        assert store.last_search["query_filter"] is f
        assert store.last_search["top_k"] == 3
        assert store.last_search["vector"] == FIXED_VECTOR

    def test_search_passes_plain_mapping_through(self, service, store):
        service.search([1.0], query_filter={"ticker": "NVDA"}, score_threshold=0.5)
        assert store.last_search["query_filter"] == {"ticker": "NVDA"}
        assert store.last_search["score_threshold"] == 0.5

    def test_search_from_text_rejects_blank_query(self, service):
        with pytest.raises(EmbedderValidationError):
            service.search_from_text("")

    def test_search_rejects_non_positive_top_k(self, service):
        with pytest.raises(VectorStoreValidationError):
            service.search([1.0], top_k=0)

    def test_get_points(self, service):
        service.store_from_text("a", "text", {"text": "text"})
        results = service.get_points(["a", "missing"])
        assert [r.id for r in results] == ["a"]

    def test_get_points_rejects_empty(self, service):
        with pytest.raises(VectorStoreValidationError):
            service.get_points([])

    def test_count(self, service, store):
        service.store_from_text("a", "one")
        service.store_from_text("b", "two")
        assert service.count({"must": []}, exact=True) == 2
        assert store.last_count == {"collection": "notes", "query_filter": {"must": []}, "exact": True}


class TestCollections:
    def test_ensure_collection_uses_configured_dimension(self, service, store):
        result = service.ensure_collection()
        assert result["dimension"] == 3
        assert service.collection_exists()

    def test_ensure_collection_needs_a_dimension(self, store, embedder):
        with pytest.raises(VectorStoreValidationError):
            MemoryService(store, embedder).ensure_collection()

    def test_delete_collection(self, service):
        service.ensure_collection(dimension=8, collection="tmp")
        service.delete_collection("tmp")
        assert not service.collection_exists("tmp")

    def test_health_check(self, service):
        assert service.health_check() == {"status": "ok"}
