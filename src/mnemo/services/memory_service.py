"""MemoryService: the facade applications and MCP tools talk to.

Embeds text through an EmbeddingProvider and reads/writes a VectorStorePort.
Filters are handed to the store untouched; this layer never builds or
validates them.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from ..domain.vectors import validate_embedding_dimensions
from ..models.memory import MemoryRecord, SearchResult
from ..ports.embedding import EmbedderError, EmbedderValidationError, EmbeddingProvider
from ..ports.vector_store import QueryFilter, VectorStorePort, VectorStoreValidationError

_LOGGER = logging.getLogger(__name__)


class MemoryService:
    """Store, search and manage text memories in one collection namespace."""

    def __init__(
        self,
        vector_store: VectorStorePort,
        embedding_provider: EmbeddingProvider,
        default_collection: str = "default",
        validate_dimensions: bool = True,
        max_batch_size: int = 100,
        embedding_dimension: int | None = None,
    ) -> None:
        if vector_store is None:
            raise VectorStoreValidationError("vector_store is required")
        if embedding_provider is None:
            raise EmbedderValidationError("embedding_provider is required")
        if max_batch_size < 1:
            raise VectorStoreValidationError("max_batch_size must be at least 1")
        self._store = vector_store
        self._embed = embedding_provider
        self._default_collection = default_collection
        self._validate_dimensions = validate_dimensions
        self._max_batch_size = max_batch_size
        self._dimension = embedding_dimension

    @property
    def default_collection(self) -> str:
        return self._default_collection

    def _collection(self, collection: str | None) -> str:
        return collection or self._default_collection

    # ------------------------------------------------------------------
    # Embedding
    # ------------------------------------------------------------------

    def embed(self, text: str) -> list[float]:
        return self._embed.embed(text)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert(self, record: MemoryRecord, collection: str | None = None) -> None:
        self._validate_record(record)
        self._store.upsert(self._collection(collection), [record])

    def upsert_batch(self, records: list[MemoryRecord], collection: str | None = None) -> int:
        """Validate every record first, then upsert in chunks of ``max_batch_size``."""
        if not records:
            raise VectorStoreValidationError("Records list cannot be empty")
        for record in records:
            self._validate_record(record)
        if self._validate_dimensions:
            try:
                validate_embedding_dimensions([record.vector for record in records])
            except EmbedderError as exc:
                raise VectorStoreValidationError(exc.message) from exc

        target = self._collection(collection)
        total = 0
        for i in range(0, len(records), self._max_batch_size):
            total += self._store.upsert(target, records[i : i + self._max_batch_size])
        _LOGGER.info("memories_upserted", extra={"collection": target, "count": total})
        return total

    def store_from_text(
        self,
        memory_id: str,
        text: str,
        payload: dict[str, Any] | None = None,
        collection: str | None = None,
    ) -> MemoryRecord:
        """Embed ``text`` and upsert it under ``memory_id``; returns the stored record."""
        if not memory_id or not memory_id.strip():
            raise VectorStoreValidationError("Record ID is required and cannot be empty")
        if not text or not text.strip():
            raise EmbedderValidationError("Text content is required and cannot be empty")
        record = MemoryRecord(id=memory_id, vector=self.embed(text), payload=dict(payload or {}))
        self.upsert(record, collection)
        return record

    def delete(self, memory_id: str, collection: str | None = None) -> None:
        if not memory_id or not memory_id.strip():
            raise VectorStoreValidationError("Memory ID is required and cannot be empty")
        self._store.delete(self._collection(collection), [memory_id])

    def delete_by_filter(self, query_filter: QueryFilter, collection: str | None = None) -> None:
        self._store.delete_by_filter(self._collection(collection), query_filter)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def search_from_text(
        self,
        text: str,
        top_k: int = 5,
        query_filter: QueryFilter = None,
        collection: str | None = None,
        score_threshold: float | None = None,
    ) -> list[SearchResult]:
        if not text or not text.strip():
            raise EmbedderValidationError("Search text is required and cannot be empty")
        return self.search(self.embed(text), top_k, query_filter, collection, score_threshold)

    def search(
        self,
        vector: list[float],
        top_k: int = 5,
        query_filter: QueryFilter = None,
        collection: str | None = None,
        score_threshold: float | None = None,
    ) -> list[SearchResult]:
        if top_k < 1:
            raise VectorStoreValidationError("top_k must be at least 1")
        return self._store.search(
            self._collection(collection),
            vector,
            top_k,
            query_filter=query_filter,
            score_threshold=score_threshold,
        )

    def get_points(self, memory_ids: list[str], collection: str | None = None) -> list[SearchResult]:
        if not memory_ids:
            raise VectorStoreValidationError("IDs list cannot be empty")
        return self._store.retrieve(self._collection(collection), memory_ids)

    def count(self, query_filter: QueryFilter = None, exact: bool = False, collection: str | None = None) -> int:
        return self._store.count(self._collection(collection), query_filter, exact=exact)

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    def collection_exists(self, collection: str | None = None) -> bool:
        return self._store.collection_exists(self._collection(collection))

    def ensure_collection(
        self,
        dimension: int | None = None,
        collection: str | None = None,
        distance: str = "Cosine",
    ) -> dict:
        dimension = dimension or self._dimension
        if dimension is None:
            raise VectorStoreValidationError("An embedding dimension is required to create a collection")
        return self._store.ensure_collection(self._collection(collection), dimension, distance)

    def delete_collection(self, collection: str | None = None) -> None:
        self._store.delete_collection(self._collection(collection))

    def collection_info(self, collection: str | None = None) -> dict:
        return self._store.collection_info(self._collection(collection))

    def health_check(self) -> dict:
        return self._store.health_check()

    def info(self) -> dict[str, Any]:
        provider_info = getattr(self._embed, "info", None)
        return {
            "default_collection": self._default_collection,
            "validate_dimensions": self._validate_dimensions,
            "max_batch_size": self._max_batch_size,
            "embedding_dimension": self._dimension,
            "embedder": provider_info() if callable(provider_info) else type(self._embed).__name__,
        }

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate_record(self, record: MemoryRecord) -> None:
        if not record.id or not record.id.strip():
            raise VectorStoreValidationError("Record ID is required and cannot be empty")
        if not record.vector:
            raise VectorStoreValidationError("Record vector is required and must be a non-empty list")
        if self._validate_dimensions and not all(math.isfinite(v) for v in record.vector):
            raise VectorStoreValidationError("Record vector must contain only valid numbers")
