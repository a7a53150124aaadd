"""Port: vector store for memory storage and retrieval."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, Union, runtime_checkable

from ..domain.filters import Filter
from ..models.memory import MemoryRecord, SearchResult

# A Filter model, its wire mapping, or a plain {field: value} mapping.
QueryFilter = Union[Filter, Mapping[str, Any], None]


@runtime_checkable
class VectorStorePort(Protocol):
    """Read/write interface for the vector database."""

    # --- collections ---

    def ensure_collection(self, collection: str, dimension: int, distance: str = "Cosine") -> dict: ...

    def delete_collection(self, collection: str) -> None: ...

    def collection_exists(self, collection: str) -> bool: ...

    def collection_info(self, collection: str) -> dict: ...

    # --- queries ---

    def search(
        self,
        collection: str,
        vector: list[float],
        top_k: int,
        query_filter: QueryFilter = None,
        score_threshold: float | None = None,
    ) -> list[SearchResult]: ...

    def count(self, collection: str, query_filter: QueryFilter = None, exact: bool = False) -> int: ...

    def retrieve(self, collection: str, memory_ids: list[str]) -> list[SearchResult]: ...

    # --- mutations ---

    def upsert(self, collection: str, records: list[MemoryRecord]) -> int: ...

    def delete(self, collection: str, memory_ids: list[str]) -> None: ...

    def delete_by_filter(self, collection: str, query_filter: QueryFilter) -> None: ...

    def health_check(self) -> dict: ...


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class VectorStoreError(Exception):
    """Base error for vector store operations."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: object | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class VectorStoreConnectionError(VectorStoreError):
    """Store unreachable, timed out, or failed server-side."""

    def __init__(self, message: str, cause: object | None = None, status_code: int | None = None) -> None:
        super().__init__(message, status_code, cause)


class VectorStoreAuthenticationError(VectorStoreError):
    def __init__(self, message: str, status_code: int = 401) -> None:
        super().__init__(message, status_code)


class VectorStoreValidationError(VectorStoreError):
    def __init__(self, message: str, details: object | None = None) -> None:
        super().__init__(message, 400, details)
