"""MCP request DTOs for the memory tools."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, Field, field_validator

MAX_METADATA_CHARS = 100_000


def _not_blank(value: str | None, name: str) -> str | None:
    if value is not None and not value.strip():
        raise ValueError(f"{name} cannot be empty")
    return value


class StoreMemoryRequest(BaseModel):
    """Input DTO for the store_memory tool."""

    id: str = Field(..., min_length=1, max_length=512, description="Unique memory identifier")
    text: str = Field(..., min_length=1, max_length=1_000_000, description="Text to embed and store")
    metadata: dict[str, Any] | None = Field(default=None, description="Optional payload metadata")
    collection: str | None = Field(default=None, min_length=1, description="Target collection")

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, v: str) -> str:
        return _not_blank(v, "Memory ID")

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, v: str) -> str:
        return _not_blank(v, "Text content")

    @field_validator("collection")
    @classmethod
    def _collection_not_blank(cls, v: str | None) -> str | None:
        return _not_blank(v, "Collection name")

    @field_validator("metadata")
    @classmethod
    def _metadata_size(cls, v: dict[str, Any] | None) -> dict[str, Any] | None:
        if v is None:
            return v
        try:
            size = len(json.dumps(v))
        except (TypeError, ValueError) as exc:
            raise ValueError("Metadata contains non-serializable data") from exc
        if size > MAX_METADATA_CHARS:
            raise ValueError("Metadata is too large (max 100KB when serialized)")
        return v


class SearchMemoryRequest(BaseModel):
    """Input DTO for the search_memory tool."""

    query: str = Field(..., min_length=1, max_length=10_000, description="Natural language query")
    top_k: int = Field(default=5, ge=1, le=1000, description="Maximum number of results")
    filter: dict[str, Any] | None = Field(
        default=None,
        description="Filter wire object or plain {field: value} metadata match",
    )
    collection: str | None = Field(default=None, min_length=1, description="Collection to search")

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, v: str) -> str:
        return _not_blank(v, "Query text")

    @field_validator("collection")
    @classmethod
    def _collection_not_blank(cls, v: str | None) -> str | None:
        return _not_blank(v, "Collection name")


class DeleteMemoryRequest(BaseModel):
    """Input DTO for the delete_memory tool."""

    id: str = Field(..., min_length=1, max_length=512, description="Memory identifier to delete")
    collection: str | None = Field(default=None, min_length=1, description="Collection to delete from")

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, v: str) -> str:
        return _not_blank(v, "Memory ID")

    @field_validator("collection")
    @classmethod
    def _collection_not_blank(cls, v: str | None) -> str | None:
        return _not_blank(v, "Collection name")


class CountMemoryRequest(BaseModel):
    """Input DTO for the count_memory tool."""

    filter: dict[str, Any] | None = Field(default=None, description="Optional filter")
    collection: str | None = Field(default=None, min_length=1, description="Collection to count")
    exact: bool = Field(default=False, description="Request an exact rather than approximate count")

    @field_validator("collection")
    @classmethod
    def _collection_not_blank(cls, v: str | None) -> str | None:
        return _not_blank(v, "Collection name")
