"""Memory record schema models using Pydantic."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class MemoryRecord(BaseModel):
    """A vector plus payload, addressed by a caller-chosen memory ID."""

    id: str = Field(..., description="Memory identifier (e.g. 'article:NVDA:2025-01-15')")
    vector: list[float] = Field(..., description="Embedding vector")
    payload: dict[str, Any] = Field(default_factory=dict, description="Arbitrary JSON metadata")


class SearchResult(BaseModel):
    """A stored memory returned by search or retrieve."""

    id: str = Field(..., description="Memory identifier")
    score: float = Field(default=1.0, description="Similarity score (1.0 for direct lookups)")
    payload: dict[str, Any] = Field(default_factory=dict, description="Stored metadata")
    vector: list[float] | None = Field(default=None, description="Stored vector, when requested")
