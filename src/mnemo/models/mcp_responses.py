"""MCP response DTOs for the memory tools."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class StoreMemoryResponse(BaseModel):
    success: bool = True
    id: str
    collection: str
    vector_dimensions: int = Field(default=0, ge=0)
    was_update: bool = False
    payload_keys: list[str] = Field(default_factory=list)
    error: str | None = None


class MemoryHit(BaseModel):
    """A single search hit as returned to the model."""

    id: str = Field(..., description="Memory identifier")
    score: float = Field(..., description="Similarity score")
    payload: dict[str, Any] = Field(default_factory=dict, description="Stored metadata")
    text: str | None = Field(default=None, description="Best-effort text extracted from the payload")


class SearchMemoryResponse(BaseModel):
    success: bool = True
    results: list[MemoryHit] = Field(default_factory=list)
    total_results: int = 0
    collection: str
    has_filter: bool = False
    error: str | None = None


class DeleteMemoryResponse(BaseModel):
    success: bool = True
    id: str
    found: bool = False
    collection: str
    error: str | None = None


class CountMemoryResponse(BaseModel):
    success: bool = True
    count: int = 0
    collection: str
    has_filter: bool = False
    exact: bool = False
    error: str | None = None
