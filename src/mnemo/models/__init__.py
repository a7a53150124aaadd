"""Memory records and MCP request/response models."""

from .mcp_requests import CountMemoryRequest, DeleteMemoryRequest, SearchMemoryRequest, StoreMemoryRequest
from .mcp_responses import (
    CountMemoryResponse,
    DeleteMemoryResponse,
    MemoryHit,
    SearchMemoryResponse,
    StoreMemoryResponse,
)
from .memory import MemoryRecord, SearchResult

__all__ = [
    # Records
    "MemoryRecord",
    "SearchResult",
    # MCP requests
    "CountMemoryRequest",
    "DeleteMemoryRequest",
    "SearchMemoryRequest",
    "StoreMemoryRequest",
    # MCP responses
    "CountMemoryResponse",
    "DeleteMemoryResponse",
    "MemoryHit",
    "SearchMemoryResponse",
    "StoreMemoryResponse",
]
