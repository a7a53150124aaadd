"""Tool registry for the memory MCP server.

Strict parameter validation via Pydantic request models; store and embedder
failures come back as ``{"success": false, "error": ...}`` JSON while request
validation errors propagate to the MCP client.
"""

from __future__ import annotations

import json
import time
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel

from ..models.mcp_requests import CountMemoryRequest, DeleteMemoryRequest, SearchMemoryRequest, StoreMemoryRequest
from ..models.mcp_responses import (
    CountMemoryResponse,
    DeleteMemoryResponse,
    MemoryHit,
    SearchMemoryResponse,
    StoreMemoryResponse,
)
from ..ports.embedding import EmbedderError
from ..ports.vector_store import VectorStoreError
from ..services.memory_service import MemoryService
from .observability import log_tool_invocation

MEMORY_TOOLS = frozenset({"store_memory", "search_memory", "delete_memory", "count_memory"})

# Payload fields checked, in order, for a displayable text snippet.
TEXT_FIELDS = ("text", "content", "body", "description", "message", "title")

_TOOL_ERRORS = (VectorStoreError, EmbedderError)

ServiceFactory = Callable[[], MemoryService]


def _get_memory_service() -> MemoryService:
    from ..wiring import build_memory_service
    return build_memory_service()


def _dump(response: BaseModel) -> str:
    return json.dumps(response.model_dump(exclude_none=True), indent=2)


def _new_trace_id() -> str:
    return uuid.uuid4().hex


def enhance_payload(text: str, metadata: dict[str, Any]) -> dict[str, Any]:
    """Copy ``metadata`` and add the stored text plus bookkeeping fields."""
    payload = dict(metadata)
    if not payload.get("text") and not payload.get("content"):
        payload["text"] = text
    payload["_stored_at"] = datetime.now(timezone.utc).isoformat()
    payload["_text_length"] = len(text)
    payload["_word_count"] = len(text.split())
    return payload


def extract_text(payload: dict[str, Any]) -> str | None:
    for field in TEXT_FIELDS:
        value = payload.get(field)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _memory_exists(service: MemoryService, memory_id: str, collection: str | None) -> bool:
    try:
        return bool(service.get_points([memory_id], collection))
    except _TOOL_ERRORS:
        return False


def register_memory_tools(mcp, service_factory: ServiceFactory | None = None):
    """Register the memory tools on a FastMCP server."""
    get_service = service_factory or _get_memory_service

    @mcp.tool()
    def store_memory(
        id: str,
        text: str,
        metadata: dict[str, Any] | None = None,
        collection: str | None = None,
    ) -> str:
        """Store text as a searchable vector memory, replacing any memory with the same ID.

        Args:
            id: Unique memory identifier (e.g. 'article:NVDA:2025-01-15'), max 512 chars
            text: Text content to embed and store (max 1,000,000 chars)
            metadata: Optional JSON object stored alongside the memory
            collection: Collection name (defaults to the configured collection)

        Returns:
            JSON with success, id, collection, vector_dimensions, was_update, payload_keys
        """
        request = StoreMemoryRequest(id=id, text=text, metadata=metadata, collection=collection)
        t0 = time.monotonic()
        trace_id = _new_trace_id()
        service = get_service()
        target = request.collection or service.default_collection
        try:
            was_update = _memory_exists(service, request.id, request.collection)
            payload = enhance_payload(request.text, request.metadata or {})
            record = service.store_from_text(request.id, request.text, payload, request.collection)
        except _TOOL_ERRORS as exc:
            log_tool_invocation("store_memory", trace_id, (time.monotonic() - t0) * 1000, error=exc.message)
            return _dump(StoreMemoryResponse(success=False, id=request.id, collection=target, error=exc.message))

        log_tool_invocation(
            "store_memory",
            trace_id,
            (time.monotonic() - t0) * 1000,
            extra={"collection": target, "was_update": was_update},
        )
        return _dump(
            StoreMemoryResponse(
                id=request.id,
                collection=target,
                vector_dimensions=len(record.vector),
                was_update=was_update,
                payload_keys=sorted(payload),
            )
        )

    @mcp.tool()
    def search_memory(
        query: str,
        top_k: int = 5,
        filter: dict[str, Any] | None = None,
        collection: str | None = None,
    ) -> str:
        """Search for semantically similar memories using a natural language query.

        Args:
            query: Natural language query (max 10,000 chars)
            top_k: Maximum number of results (1-1000, default 5)
            filter: Filter object such as {"match": {"key": "type", "value": "note"}},
                {"must": [...]}, or plain metadata equality like {"ticker": "NVDA"}
            collection: Collection name (defaults to the configured collection)

        Returns:
            JSON with success, results (id, score, payload, text), total_results
        """
        request = SearchMemoryRequest(query=query, top_k=top_k, filter=filter, collection=collection)
        t0 = time.monotonic()
        trace_id = _new_trace_id()
        service = get_service()
        target = request.collection or service.default_collection
        has_filter = bool(request.filter)
        try:
            results = service.search_from_text(
                request.query,
                top_k=request.top_k,
                query_filter=request.filter or None,
                collection=request.collection,
            )
        except _TOOL_ERRORS as exc:
            log_tool_invocation("search_memory", trace_id, (time.monotonic() - t0) * 1000, error=exc.message)
            return _dump(
                SearchMemoryResponse(success=False, collection=target, has_filter=has_filter, error=exc.message)
            )

        hits = [
            MemoryHit(id=r.id, score=r.score, payload=r.payload, text=extract_text(r.payload))
            for r in results
        ]
        log_tool_invocation(
            "search_memory",
            trace_id,
            (time.monotonic() - t0) * 1000,
            extra={"collection": target, "results_count": len(hits)},
        )
        return _dump(
            SearchMemoryResponse(results=hits, total_results=len(hits), collection=target, has_filter=has_filter)
        )

    @mcp.tool()
    def delete_memory(id: str, collection: str | None = None) -> str:
        """Delete a stored memory by its identifier.

        Args:
            id: Memory identifier to delete
            collection: Collection name (defaults to the configured collection)

        Returns:
            JSON with success, id, found, collection
        """
        request = DeleteMemoryRequest(id=id, collection=collection)
        t0 = time.monotonic()
        trace_id = _new_trace_id()
        service = get_service()
        target = request.collection or service.default_collection
        try:
            found = _memory_exists(service, request.id, request.collection)
            service.delete(request.id, request.collection)
        except _TOOL_ERRORS as exc:
            log_tool_invocation("delete_memory", trace_id, (time.monotonic() - t0) * 1000, error=exc.message)
            return _dump(DeleteMemoryResponse(success=False, id=request.id, collection=target, error=exc.message))

        log_tool_invocation(
            "delete_memory", trace_id, (time.monotonic() - t0) * 1000, extra={"collection": target, "found": found}
        )
        return _dump(DeleteMemoryResponse(id=request.id, found=found, collection=target))

    @mcp.tool()
    def count_memory(
        filter: dict[str, Any] | None = None,
        collection: str | None = None,
        exact: bool = False,
    ) -> str:
        """Count stored memories, optionally restricted by a filter.

        Args:
            filter: Filter object or plain metadata equality (see search_memory)
            collection: Collection name (defaults to the configured collection)
            exact: Request an exact count instead of Qdrant's estimate

        Returns:
            JSON with success, count, collection, has_filter, exact
        """
        request = CountMemoryRequest(filter=filter, collection=collection, exact=exact)
        t0 = time.monotonic()
        trace_id = _new_trace_id()
        service = get_service()
        target = request.collection or service.default_collection
        has_filter = bool(request.filter)
        try:
            total = service.count(request.filter or None, exact=request.exact, collection=request.collection)
        except _TOOL_ERRORS as exc:
            log_tool_invocation("count_memory", trace_id, (time.monotonic() - t0) * 1000, error=exc.message)
            return _dump(
                CountMemoryResponse(
                    success=False, collection=target, has_filter=has_filter, exact=request.exact, error=exc.message
                )
            )

        log_tool_invocation("count_memory", trace_id, (time.monotonic() - t0) * 1000, extra={"collection": target})
        return _dump(CountMemoryResponse(count=total, collection=target, has_filter=has_filter, exact=request.exact))
