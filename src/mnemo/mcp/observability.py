"""Observability: structured logs (trace_id, tool, latency_ms) and in-memory tool metrics."""

from __future__ import annotations

import logging
from typing import Any

_LOGGER = logging.getLogger("mnemo.mcp")

# tool_calls[name] = count, errors[name] = count
METRICS: dict[str, dict[str, int]] = {"tool_calls": {}, "errors": {}}


def log_tool_invocation(
    tool: str,
    trace_id: str | None,
    latency_ms: float,
    error: str | None = None,
    extra: dict[str, Any] | None = None,
) -> None:
    """Emit a structured log line and bump the per-tool counters."""
    payload: dict[str, Any] = {
        "tool": tool,
        "trace_id": trace_id,
        "latency_ms": round(latency_ms, 2),
    }
    if error:
        payload["error"] = error
    if extra:
        payload.update(extra)
    if error:
        _LOGGER.warning("tool_invocation_failed", extra=payload)
    else:
        _LOGGER.info("tool_invocation", extra=payload)
    METRICS["tool_calls"][tool] = METRICS["tool_calls"].get(tool, 0) + 1
    if error:
        METRICS["errors"][tool] = METRICS["errors"].get(tool, 0) + 1


def metrics_snapshot() -> dict[str, dict[str, int]]:
    """Return a copy of the current counters."""
    return {k: dict(v) for k, v in METRICS.items()}


def reset_metrics() -> None:
    for counters in METRICS.values():
        counters.clear()
