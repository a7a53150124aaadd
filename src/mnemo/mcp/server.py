"""MCP server factory for the memory tools."""

from __future__ import annotations

import logging

from mcp.server.fastmcp import FastMCP

from ..config.runtime import get_settings
from .tools import ServiceFactory, register_memory_tools

SERVER_NAME = "mnemo"


def create_server(service_factory: ServiceFactory | None = None) -> FastMCP:
    """Build and return a FastMCP server with the memory tools registered.

    Args:
        service_factory: Zero-argument callable returning a MemoryService.
            Defaults to the composition root in ``mnemo.wiring``.
    """
    server = FastMCP(SERVER_NAME)
    register_memory_tools(server, service_factory)
    return server


def run_server() -> None:
    """Run the MCP server using stdio transport."""
    logging.basicConfig(level=get_settings().log_level)
    create_server().run(transport="stdio")


if __name__ == "__main__":
    run_server()
