"""MCP interface: server factory, tools and observability."""
