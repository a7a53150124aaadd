"""Main entry point for the mnemo MCP server."""

from .mcp.server import run_server


def main():
    """Run the memory MCP server over stdio."""
    run_server()


if __name__ == "__main__":
    main()
