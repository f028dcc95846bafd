"""MCP server exposing the issue matcher."""

from .server import init_server, mcp

__all__ = ["init_server", "mcp"]
