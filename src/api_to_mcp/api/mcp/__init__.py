"""FastMCP server implementation."""

from .server import FastMcpServerAdapter

__all__ = [
    "FastMcpServerAdapter",
]
