"""api-to-mcp: expose HTTP endpoint actions as MCP tools that call back into the same service."""

__version__ = "0.1.0"
