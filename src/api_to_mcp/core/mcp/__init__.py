"""MCP core types shared by the generator and the runtime."""

from .exceptions import (
    AuthorizationError,
    BaseUrlResolutionError,
    DescriptorLoadError,
    McpError,
    ToolError,
)
from .scopes import McpScope

__all__ = [
    "AuthorizationError",
    "BaseUrlResolutionError",
    "DescriptorLoadError",
    "McpError",
    "McpScope",
    "ToolError",
]
