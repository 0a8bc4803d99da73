"""MCP-related exceptions."""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .scopes import McpScope


class McpError(Exception):
    """Base exception for MCP-related errors."""

    pass


class ToolError(McpError):
    """Exception raised when tool execution fails."""

    def __init__(
        self, tool_name: str, message: str, details: dict[str, Any] | None = None
    ):
        self.tool_name = tool_name
        self.details = details or {}
        super().__init__(f"Tool '{tool_name}' failed: {message}")


class AuthorizationError(McpError, PermissionError):
    """Raised when the caller may not invoke a tool.

    Carries the scope the tool requires and the scope the caller was granted
    (``None`` when the caller could not be identified at all).
    """

    def __init__(
        self,
        message: str,
        required: "McpScope | None" = None,
        granted: "McpScope | None" = None,
    ):
        self.required = required
        self.granted = granted
        super().__init__(message)


class BaseUrlResolutionError(McpError):
    """Raised when no usable base URL exists for self-calls."""

    pass


class DescriptorLoadError(McpError):
    """Raised when an endpoint descriptor file cannot be loaded."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"Descriptor file '{source}' is invalid: {message}")
