"""FastMCP server adapter implementation."""

import logging

from fastmcp import FastMCP

from api_to_mcp.core.mcp.protocols import GeneratedTool, ToolProvider

logger = logging.getLogger(__name__)


class FastMcpServerAdapter:
    """Adapter that makes FastMCP work with our protocols."""

    def __init__(self, name: str = "api-to-mcp"):
        """Initialize the FastMCP server adapter.

        Args:
            name: Server name for MCP identification
        """
        self._mcp = FastMCP(name)
        self._tool_providers: list[ToolProvider] = []
        self._tool_names: list[str] = []

    def add_tool_provider(self, provider: ToolProvider) -> None:
        """Add a tool provider to the server.

        Args:
            provider: Object implementing the ToolProvider protocol
        """
        self._tool_providers.append(provider)
        for tool in provider.get_tools():
            self._register_tool(tool)

    def _register_tool(self, tool: GeneratedTool) -> None:
        """Register one tool's bound ``execute`` under its generated name."""
        if tool.name in self._tool_names:
            logger.warning(f"Tool '{tool.name}' is registered more than once; the last one wins")
        else:
            self._tool_names.append(tool.name)
        self._mcp.tool(
            tool.execute,
            name=tool.name,
            description=tool.description,
        )
        logger.debug(f"Registered MCP tool {tool.name} ({type(tool).__name__})")

    @property
    def tool_names(self) -> list[str]:
        return list(self._tool_names)

    @property
    def mcp(self) -> FastMCP:
        """Access to underlying FastMCP instance."""
        return self._mcp
