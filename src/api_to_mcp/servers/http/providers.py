"""Tool provider for generated tool classes."""

import importlib
import logging
from collections.abc import Iterable, Sequence

from api_to_mcp.core.mcp.protocols import GeneratedTool, HttpInvoker

logger = logging.getLogger(__name__)


def import_tool_types(package: str) -> tuple[type, ...]:
    """Import ``TOOL_TYPES`` from a generated package.

    Raises:
        ImportError: If the package cannot be imported
        AttributeError: If the package does not export ``TOOL_TYPES``
    """
    module = importlib.import_module(package)
    tool_types = tuple(getattr(module, "TOOL_TYPES"))
    logger.debug(f"Loaded {len(tool_types)} tool type(s) from {package}")
    return tool_types


class GeneratedToolProvider:
    """Provides instances of generated tools sharing one HTTP invoker.

    Generated classes take the invoker in their constructor and expose
    ``execute``, which the MCP server adapter registers directly.
    """

    def __init__(self, invoker: HttpInvoker, tool_types: Iterable[type]):
        """Instantiate every tool type with the shared invoker.

        Args:
            invoker: Invoker the tools use for their self-calls
            tool_types: Generated tool classes, usually ``TOOL_TYPES``
        """
        self._invoker = invoker
        self._tools: list[GeneratedTool] = [
            tool_type(invoker) for tool_type in tool_types
        ]

    @property
    def invoker(self) -> HttpInvoker:
        return self._invoker

    def get_tools(self) -> Sequence[GeneratedTool]:
        return list(self._tools)
