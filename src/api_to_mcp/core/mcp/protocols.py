"""MCP protocols for type-safe composition."""

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from .scopes import McpScope


@runtime_checkable
class BaseUrlProvider(Protocol):
    """Protocol for objects that know where the running service can be reached."""

    def get_base_url(self) -> str:
        """Return the base URL for self-calls, without a trailing slash.

        Raises:
            BaseUrlResolutionError: If no usable address is available
        """
        ...


@runtime_checkable
class HttpInvoker(Protocol):
    """Protocol for the self-calling HTTP client used by generated tools."""

    async def before_invoke(self, required_scope: McpScope) -> None:
        """Validate that the current caller holds ``required_scope``.

        Raises:
            AuthorizationError: If the caller may not invoke the tool
        """
        ...

    async def get(self, route: str) -> str:
        """Send a GET request to ``route`` on the running service."""
        ...

    async def post(self, route: str, json_body: str | None = None) -> str:
        """Send a POST request with an optional JSON body."""
        ...

    async def put(self, route: str, json_body: str | None = None) -> str:
        """Send a PUT request with an optional JSON body."""
        ...

    async def patch(self, route: str, json_body: str | None = None) -> str:
        """Send a PATCH request with an optional JSON body."""
        ...

    async def delete(self, route: str) -> str:
        """Send a DELETE request to ``route``."""
        ...


class GeneratedTool(Protocol):
    """Shape of a generated tool class.

    Instances are created with the shared invoker and expose ``execute`` for
    registration with the MCP server.
    """

    name: str
    description: str
    required_scope: McpScope

    def __init__(self, invoker: HttpInvoker) -> None: ...

    async def execute(self, **kwargs: Any) -> str: ...


class ToolProvider(Protocol):
    """Protocol for objects that hand tool instances to the MCP server."""

    def get_tools(self) -> Sequence[GeneratedTool]:
        """Return the tool instances to register."""
        ...
