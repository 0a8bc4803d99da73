"""Runtime configuration for the self-calling HTTP invoker."""

from collections.abc import Callable
from dataclasses import dataclass

from api_to_mcp.core.mcp.scopes import McpScope

INTERNAL_CALL_HEADER = "X-MCP-Internal-Call"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"
ERROR_BODY_LIMIT = 1000
LOG_BODY_LIMIT = 500


@dataclass
class InvokerConfig:
    """Configuration for outbound self-calls."""

    timeout: float = 30.0
    verify_ssl: bool = True
    tracing_headers: dict[str, str] | None = None

    def __post_init__(self) -> None:
        """Initialize default tracing headers."""
        if self.tracing_headers is None:
            self.tracing_headers = {"User-Agent": "api-to-mcp/0.1.0"}


@dataclass
class ScopeOptions:
    """Scope enforcement options.

    Without a ``scope_mapper`` scope checking is disabled entirely and every
    tool call is allowed through. Hosts opt in by supplying a function that
    maps the raw claim value to the granted scopes.
    """

    claim_name: str = "scope"
    scope_mapper: Callable[[str], McpScope | int] | None = None

    @property
    def enabled(self) -> bool:
        return self.scope_mapper is not None


def space_separated_scope_mapper(value: str) -> McpScope:
    """Map an OAuth-style ``"mcp:read mcp:write"`` claim to scopes.

    Recognizes ``read``, ``write``, ``delete`` and ``all`` with or without an
    ``mcp:`` prefix; other entries are ignored.
    """
    granted = McpScope.NONE
    for token in value.replace(",", " ").split():
        name = token.lower().removeprefix("mcp:").removeprefix("mcp.")
        if name == "all":
            granted |= McpScope.ALL
        elif name in ("read", "write", "delete"):
            granted |= McpScope[name.upper()]
    return granted
