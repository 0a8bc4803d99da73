"""Runtime HTTP layer: self-call invoker, base URL resolution and tool provider."""

from .base_url import BaseUrlResolver, listener_addresses, normalize_binding_address
from .config import InvokerConfig, ScopeOptions, space_separated_scope_mapper
from .context import ClaimsUser, current_http_request
from .invoker import McpHttpInvoker
from .providers import GeneratedToolProvider, import_tool_types
from .serialization import format_value, serialize_body

__all__ = [
    "BaseUrlResolver",
    "ClaimsUser",
    "GeneratedToolProvider",
    "InvokerConfig",
    "McpHttpInvoker",
    "ScopeOptions",
    "current_http_request",
    "format_value",
    "import_tool_types",
    "listener_addresses",
    "normalize_binding_address",
    "serialize_body",
    "space_separated_scope_mapper",
]
