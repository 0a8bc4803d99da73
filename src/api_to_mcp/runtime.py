"""Names imported by generated tool modules.

Generated code depends only on this module, pydantic and the standard
library, so the generator's own internals can change freely.
"""

from api_to_mcp.core.mcp.exceptions import AuthorizationError
from api_to_mcp.core.mcp.protocols import HttpInvoker
from api_to_mcp.core.mcp.scopes import McpScope
from api_to_mcp.servers.http.serialization import format_value, serialize_body

__all__ = [
    "AuthorizationError",
    "HttpInvoker",
    "McpScope",
    "format_value",
    "serialize_body",
]
