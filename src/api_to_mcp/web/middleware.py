"""Inbound half of loop prevention.

Tool calls carry the internal-call header on every self-call. A request that
carries the header and targets the tool endpoint itself would recurse, so it
is rejected before anything downstream runs.
"""

import logging

from starlette.datastructures import Headers
from starlette.requests import ClientDisconnect
from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from api_to_mcp.servers.http.config import INTERNAL_CALL_HEADER

logger = logging.getLogger(__name__)

LOOP_REJECTION_MESSAGE = "MCP endpoints cannot be called internally to prevent loops."


def path_is_under(path: str, prefix: str) -> bool:
    """Segment-aware, case-insensitive prefix match (``/mcp`` but not ``/mcpx``)."""
    prefix = prefix.rstrip("/").lower()
    path = path.lower()
    return path == prefix or path.startswith(prefix + "/")


class LoopPreventionMiddleware:
    """Rejects internally marked requests to the tool endpoint with 400."""

    def __init__(self, app: ASGIApp, prefix: str = "/mcp") -> None:
        self.app = app
        self.prefix = "/" + prefix.strip("/")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        if path_is_under(path, self.prefix) and INTERNAL_CALL_HEADER in Headers(scope=scope):
            logger.warning(f"Rejected internal call to MCP endpoint {scope.get('method')} {path}")
            response = PlainTextResponse(LOOP_REJECTION_MESSAGE, status_code=400)
            await response(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except ClientDisconnect:
            logger.debug(f"Client disconnected during {scope.get('method')} {path}")
