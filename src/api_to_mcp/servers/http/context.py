"""Access to the inbound request a tool call is running under."""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from fastmcp.server.dependencies import get_http_request
from starlette.authentication import BaseUser
from starlette.requests import Request

from .base_url import listener_addresses

logger = logging.getLogger(__name__)

RequestAccessor = Callable[[], Request | None]


def current_http_request() -> Request | None:
    """Return the HTTP request of the current MCP call, if any."""
    try:
        return get_http_request()
    except RuntimeError:
        return None


class ClaimsUser(BaseUser):
    """Authenticated Starlette user carrying token claims.

    Host authentication backends return this from ``authenticate`` so the
    invoker can read the scope claim.
    """

    def __init__(self, claims: Mapping[str, Any], username: str = ""):
        self._claims = dict(claims)
        self._username = username or str(self._claims.get("sub", ""))

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def display_name(self) -> str:
        return self._username

    @property
    def claims(self) -> Mapping[str, Any]:
        return self._claims


def request_user(request: Request | None) -> Any | None:
    if request is None:
        return None
    # request.user asserts that AuthenticationMiddleware is installed
    return request.scope.get("user")


def is_authenticated(user: Any | None) -> bool:
    return bool(user is not None and getattr(user, "is_authenticated", False))


def user_claims(user: Any | None) -> Mapping[str, Any]:
    """Claims of ``user``, from ``claims`` or an attached ``access_token``."""
    if user is None:
        return {}
    claims = getattr(user, "claims", None)
    if claims is None:
        token = getattr(user, "access_token", None)
        claims = getattr(token, "claims", None)
    return claims if isinstance(claims, Mapping) else {}


def claim_value(claims: Mapping[str, Any], name: str) -> str | None:
    """Read one claim as text; list-valued claims are joined with spaces."""
    value = claims.get(name)
    if value is None:
        return None
    if isinstance(value, (list, tuple, set)):
        return " ".join(str(v) for v in value)
    return str(value)


def request_listener_addresses(request: Request | None) -> list[str]:
    """Address of the listener that accepted ``request``.

    Read from the ASGI ``server`` and ``scheme`` entries, so it reflects the
    socket the server is actually bound to. Empty when there is no request or
    the server did not report a TCP address (for example a Unix socket).
    """
    if request is None:
        return []
    server = request.scope.get("server")
    if not server or server[1] is None:
        return []
    host, port = server
    https = request.scope.get("scheme") in ("https", "wss")
    return listener_addresses(str(host), int(port), https)
