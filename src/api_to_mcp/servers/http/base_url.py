"""Resolution of the base URL used for self-calls."""

import logging
import os
import threading
from collections.abc import Callable, Mapping, Sequence

from api_to_mcp.core.mcp.exceptions import BaseUrlResolutionError

logger = logging.getLogger(__name__)

WILDCARD_HOSTS = frozenset({"+", "*", "0.0.0.0", "[::]", "[::1]"})
DEVELOPMENT_ENVIRONMENT = "development"


def normalize_binding_address(address: str) -> str:
    """Rewrite wildcard bind hosts to ``localhost``.

    Scheme, port and path are preserved and a trailing slash is trimmed.
    Bracketed IPv6 hosts are located by their closing ``]`` because wildcard
    tokens such as ``+`` are not valid in a URL.

    Examples:
        >>> normalize_binding_address("http://+:80")
        'http://localhost:80'
        >>> normalize_binding_address("https://[::]:443/")
        'https://localhost:443'
    """
    address = address.strip()
    scheme, separator, rest = address.partition("://")
    if not separator:
        scheme, rest = "", address

    if rest.startswith("["):
        end = rest.find("]")
        if end == -1:
            host, remainder = rest, ""
        else:
            host, remainder = rest[: end + 1], rest[end + 1:]
    else:
        cut = len(rest)
        for marker in (":", "/"):
            index = rest.find(marker)
            if index != -1:
                cut = min(cut, index)
        host, remainder = rest[:cut], rest[cut:]

    if host in WILDCARD_HOSTS:
        host = "localhost"

    prefix = f"{scheme}://" if separator else ""
    return f"{prefix}{host}{remainder}".rstrip("/")


def listener_addresses(host: str, port: int, https: bool = False) -> list[str]:
    """Addresses of a listener bound to ``host:port``."""
    scheme = "https" if https else "http"
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    return [f"{scheme}://{host}:{port}"]


class BaseUrlResolver:
    """Computes the self-call base URL once and caches it.

    Sources, in order: the configured URL; the development tunnel URL (only
    when running in the development environment); the first HTTPS address
    the listener is bound to; the first bound address of any scheme.
    """

    def __init__(
        self,
        configured_url: str | None = None,
        environment: str | None = None,
        tunnel_env_var: str | None = "DEV_TUNNEL_URL",
        addresses_provider: Callable[[], Sequence[str]] | None = None,
        env: Mapping[str, str] | None = None,
    ):
        self._configured_url = configured_url
        self._environment = environment
        self._tunnel_env_var = tunnel_env_var
        self._addresses_provider = addresses_provider
        self._env = env if env is not None else os.environ
        self._cached_url: str | None = None
        self._lock = threading.Lock()

    def get_base_url(self) -> str:
        """Return the cached base URL, resolving it on first use.

        Raises:
            BaseUrlResolutionError: If no source yields an address
        """
        if self._cached_url is not None:
            return self._cached_url

        with self._lock:
            if self._cached_url is None:
                self._cached_url = self._resolve()
                logger.info(f"Resolved MCP self-call base URL: {self._cached_url}")
        return self._cached_url

    def _resolve(self) -> str:
        if self._configured_url:
            return self._configured_url.strip().rstrip("/")

        if (
            self._tunnel_env_var
            and (self._environment or "").lower() == DEVELOPMENT_ENVIRONMENT
        ):
            tunnel_url = self._env.get(self._tunnel_env_var, "").strip()
            if tunnel_url:
                return tunnel_url.rstrip("/")

        addresses = list(self._addresses_provider()) if self._addresses_provider else []
        if addresses:
            address = next(
                (a for a in addresses if a.lower().startswith("https://")), addresses[0]
            )
            return normalize_binding_address(address)

        raise BaseUrlResolutionError(
            "Unable to determine base URL. Set MCP_TOOLS_BASE_URL or ensure the "
            "server is listening before the first tool call."
        )
