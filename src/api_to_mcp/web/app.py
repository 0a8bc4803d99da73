"""FastAPI host application exposing generated tools over MCP."""

import logging
from collections.abc import Callable, Iterable, Sequence

import httpx
from fastapi import APIRouter, FastAPI

from api_to_mcp import __version__
from api_to_mcp.api.mcp.server import FastMcpServerAdapter
from api_to_mcp.core.config.settings import Settings, get_settings
from api_to_mcp.core.mcp.protocols import HttpInvoker
from api_to_mcp.core.mcp.scopes import McpScope
from api_to_mcp.servers.http.base_url import BaseUrlResolver, listener_addresses
from api_to_mcp.servers.http.config import InvokerConfig, ScopeOptions
from api_to_mcp.servers.http.context import current_http_request, request_listener_addresses
from api_to_mcp.servers.http.invoker import McpHttpInvoker
from api_to_mcp.servers.http.providers import GeneratedToolProvider
from api_to_mcp.web.middleware import LoopPreventionMiddleware

logger = logging.getLogger(__name__)


def build_invoker(
    settings: Settings,
    scope_mapper: Callable[[str], McpScope] | None = None,
    addresses_provider: Callable[[], Sequence[str]] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> McpHttpInvoker:
    """Wire settings into an invoker.

    Args:
        settings: Application settings
        scope_mapper: Claim-to-scope mapper; scope checks are off without one
        addresses_provider: Bound listener addresses (defaults to the
            listener that accepted the current request, then the
            configured host and port)
        transport: Optional httpx transport, mainly for tests
    """
    tools = settings.mcp_tools

    def default_addresses() -> list[str]:
        addresses = request_listener_addresses(current_http_request())
        if addresses:
            return addresses
        return listener_addresses(tools.host, tools.port, tools.https)

    resolver = BaseUrlResolver(
        configured_url=tools.base_url,
        environment=settings.application.app_env,
        tunnel_env_var=tools.tunnel_url_var,
        addresses_provider=addresses_provider or default_addresses,
    )
    return McpHttpInvoker(
        config=InvokerConfig(timeout=tools.request_timeout, verify_ssl=tools.verify_ssl),
        base_url_provider=resolver,
        scope_options=ScopeOptions(claim_name=tools.scope_claim, scope_mapper=scope_mapper),
        transport=transport,
    )


def create_app(
    tool_types: Iterable[type],
    settings: Settings | None = None,
    routers: Iterable[APIRouter] = (),
    scope_mapper: Callable[[str], McpScope] | None = None,
    invoker: HttpInvoker | None = None,
) -> FastAPI:
    """Create the host application.

    Host routers are served as usual, the MCP endpoint is served at the
    reserved prefix, and loop prevention guards that prefix.

    Args:
        tool_types: Generated tool classes, usually ``TOOL_TYPES``
        settings: Application settings (cached settings when None)
        routers: Host API routers the tools call back into
        scope_mapper: Claim-to-scope mapper for scope enforcement
        invoker: Pre-built invoker, overriding the one built from settings
    """
    settings = settings or get_settings()
    mcp_path = settings.mcp_tools.path
    invoker = invoker or build_invoker(settings, scope_mapper)

    adapter = FastMcpServerAdapter(settings.mcp_tools.server_name)
    adapter.add_tool_provider(GeneratedToolProvider(invoker, tool_types))
    mcp_app = adapter.mcp.http_app(path=mcp_path)

    app = FastAPI(
        title=settings.application.app_name,
        description="HTTP API with its endpoints exposed as MCP tools",
        version=__version__,
        lifespan=mcp_app.lifespan,
    )

    for router in routers:
        app.include_router(router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": settings.application.app_name}

    # Registered last so host routes match first
    app.mount("/", mcp_app)
    app.add_middleware(LoopPreventionMiddleware, prefix=mcp_path)

    app.state.mcp_adapter = adapter
    app.state.invoker = invoker
    logger.info(
        f"MCP endpoint at {mcp_path} with {len(adapter.tool_names)} tool(s)"
    )
    return app
