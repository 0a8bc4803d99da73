"""Test fixtures for host application tests."""

import httpx
import pytest
from fastapi import APIRouter, HTTPException

from api_to_mcp.core.config.settings import Settings
from api_to_mcp.generator.emitter import emit_tool
from api_to_mcp.generator.models import GeneratorConfig
from tests.factories import make_endpoint, make_param

PRODUCTS = {7: {"id": 7, "name": "Gizmo"}}


@pytest.fixture
def products_router():
    """Host API the generated tools call back into."""
    router = APIRouter(prefix="/api/products")

    @router.get("/{product_id}")
    async def get_product(product_id: int):
        if product_id not in PRODUCTS:
            raise HTTPException(status_code=404, detail="Product not found")
        return PRODUCTS[product_id]

    return router


@pytest.fixture
def settings(monkeypatch):
    """Settings pointing self-calls at the in-process test server."""
    monkeypatch.setenv("MCP_TOOLS_BASE_URL", "http://testserver")
    monkeypatch.setenv("APP_NAME", "shop-api")
    return Settings()


@pytest.fixture
def product_tool_types():
    """Generated tool classes for the products router."""
    endpoint = make_endpoint(
        action="GetById",
        route="/api/products/{id}",
        parameters=(make_param("id", "int"),),
    )
    tool = emit_tool(endpoint, GeneratorConfig())
    namespace = {"__name__": "generated_products_tools"}
    exec(compile(tool.source, tool.class_name, "exec"), namespace)
    return [namespace[tool.class_name]]


class LateBoundApp:
    """ASGI app forwarding to an app assigned after construction."""

    def __init__(self):
        self.app = None

    async def __call__(self, scope, receive, send):
        await self.app(scope, receive, send)


@pytest.fixture
def self_call_transport():
    """Transport that routes self-calls into the app under test."""
    target = LateBoundApp()
    return target, httpx.ASGITransport(app=target)
