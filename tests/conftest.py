"""Shared test fixtures and configuration."""

import sys
from pathlib import Path

import pytest

# Add src to path for testing
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))
sys.path.insert(0, str(Path(__file__).parent.parent))

from api_to_mcp.core.config import settings as settings_module  # noqa: E402
from api_to_mcp.generator.models import GeneratorConfig  # noqa: E402
from tests.factories import make_endpoint, make_param  # noqa: E402

_SETTINGS_ENV_VARS = (
    "APP_NAME",
    "APP_ENV",
    "LOG_LEVEL",
    "MCP_TOOLS_SERVER_NAME",
    "MCP_TOOLS_PATH",
    "MCP_TOOLS_BASE_URL",
    "MCP_TOOLS_TUNNEL_URL_VAR",
    "MCP_TOOLS_HOST",
    "MCP_TOOLS_PORT",
    "MCP_TOOLS_HTTPS",
    "MCP_TOOLS_REQUEST_TIMEOUT",
    "MCP_TOOLS_VERIFY_SSL",
    "MCP_TOOLS_SCOPE_CLAIM",
    "DEV_TUNNEL_URL",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate every test from the developer's environment and cached settings."""
    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(settings_module, "_settings", None)
    yield
    settings_module._settings = None


@pytest.fixture
def default_config():
    """Configuration that selects every action."""
    return GeneratorConfig(mode="AllExceptExcluded")


@pytest.fixture
def product_endpoints():
    """A small products/orders API, as an extractor would report it."""
    return [
        make_endpoint(action="GetAll", doc_summary="List all products."),
        make_endpoint(
            action="GetById",
            route="/api/products/{id:guid}",
            parameters=(make_param("id", "System.Guid"),),
        ),
        make_endpoint(
            action="Create",
            method="POST",
            route="/api/products",
            parameters=(
                make_param(
                    "request",
                    "CreateProductRequest",
                    properties=(
                        {"name": "Name", "type_name": "string"},
                        {"name": "Price", "type_name": "decimal"},
                    ),
                ),
            ),
        ),
        make_endpoint(
            controller="OrdersController",
            action="Delete",
            method="DELETE",
            route="/api/orders/{id:int}",
            parameters=(make_param("id", "int"),),
        ),
    ]
