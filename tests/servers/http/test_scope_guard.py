"""Unit tests for scope enforcement before tool calls."""

from types import SimpleNamespace

import pytest
from starlette.requests import Request

from api_to_mcp.core.mcp.exceptions import AuthorizationError
from api_to_mcp.core.mcp.scopes import McpScope
from api_to_mcp.servers.http.base_url import BaseUrlResolver
from api_to_mcp.servers.http.config import (
    InvokerConfig,
    ScopeOptions,
    space_separated_scope_mapper,
)
from api_to_mcp.servers.http.context import ClaimsUser, claim_value, user_claims
from api_to_mcp.servers.http.invoker import McpHttpInvoker


class AnonymousUser:
    is_authenticated = False


def _request_for(user) -> Request:
    scope = {"type": "http", "method": "POST", "path": "/mcp", "headers": []}
    if user is not None:
        scope["user"] = user
    return Request(scope)


def _invoker(user=None, mapper=space_separated_scope_mapper, claim_name="scope"):
    request = _request_for(user)
    return McpHttpInvoker(
        config=InvokerConfig(),
        base_url_provider=BaseUrlResolver(configured_url="http://localhost"),
        scope_options=ScopeOptions(claim_name=claim_name, scope_mapper=mapper),
        request_accessor=lambda: request,
    )


class TestScopeMapper:
    """Test the space-separated claim mapper."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "claim,expected",
        [
            ("read", McpScope.READ),
            ("mcp:read mcp:write", McpScope.READ | McpScope.WRITE),
            ("openid profile", McpScope.NONE),
            ("mcp:all", McpScope.ALL),
            ("Read,Delete", McpScope.READ | McpScope.DELETE),
        ],
    )
    def test_mapping(self, claim, expected):
        """Test recognised entries are combined and others ignored."""
        # Act & Assert
        assert space_separated_scope_mapper(claim) == expected


class TestBeforeInvoke:
    """Test the scope check run before every tool call."""

    @pytest.mark.unit
    async def test_disabled_without_mapper(self):
        """Test no check happens when no mapper is configured."""
        # Arrange
        invoker = _invoker(user=None, mapper=None)

        # Act & Assert
        assert not invoker.scope_options.enabled
        await invoker.before_invoke(McpScope.ALL)

    @pytest.mark.unit
    async def test_anonymous_caller(self):
        """Test unauthenticated callers are rejected."""
        # Arrange
        invoker = _invoker(user=AnonymousUser())

        # Act & Assert
        with pytest.raises(AuthorizationError, match="User is not authenticated") as exc_info:
            await invoker.before_invoke(McpScope.READ)
        assert exc_info.value.required == McpScope.READ
        assert exc_info.value.granted is None

    @pytest.mark.unit
    async def test_no_request(self):
        """Test calls outside an HTTP request are rejected when checks are on."""
        # Arrange
        invoker = McpHttpInvoker(
            config=InvokerConfig(),
            base_url_provider=BaseUrlResolver(configured_url="http://localhost"),
            scope_options=ScopeOptions(scope_mapper=space_separated_scope_mapper),
            request_accessor=lambda: None,
        )

        # Act & Assert
        with pytest.raises(AuthorizationError, match="not authenticated"):
            await invoker.before_invoke(McpScope.NONE)

    @pytest.mark.unit
    async def test_missing_claim(self):
        """Test callers without the scope claim are rejected."""
        # Arrange
        invoker = _invoker(user=ClaimsUser({"sub": "alice"}), claim_name="scp")

        # Act & Assert
        with pytest.raises(AuthorizationError, match="Required claim 'scp' not found"):
            await invoker.before_invoke(McpScope.READ)

    @pytest.mark.unit
    async def test_insufficient_scope(self):
        """Test callers lacking part of the required scope are rejected."""
        # Arrange
        invoker = _invoker(user=ClaimsUser({"scope": "mcp:read"}))

        # Act & Assert
        with pytest.raises(AuthorizationError) as exc_info:
            await invoker.before_invoke(McpScope.READ | McpScope.WRITE)
        assert str(exc_info.value) == "Insufficient scope. Required: Read|Write, Granted: Read"
        assert exc_info.value.granted == McpScope.READ

    @pytest.mark.unit
    async def test_sufficient_scope(self):
        """Test callers holding every required flag pass."""
        # Arrange
        invoker = _invoker(user=ClaimsUser({"scope": "mcp:read mcp:write mcp:delete"}))

        # Act & Assert
        await invoker.before_invoke(McpScope.READ | McpScope.DELETE)

    @pytest.mark.unit
    async def test_none_scope_only_needs_authentication(self):
        """Test tools requiring no scope accept any authenticated caller with the claim."""
        # Arrange
        invoker = _invoker(user=ClaimsUser({"scope": "openid"}))

        # Act & Assert
        await invoker.before_invoke(McpScope.NONE)

    @pytest.mark.unit
    async def test_authorization_error_is_permission_error(self):
        """Test authorization failures can be caught as PermissionError."""
        # Arrange
        invoker = _invoker(user=ClaimsUser({"scope": ""}))

        # Act & Assert
        with pytest.raises(PermissionError):
            await invoker.before_invoke(McpScope.DELETE)

    @pytest.mark.unit
    async def test_mapper_returning_int_mask(self):
        """Test a mapper may return a plain integer bitmask."""
        # Arrange
        invoker = _invoker(user=ClaimsUser({"scope": "reader"}), mapper=lambda value: 1)

        # Act
        await invoker.before_invoke(McpScope.READ)

        # Assert
        with pytest.raises(AuthorizationError) as exc_info:
            await invoker.before_invoke(McpScope.WRITE)
        assert exc_info.value.granted == McpScope.READ
        assert "Granted: Read" in str(exc_info.value)

    @pytest.mark.unit
    async def test_mapper_returning_invalid_mask(self):
        """Test an out-of-range mask is reported as an authorization failure."""
        # Arrange
        invoker = _invoker(user=ClaimsUser({"scope": "admin"}), mapper=lambda value: 64)

        # Act & Assert
        with pytest.raises(AuthorizationError, match="mapped to an invalid scope: 64"):
            await invoker.before_invoke(McpScope.READ)


class TestClaims:
    """Test claim lookup on different user shapes."""

    @pytest.mark.unit
    def test_access_token_claims(self):
        """Test claims are read from an attached access token."""
        # Arrange
        user = SimpleNamespace(is_authenticated=True, access_token=SimpleNamespace(claims={"scope": "read"}))

        # Act & Assert
        assert user_claims(user) == {"scope": "read"}

    @pytest.mark.unit
    def test_list_claims_are_joined(self):
        """Test list-valued claims are joined with spaces."""
        # Act & Assert
        assert claim_value({"scope": ["read", "write"]}, "scope") == "read write"
        assert claim_value({}, "scope") is None
