"""Self-calling HTTP invoker used by generated tools."""

import json
import logging
import re
from typing import Any

import httpx

from api_to_mcp.core.mcp.exceptions import AuthorizationError, ToolError
from api_to_mcp.core.mcp.protocols import BaseUrlProvider
from api_to_mcp.core.mcp.scopes import McpScope

from .config import (
    ERROR_BODY_LIMIT,
    INTERNAL_CALL_HEADER,
    JSON_CONTENT_TYPE,
    LOG_BODY_LIMIT,
    InvokerConfig,
    ScopeOptions,
)
from .context import (
    RequestAccessor,
    claim_value,
    current_http_request,
    is_authenticated,
    request_user,
    user_claims,
)

logger = logging.getLogger(__name__)

TOOL_NAME = "mcp_http_invoker"

# "<scheme> [credentials]" where the scheme is an RFC 7230 token
_AUTHORIZATION = re.compile(r"^[!#$%&'*+.^_`|~0-9A-Za-z-]+(?:\s+\S.*)?$")


def parse_authorization(value: str | None) -> str | None:
    """Return the header value if it is a well-formed Authorization header."""
    if value is None:
        return None
    value = value.strip()
    if not value or not _AUTHORIZATION.match(value):
        return None
    return value


def build_error_payload(status_code: int, reason: str, content: str) -> str:
    """Structured JSON returned to the tool caller for a non-success response."""
    return json.dumps(
        {
            "error": True,
            "statusCode": status_code,
            "message": f"HTTP {status_code}: {reason}",
            "body": content[:ERROR_BODY_LIMIT],
        }
    )


class McpHttpInvoker:
    """HTTP client for calls from generated tools back into the running service.

    Every request carries the internal-call marker header so the receiving
    side can refuse calls into the tool endpoint, and forwards the inbound
    Authorization header so the call runs as the original caller.
    """

    def __init__(
        self,
        config: InvokerConfig,
        base_url_provider: BaseUrlProvider,
        scope_options: ScopeOptions | None = None,
        request_accessor: RequestAccessor | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the invoker.

        Args:
            config: Timeout, TLS and tracing header settings
            base_url_provider: Source of the self-call base URL
            scope_options: Scope enforcement options (disabled when None)
            request_accessor: Returns the inbound request of the current call
            transport: Optional httpx transport, mainly for tests
        """
        self._config = config
        self._base_url_provider = base_url_provider
        self._scope_options = scope_options or ScopeOptions()
        self._request_accessor = request_accessor or current_http_request
        self._transport = transport

    @property
    def config(self) -> InvokerConfig:
        return self._config

    @property
    def scope_options(self) -> ScopeOptions:
        return self._scope_options

    async def before_invoke(self, required_scope: McpScope) -> None:
        """Check that the current caller holds ``required_scope``.

        A no-op unless a scope mapper is configured.

        Raises:
            AuthorizationError: If the caller is anonymous, lacks the scope
                claim, or was granted fewer scopes than required
        """
        mapper = self._scope_options.scope_mapper
        if mapper is None:
            return

        user = request_user(self._request_accessor())
        if not is_authenticated(user):
            raise AuthorizationError(
                "User is not authenticated", required=required_scope
            )

        claim_name = self._scope_options.claim_name
        raw_claim = claim_value(user_claims(user), claim_name)
        if raw_claim is None:
            raise AuthorizationError(
                f"Required claim '{claim_name}' not found", required=required_scope
            )

        mapped = mapper(raw_claim)
        try:
            granted = McpScope.parse(mapped)
        except (TypeError, ValueError) as e:
            raise AuthorizationError(
                f"Claim '{claim_name}' mapped to an invalid scope: {mapped!r}",
                required=required_scope,
            ) from e

        if (granted & required_scope) != required_scope:
            raise AuthorizationError(
                f"Insufficient scope. Required: {required_scope.label}, "
                f"Granted: {granted.label}",
                required=required_scope,
                granted=granted,
            )

        logger.debug(
            f"Scope validation passed. Required: {required_scope.label}, "
            f"Granted: {granted.label}"
        )

    async def get(self, route: str) -> str:
        return await self._send("GET", route)

    async def post(self, route: str, json_body: str | None = None) -> str:
        return await self._send("POST", route, json_body)

    async def put(self, route: str, json_body: str | None = None) -> str:
        return await self._send("PUT", route, json_body)

    async def patch(self, route: str, json_body: str | None = None) -> str:
        return await self._send("PATCH", route, json_body)

    async def delete(self, route: str) -> str:
        return await self._send("DELETE", route)

    def build_url(self, route: str) -> str:
        base_url = self._base_url_provider.get_base_url().rstrip("/")
        normalized_route = route if route.startswith("/") else "/" + route
        return base_url + normalized_route

    def build_headers(self, has_body: bool = False) -> dict[str, str]:
        headers = dict(self._config.tracing_headers or {})
        headers[INTERNAL_CALL_HEADER] = "true"

        request = self._request_accessor()
        inbound = request.headers.get("authorization") if request is not None else None
        if inbound is not None:
            authorization = parse_authorization(inbound)
            if authorization is not None:
                headers["Authorization"] = authorization
            else:
                logger.warning("Failed to parse Authorization header; not forwarding it")
        else:
            logger.debug("No Authorization header to forward")

        if has_body:
            headers["Content-Type"] = JSON_CONTENT_TYPE
        return headers

    async def _send(self, method: str, route: str, json_body: str | None = None) -> str:
        url = self.build_url(route)
        has_body = json_body is not None
        headers = self.build_headers(has_body)

        client_config: dict[str, Any] = {
            "timeout": self._config.timeout,
            "verify": self._config.verify_ssl,
        }
        if self._transport is not None:
            client_config["transport"] = self._transport

        logger.debug(f"MCP invoking {method} {url}")
        try:
            async with httpx.AsyncClient(**client_config) as client:
                response = await client.request(
                    method,
                    url,
                    headers=headers,
                    content=json_body.encode("utf-8") if has_body else None,
                )
        except httpx.TimeoutException as e:
            raise ToolError(
                TOOL_NAME, f"{method} {url} timed out after {self._config.timeout}s"
            ) from e
        except httpx.ConnectError as e:
            raise ToolError(TOOL_NAME, f"Connection failed for {method} {url}: {e}") from e
        except httpx.RequestError as e:
            raise ToolError(TOOL_NAME, f"Request failed for {method} {url}: {e}") from e

        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> str:
        content = response.text
        if response.is_success:
            return content

        logger.warning(
            f"MCP HTTP call failed with status {response.status_code}: "
            f"{content[:LOG_BODY_LIMIT]}"
        )
        return build_error_payload(
            response.status_code, response.reason_phrase, content
        )
