"""Selection policy: which endpoint actions become tools."""

import logging
import re
from collections.abc import Iterable

from api_to_mcp.generator.diagnostics import (
    MCP_ROUTE_SKIPPED,
    UNSUPPORTED_HTTP_METHOD,
    UNSUPPORTED_RETURN_TYPE,
    Diagnostic,
)
from api_to_mcp.generator.models import (
    EndpointDescriptor,
    GeneratorConfig,
    SelectionMode,
)

logger = logging.getLogger(__name__)

MCP_ROUTE_SEGMENT = "/mcp"

# Streaming and file results cannot be returned as tool text.
UNSUPPORTED_RETURN_TYPES = frozenset(
    {
        "Stream",
        "FileResult",
        "FileStreamResult",
        "FileContentResult",
        "PhysicalFileResult",
        "VirtualFileResult",
        "IAsyncEnumerable",
        "StreamingResponse",
        "FileResponse",
        "AsyncIterator",
        "AsyncGenerator",
    }
)

_GENERIC_OUTER = re.compile(r"^([\w.]+)\s*[<\[]")


def _return_type_base(type_name: str) -> str:
    name = type_name.strip().rstrip("?")
    match = _GENERIC_OUTER.match(name)
    if match:
        name = match.group(1)
    return name.rsplit(".", 1)[-1]


def is_supported_return_type(type_name: str) -> bool:
    return _return_type_base(type_name) not in UNSUPPORTED_RETURN_TYPES


def candidate_names(action: EndpointDescriptor) -> tuple[str, str, str, str]:
    """Names an include/exclude entry can use to refer to ``action``."""
    base = action.controller_base_name
    return (
        action.controller_name,
        base,
        f"{action.controller_name}.{action.action_name}",
        f"{base}.{action.action_name}",
    )


def matches_config(action: EndpointDescriptor, config: GeneratorConfig) -> bool:
    names = candidate_names(action)
    if config.mode == SelectionMode.ALL_EXCEPT_EXCLUDED:
        excluded = set(config.exclude)
        return not any(name in excluded for name in names)
    included = set(config.include)
    return any(name in included for name in names)


def evaluate(
    action: EndpointDescriptor, config: GeneratorConfig
) -> tuple[bool, Diagnostic | None]:
    """Apply the selection rules to one action, first match wins."""
    if MCP_ROUTE_SEGMENT in action.route_template.lower():
        return False, MCP_ROUTE_SKIPPED.create(action.controller_name, action.action_name)

    if action.http_method not in config.http_methods:
        enabled = ", ".join(config.http_methods) or "none"
        return False, UNSUPPORTED_HTTP_METHOD.create(
            action.controller_name, action.action_name, action.http_method, enabled
        )

    if not is_supported_return_type(action.return_type_name):
        return False, UNSUPPORTED_RETURN_TYPE.create(
            action.controller_name, action.action_name, action.return_type_name
        )

    if action.explicit_ignore or action.controller_ignore:
        return False, None
    if action.explicit_expose or action.controller_expose:
        return True, None

    return matches_config(action, config), None


def select_actions(
    descriptors: Iterable[EndpointDescriptor], config: GeneratorConfig
) -> tuple[list[EndpointDescriptor], list[Diagnostic]]:
    """Select the actions to materialize as tools.

    Output is grouped by controller in order of first appearance, with actions
    kept in input order inside each controller.

    Returns:
        Tuple of the selected actions and the diagnostics raised
    """
    by_controller: dict[str, list[EndpointDescriptor]] = {}
    for descriptor in descriptors:
        by_controller.setdefault(descriptor.controller_name, []).append(descriptor)

    selected: list[EndpointDescriptor] = []
    diagnostics: list[Diagnostic] = []
    for actions in by_controller.values():
        for action in actions:
            include, diagnostic = evaluate(action, config)
            if diagnostic is not None:
                diagnostics.append(diagnostic)
            if include:
                selected.append(action)
            else:
                logger.debug(f"Skipping {action.controller_name}.{action.action_name}")

    return selected, diagnostics
