"""Tool class naming and the aggregate registry module."""

import re
from collections.abc import Sequence
from dataclasses import dataclass

from api_to_mcp.generator.emitter import GENERATED_HEADER
from api_to_mcp.generator.models import EndpointDescriptor
from api_to_mcp.generator.routes import python_identifier

REGISTRY_MODULE = "registry"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def resolve_class_names(actions: Sequence[EndpointDescriptor]) -> list[str]:
    """Unique tool class identifiers in encounter order.

    The first occurrence of an identifier keeps it; later ones get ``_2``,
    ``_3`` and so on, skipping suffixes that are already taken.
    """
    taken: set[str] = set()
    counts: dict[str, int] = {}
    names = []
    for action in actions:
        base = python_identifier(action.tool_class_name)
        if base not in taken:
            name = base
        else:
            counter = counts.get(base, 1) + 1
            while f"{base}_{counter}" in taken:
                counter += 1
            counts[base] = counter
            name = f"{base}_{counter}"
        taken.add(name)
        names.append(name)
    return names


def module_name_for(class_name: str, taken: set[str] | None = None) -> str:
    """Snake-case module name for a tool class, unique within ``taken``."""
    parts = [p for p in class_name.split("_") if p]
    snake = "_".join(_CAMEL_BOUNDARY.sub("_", p).lower() for p in parts)
    name = python_identifier(snake or "tool")
    if name in (REGISTRY_MODULE, "__init__"):
        name = f"{name}_tool"

    if taken is None:
        return name
    unique = name
    counter = 2
    while unique in taken:
        unique = f"{name}_{counter}"
        counter += 1
    taken.add(unique)
    return unique


@dataclass(frozen=True)
class ToolRegistry:
    """The aggregate registry module listing every generated tool class."""

    class_names: tuple[str, ...]
    module_names: tuple[str, ...]
    source: str


def emit_registry(
    class_names: Sequence[str], module_names: Sequence[str]
) -> ToolRegistry:
    """Emit ``registry.py`` exposing ``TOOL_TYPES`` in registration order."""
    if len(class_names) != len(module_names):
        raise ValueError("Every tool class needs exactly one module")

    lines = [GENERATED_HEADER.rstrip("\n"), ""]
    for class_name, module_name in zip(class_names, module_names):
        lines.append(f"from .{module_name} import {class_name}")
    if class_names:
        lines.append("")
    lines.append("TOOL_TYPES = (")
    lines.extend(f"    {class_name}," for class_name in class_names)
    lines.append(")")
    lines.append("")
    lines.append('__all__ = ["TOOL_TYPES"]')

    return ToolRegistry(
        class_names=tuple(class_names),
        module_names=tuple(module_names),
        source="\n".join(lines) + "\n",
    )
