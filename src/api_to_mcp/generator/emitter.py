"""Python source emission for generated tools.

Each selected action becomes one module holding a tool class:

    class ProductsController_GetByIdTool:
        name = "Products_GetById"
        description = "..."
        required_scope = McpScope.READ

        def __init__(self, invoker: HttpInvoker) -> None: ...

        async def execute(self, *, id: Annotated[str, Field(...)]) -> str: ...

The class only depends on ``api_to_mcp.runtime``, pydantic and the standard
library, so generated packages can be imported without the generator.
"""

import json
import logging
import re
from dataclasses import dataclass, field

from api_to_mcp.core.mcp.scopes import McpScope
from api_to_mcp.generator.binding import Binding, ClassifiedParameter, classify_parameters
from api_to_mcp.generator.models import (
    EndpointDescriptor,
    GeneratorConfig,
    NamingConfig,
    ParameterDescriptor,
    PropertyDescriptor,
)
from api_to_mcp.generator.routes import (
    ConvertedRoute,
    collection_element_type,
    convert_route_template,
    is_complex_type,
    python_identifier,
    resolve_controller_token,
    scalar_annotation,
    type_is_nullable,
)

logger = logging.getLogger(__name__)

GENERATED_MARKER = "# auto-generated by api-to-mcp"
GENERATED_HEADER = (
    f"{GENERATED_MARKER}\n"
    "# Changes to this file are overwritten on the next generation pass.\n"
)

INDENT = "    "
_TYPE_NAME_SEGMENT = re.compile(r"[\w]+")


@dataclass(frozen=True)
class GeneratedTool:
    """One emitted tool module."""

    class_name: str
    tool_name: str
    description: str
    required_scope: McpScope
    action: EndpointDescriptor
    source: str


def tool_name(action: EndpointDescriptor, naming: NamingConfig) -> str:
    """Externally visible tool name."""
    if action.custom_tool_name:
        return action.custom_tool_name
    controller = (
        action.controller_base_name
        if naming.remove_controller_suffix
        else action.controller_name
    )
    return naming.tool_name_format.replace("{Controller}", controller).replace(
        "{Action}", action.action_name
    )


def tool_description(action: EndpointDescriptor) -> str:
    """Tool description: custom text, then the doc summary, then the verb and route."""
    if action.custom_description:
        return action.custom_description.strip()
    if action.doc_summary and action.doc_summary.strip():
        return " ".join(action.doc_summary.split())
    route = _normalized_route(action)
    return f"Calls {action.http_method} {route}"


def scope_expression(scope: McpScope) -> str:
    if scope == McpScope.NONE:
        return "McpScope.NONE"
    if scope == McpScope.ALL:
        return "McpScope.ALL"
    members = [m for m in (McpScope.READ, McpScope.WRITE, McpScope.DELETE) if m in scope]
    return " | ".join(f"McpScope.{m.name}" for m in members)


def _normalized_route(action: EndpointDescriptor) -> str:
    route = resolve_controller_token(action.route_template, action.controller_name).strip()
    if not route.startswith("/"):
        route = "/" + route
    return route


def _literal(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _default_literal(value: object) -> str | None:
    if value is None or isinstance(value, (bool, int, float, str)):
        return repr(value) if not isinstance(value, str) else _literal(value)
    return None


@dataclass
class _ModuleBuilder:
    """Collects imports, model classes and the tool class body."""

    typing_names: set[str] = field(default_factory=set)
    pydantic_names: set[str] = field(default_factory=set)
    runtime_names: set[str] = field(default_factory=lambda: {"HttpInvoker", "McpScope"})
    needs_quote: bool = False
    models: dict[str, str] = field(default_factory=dict)
    model_sources: list[str] = field(default_factory=list)

    def imports(self) -> list[str]:
        lines = []
        if self.typing_names:
            lines.append(f"from typing import {', '.join(sorted(self.typing_names))}")
        if self.needs_quote:
            lines.append("from urllib.parse import quote")
        if lines:
            lines.append("")
        if self.pydantic_names:
            lines.append(f"from pydantic import {', '.join(sorted(self.pydantic_names))}")
            lines.append("")
        lines.append(
            f"from api_to_mcp.runtime import {', '.join(sorted(self.runtime_names))}"
        )
        return lines

    def annotation(self, type_name: str, properties: tuple[PropertyDescriptor, ...] = ()) -> str:
        scalar = scalar_annotation(type_name)
        if scalar is not None:
            return scalar
        element = collection_element_type(type_name)
        if element is not None:
            return f"list[{scalar_annotation(element)}]"
        if properties:
            return self.model_for(type_name, properties)
        self.typing_names.add("Any")
        return "Any"

    def model_for(self, type_name: str, properties: tuple[PropertyDescriptor, ...]) -> str:
        key = f"{type_name}:{','.join(p.name for p in properties)}"
        if key in self.models:
            return self.models[key]

        segments = _TYPE_NAME_SEGMENT.findall(type_name.split("<", 1)[0].rstrip("?"))
        base = python_identifier(segments[-1] if segments else "Model")
        name = base
        counter = 2
        while name in self.models.values():
            name = f"{base}{counter}"
            counter += 1
        self.models[key] = name
        self.pydantic_names.add("BaseModel")

        lines = [f"class {name}(BaseModel):"]
        fields = []
        aliased = False
        for prop in properties:
            identifier = python_identifier(prop.name)
            annotation = self.annotation(prop.type_name)
            nullable = type_is_nullable(prop.is_nullable, prop.type_name)
            if nullable and annotation != "Any":
                annotation = f"{annotation} | None"
            if identifier != prop.name:
                aliased = True
                self.pydantic_names.add("Field")
                default = "default=None, " if nullable else ""
                fields.append(
                    f"{INDENT}{identifier}: {annotation} = Field({default}alias={_literal(prop.name)})"
                )
            elif nullable:
                fields.append(f"{INDENT}{identifier}: {annotation} = None")
            else:
                fields.append(f"{INDENT}{identifier}: {annotation}")
        if aliased:
            self.pydantic_names.add("ConfigDict")
            lines.append(f"{INDENT}model_config = ConfigDict(populate_by_name=True)")
            lines.append("")
        lines.extend(fields or [f"{INDENT}pass"])
        self.model_sources.append("\n".join(lines))
        return name


def _parameter_line(
    builder: _ModuleBuilder, classified: ClassifiedParameter
) -> str:
    param = classified.parameter
    identifier = python_identifier(param.name)
    annotation = builder.annotation(param.type_name, param.properties)
    nullable = type_is_nullable(param.is_nullable, param.type_name)

    default = None
    if param.has_default_value:
        default = _default_literal(param.default_value)
        if default is None:
            logger.debug(
                f"Default value {param.default_value!r} of '{param.name}' "
                f"has no literal form; treating it as None"
            )
            default = "None"
    elif nullable:
        default = "None"
    if (nullable or default == "None") and annotation != "Any":
        annotation = f"{annotation} | None"

    description = _parameter_description(classified)
    line = f"{identifier}: Annotated[{annotation}, Field(description={_literal(description)})]"
    if default is not None:
        line += f" = {default}"
    return line


def _parameter_description(classified: ClassifiedParameter) -> str:
    param = classified.parameter
    if classified.binding == Binding.ROUTE:
        return f"Route value '{param.name}' ({param.type_name})"
    if classified.binding == Binding.BODY:
        return f"Request body '{param.name}' ({param.type_name})"
    return f"Query string value '{param.name}' ({param.type_name})"


def _is_optional(param: ParameterDescriptor) -> bool:
    return type_is_nullable(param.is_nullable, param.type_name) or param.has_default_value


def _query_append(wire_name: str, expression: str) -> str:
    return f'query_parts.append({_literal(wire_name + "=")} + quote(format_value({expression}), safe=""))'


def _query_lines(param: ParameterDescriptor, depth: int) -> list[str]:
    identifier = python_identifier(param.name)
    pad = INDENT * depth
    lines = []
    if _is_optional(param):
        lines.append(f"{pad}if {identifier} is not None:")
        pad += INDENT

    if param.properties and is_complex_type(param.type_name):
        for prop in param.properties:
            source = f"{identifier}.{python_identifier(prop.name)}"
            if type_is_nullable(prop.is_nullable, prop.type_name):
                lines.append(f"{pad}if {source} is not None:")
                lines.append(f"{pad}{INDENT}{_query_append(prop.name, source)}")
            else:
                lines.append(f"{pad}{_query_append(prop.name, source)}")
    elif collection_element_type(param.type_name) is not None:
        lines.append(f"{pad}for query_value in {identifier}:")
        lines.append(f"{pad}{INDENT}{_query_append(param.name, 'query_value')}")
    else:
        lines.append(f"{pad}{_query_append(param.name, identifier)}")
    return lines


def _route_lines(converted: ConvertedRoute) -> list[str]:
    pad = INDENT * 2
    if not converted.bindings:
        return [f"{pad}route = {_literal(converted.template)}"]
    lines = [f"{pad}{b.variable} = {b.value_expression()}" for b in converted.bindings]
    body = converted.as_fstring_body().replace("\\", "\\\\").replace('"', '\\"')
    lines.append(f'{pad}route = f"{body}"')
    return lines


def emit_tool(
    action: EndpointDescriptor,
    config: GeneratorConfig,
    class_name: str | None = None,
) -> GeneratedTool:
    """Emit the tool module for one selected action."""
    class_name = class_name or action.tool_class_name
    name = tool_name(action, config.naming)
    description = tool_description(action)
    scope = action.effective_scope

    classified = [c for c in classify_parameters(action) if c.is_exposed]
    route_params = [c.parameter for c in classified if c.binding == Binding.ROUTE]
    complex_params = [
        c.parameter for c in classified
        if c.parameter.properties and is_complex_type(c.parameter.type_name)
    ]
    converted = convert_route_template(_normalized_route(action), route_params, complex_params)
    query_params = [c.parameter for c in classified if c.binding == Binding.QUERY]
    body_params = [c.parameter for c in classified if c.binding == Binding.BODY]

    builder = _ModuleBuilder()
    signature = [_parameter_line(builder, c) for c in classified]
    if signature:
        builder.typing_names.add("Annotated")
        builder.pydantic_names.add("Field")

    pad = INDENT * 2
    body = [f"{pad}await self._invoker.before_invoke({scope_expression(scope)})"]
    body.extend(_route_lines(converted))
    if converted.bindings or query_params:
        builder.needs_quote = True
        builder.runtime_names.add("format_value")

    if query_params:
        body.append(f"{pad}query_parts = []")
        for param in query_params:
            body.extend(_query_lines(param, 2))
        body.append(f"{pad}if query_parts:")
        body.append(f'{pad}{INDENT}route = route + "?" + "&".join(query_parts)')

    method = action.http_method.lower()
    if action.http_method.has_body:
        if body_params:
            builder.runtime_names.add("serialize_body")
            if len(body_params) == 1:
                payload = python_identifier(body_params[0].name)
            else:
                entries = ", ".join(
                    f"{_literal(p.name)}: {python_identifier(p.name)}" for p in body_params
                )
                payload = "{" + entries + "}"
            body.append(f"{pad}body_json = serialize_body({payload})")
            body.append(f"{pad}return await self._invoker.{method}(route, body_json)")
        else:
            body.append(f"{pad}return await self._invoker.{method}(route, None)")
    else:
        body.append(f"{pad}return await self._invoker.{method}(route)")

    lines = [GENERATED_HEADER.rstrip("\n"), ""]
    lines.extend(builder.imports())
    for model_source in builder.model_sources:
        lines.extend(["", "", model_source])
    lines.extend(
        [
            "",
            "",
            f"class {class_name}:",
            f"{INDENT}{_literal(description)}",
            "",
            f"{INDENT}name = {_literal(name)}",
            f"{INDENT}description = {_literal(description)}",
            f"{INDENT}required_scope = {scope_expression(scope)}",
            "",
            f"{INDENT}def __init__(self, invoker: HttpInvoker) -> None:",
            f"{INDENT * 2}self._invoker = invoker",
            "",
        ]
    )
    if signature:
        lines.append(f"{INDENT}async def execute(")
        lines.append(f"{INDENT * 2}self,")
        lines.append(f"{INDENT * 2}*,")
        lines.extend(f"{INDENT * 2}{entry}," for entry in signature)
        lines.append(f"{INDENT}) -> str:")
    else:
        lines.append(f"{INDENT}async def execute(self) -> str:")
    lines.extend(body)

    return GeneratedTool(
        class_name=class_name,
        tool_name=name,
        description=description,
        required_scope=scope,
        action=action,
        source="\n".join(lines) + "\n",
    )


__all__ = [
    "GENERATED_HEADER",
    "GENERATED_MARKER",
    "GeneratedTool",
    "emit_tool",
    "scope_expression",
    "tool_description",
    "tool_name",
]
