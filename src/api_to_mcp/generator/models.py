"""Data model fed to the tool generator.

Endpoint descriptors are produced by an external extractor (framework
introspection, a build step, a hand-written file) and are immutable once
loaded. The generator configuration describes which actions become tools and
how they are named.
"""

from enum import StrEnum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from api_to_mcp.core.mcp.exceptions import DescriptorLoadError
from api_to_mcp.core.mcp.scopes import McpScope
from api_to_mcp.core.mcp.validation import coerce_bool, format_validation_errors

CONTROLLER_SUFFIX = "Controller"


class HttpMethod(StrEnum):
    """HTTP verbs an action can be mapped to."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @classmethod
    def _missing_(cls, value: object) -> "HttpMethod | None":
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper())
        return None

    @property
    def has_body(self) -> bool:
        return self in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH)


class BindingSource(StrEnum):
    """Where a parameter's value comes from in the original request."""

    AUTO = "Auto"
    ROUTE = "Route"
    QUERY = "Query"
    BODY = "Body"
    HEADER = "Header"
    SERVICES = "Services"

    @classmethod
    def _missing_(cls, value: object) -> "BindingSource | None":
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None


class SelectionMode(StrEnum):
    """How the configuration include/exclude lists are applied."""

    SELECTED_ONLY = "SelectedOnly"
    ALL_EXCEPT_EXCLUDED = "AllExceptExcluded"


def strip_controller_suffix(name: str) -> str:
    """Return ``name`` without a trailing ``Controller``."""
    if name.endswith(CONTROLLER_SUFFIX):
        return name[: -len(CONTROLLER_SUFFIX)]
    return name


class _Descriptor(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class PropertyDescriptor(_Descriptor):
    """One field of a structured parameter type."""

    name: str
    type_name: str = Field(default="string", alias="type")
    is_nullable: bool = False


class ParameterDescriptor(_Descriptor):
    """One parameter of an endpoint action."""

    name: str
    type_name: str = Field(default="string", alias="type")
    is_nullable: bool = False
    has_default_value: bool = False
    default_value: Any = None
    source: BindingSource = BindingSource.AUTO
    properties: tuple[PropertyDescriptor, ...] = ()

    @field_validator("source", mode="before")
    @classmethod
    def parse_source(cls, v: Any) -> Any:
        return BindingSource(v) if isinstance(v, str) else v


class EndpointDescriptor(_Descriptor):
    """One endpoint action, as reported by the external extractor."""

    controller_name: str
    action_name: str
    http_method: HttpMethod
    route_template: str = "/"
    parameters: tuple[ParameterDescriptor, ...] = ()
    return_type_name: str = "void"
    explicit_expose: bool = False
    explicit_ignore: bool = False
    controller_expose: bool = False
    controller_ignore: bool = False
    doc_summary: str | None = None
    custom_tool_name: str | None = None
    custom_description: str | None = None
    required_scope: McpScope | None = None

    @field_validator("http_method", mode="before")
    @classmethod
    def parse_http_method(cls, v: Any) -> Any:
        return HttpMethod(v) if isinstance(v, str) else v

    @field_validator("required_scope", mode="before")
    @classmethod
    def parse_scope(cls, v: Any) -> McpScope | None:
        if v is None or isinstance(v, McpScope):
            return v
        if isinstance(v, bool):
            raise ValueError("Scope must be an integer mask or a scope name")
        return McpScope.parse(v)

    @property
    def tool_class_name(self) -> str:
        return f"{self.controller_name}_{self.action_name}Tool"

    @property
    def controller_base_name(self) -> str:
        return strip_controller_suffix(self.controller_name)

    @property
    def effective_scope(self) -> McpScope:
        """Declared scope, or the verb's default when none was declared."""
        if self.required_scope is not None:
            return self.required_scope
        return McpScope.for_http_method(self.http_method)


class NamingConfig(BaseModel):
    """How externally visible tool names are built."""

    tool_name_format: str = "{Controller}_{Action}"
    remove_controller_suffix: bool = True

    @field_validator("remove_controller_suffix", mode="before")
    @classmethod
    def coerce_suffix_flag(cls, v: Any) -> Any:
        return coerce_bool(v)


class GeneratorConfig(BaseModel):
    """Selection and naming policy for one generation pass."""

    model_config = ConfigDict(frozen=True)

    schema_version: int = 1
    mode: SelectionMode = SelectionMode.SELECTED_ONLY
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    naming: NamingConfig = Field(default_factory=NamingConfig)
    http_methods: tuple[HttpMethod, ...] = tuple(HttpMethod)


_descriptor_list = TypeAdapter(list[EndpointDescriptor])


def parse_descriptors(data: Any, source: str = "<memory>") -> list[EndpointDescriptor]:
    """Validate raw descriptor data.

    Accepts either a list of descriptors or a mapping with an ``endpoints`` list.

    Raises:
        DescriptorLoadError: If the data does not describe endpoints
    """
    if isinstance(data, dict):
        data = data.get("endpoints")
    if not isinstance(data, list):
        raise DescriptorLoadError(source, "expected a list of endpoint descriptors")
    try:
        return _descriptor_list.validate_python(data)
    except ValidationError as e:
        raise DescriptorLoadError(
            source, format_validation_errors(e, "endpoint descriptors")
        ) from e


def load_descriptors(path: Path | str) -> list[EndpointDescriptor]:
    """Load endpoint descriptors from a JSON or YAML file.

    Raises:
        DescriptorLoadError: If the file cannot be read or validated
    """
    file_path = Path(path)
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise DescriptorLoadError(str(file_path), str(e)) from e
    return parse_descriptors(data, str(file_path))
