"""Build-time generation of MCP tool modules from endpoint descriptors."""

from api_to_mcp.generator.config_parser import load_config, parse_config
from api_to_mcp.generator.diagnostics import Diagnostic, Severity
from api_to_mcp.generator.emitter import GeneratedTool, emit_tool, tool_description, tool_name
from api_to_mcp.generator.models import (
    BindingSource,
    EndpointDescriptor,
    GeneratorConfig,
    HttpMethod,
    NamingConfig,
    ParameterDescriptor,
    PropertyDescriptor,
    SelectionMode,
    load_descriptors,
    parse_descriptors,
)
from api_to_mcp.generator.pipeline import GenerationResult, generate, write_generated_package
from api_to_mcp.generator.selection import select_actions

__all__ = [
    "BindingSource",
    "Diagnostic",
    "EndpointDescriptor",
    "GeneratedTool",
    "GenerationResult",
    "GeneratorConfig",
    "HttpMethod",
    "NamingConfig",
    "ParameterDescriptor",
    "PropertyDescriptor",
    "SelectionMode",
    "Severity",
    "emit_tool",
    "generate",
    "load_config",
    "load_descriptors",
    "parse_config",
    "parse_descriptors",
    "select_actions",
    "tool_description",
    "tool_name",
    "write_generated_package",
]
