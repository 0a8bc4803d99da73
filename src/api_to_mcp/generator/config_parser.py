"""Generator configuration loading.

The configuration document may be JSON or YAML. Parsing never raises: an
absent document yields the default configuration with ``MCP005`` and a broken
one yields the default configuration with ``MCP001``.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from api_to_mcp.core.mcp.validation import format_validation_errors
from api_to_mcp.generator.diagnostics import (
    CONFIG_PARSE_ERROR,
    NO_CONFIG_FILE,
    Diagnostic,
)
from api_to_mcp.generator.models import GeneratorConfig, HttpMethod, SelectionMode

logger = logging.getLogger(__name__)

_TOP_LEVEL_KEYS = {
    "schemaversion": "schema_version",
    "mode": "mode",
    "include": "include",
    "exclude": "exclude",
    "naming": "naming",
    "httpmethods": "http_methods",
}

_NAMING_KEYS = {
    "toolnameformat": "tool_name_format",
    "removecontrollersuffix": "remove_controller_suffix",
}


def _fold(key: Any) -> str:
    return str(key).replace("_", "").replace("-", "").lower()


def _rename_keys(data: dict, known: dict[str, str]) -> dict[str, Any]:
    renamed = {}
    for key, value in data.items():
        field = known.get(_fold(key))
        if field is not None:
            renamed[field] = value
    return renamed


def _parse_mode(value: Any) -> Any:
    if value is None:
        return SelectionMode.SELECTED_ONLY
    if not isinstance(value, str):
        return value
    if value.strip().lower() == SelectionMode.ALL_EXCEPT_EXCLUDED.lower():
        return SelectionMode.ALL_EXCEPT_EXCLUDED
    return SelectionMode.SELECTED_ONLY


def _parse_http_methods(value: Any, diagnostics: list[Diagnostic]) -> Any:
    if value is None:
        return tuple(HttpMethod)
    if not isinstance(value, list):
        return value
    methods = []
    for entry in value:
        try:
            method = HttpMethod(entry)
        except ValueError:
            diagnostics.append(
                CONFIG_PARSE_ERROR.create(f"unsupported HTTP method '{entry}' ignored")
            )
            continue
        if method not in methods:
            methods.append(method)
    return tuple(methods)


def parse_config(text: str | None) -> tuple[GeneratorConfig, list[Diagnostic]]:
    """Parse a generator configuration document.

    Args:
        text: Raw JSON or YAML text, or None when no document exists

    Returns:
        Tuple of the effective configuration and the diagnostics raised
    """
    if text is None or not text.strip():
        return GeneratorConfig(), [NO_CONFIG_FILE.create()]

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        logger.debug(f"Generator config is not valid JSON/YAML: {e}")
        return GeneratorConfig(), [CONFIG_PARSE_ERROR.create(str(e))]

    if data is None:
        return GeneratorConfig(), [NO_CONFIG_FILE.create()]
    if not isinstance(data, dict):
        return GeneratorConfig(), [
            CONFIG_PARSE_ERROR.create(
                f"expected a mapping at the document root, got {type(data).__name__}"
            )
        ]

    diagnostics: list[Diagnostic] = []
    fields = _rename_keys(data, _TOP_LEVEL_KEYS)
    fields["mode"] = _parse_mode(fields.get("mode"))
    fields["http_methods"] = _parse_http_methods(fields.get("http_methods"), diagnostics)
    for key in ("include", "exclude"):
        if fields.get(key) is None:
            fields[key] = ()
    naming = fields.get("naming")
    if naming is None:
        fields.pop("naming", None)
    elif isinstance(naming, dict):
        fields["naming"] = {
            key: value
            for key, value in _rename_keys(naming, _NAMING_KEYS).items()
            if value is not None
        }
    if fields.get("schema_version") is None:
        fields.pop("schema_version", None)

    try:
        config = GeneratorConfig.model_validate(fields)
    except ValidationError as e:
        return GeneratorConfig(), [
            CONFIG_PARSE_ERROR.create(format_validation_errors(e, "generator config"))
        ]

    return config, diagnostics


def load_config(path: Path | str | None) -> tuple[GeneratorConfig, list[Diagnostic]]:
    """Read and parse a configuration file.

    A missing file is reported the same way as an absent document.
    """
    if path is None:
        return parse_config(None)

    file_path = Path(path)
    if not file_path.is_file():
        logger.debug(f"No generator config at {file_path}")
        return parse_config(None)

    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return GeneratorConfig(), [CONFIG_PARSE_ERROR.create(str(e))]

    return parse_config(text)
