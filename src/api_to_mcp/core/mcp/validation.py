"""Validation helpers shared by descriptor loading and configuration parsing."""

from typing import Any

from pydantic import ValidationError

INPUT_PREVIEW_LIMIT = 60


def error_location(loc: tuple[int | str, ...]) -> str:
    """Render a pydantic error location as a document path.

    List positions are shown as indexes, e.g. ``[1].parameters[0].type``.
    """
    path = ""
    for item in loc:
        if isinstance(item, int):
            path += f"[{item}]"
        else:
            path += f".{item}" if path else str(item)
    return path or "<root>"


def _preview(value: Any) -> str:
    text = repr(value)
    if len(text) > INPUT_PREVIEW_LIMIT:
        return text[: INPUT_PREVIEW_LIMIT - 3] + "..."
    return text


def format_validation_errors(error: ValidationError, context: str = "document") -> str:
    """Format every validation failure of a descriptor or config document.

    Each failure is listed on its own line with its location in the document,
    so a hand-edited file can be fixed in one pass.

    Example:
        Invalid endpoint descriptors (2 errors):
          [0].httpMethod: Input should be 'GET', ... (got 'TRACE')
          [3].actionName: Field required (got {'controllerName': 'Orders'})
    """
    errors = error.errors()
    noun = "error" if len(errors) == 1 else "errors"
    lines = [f"Invalid {context} ({len(errors)} {noun}):"]
    for err in errors:
        lines.append(
            f"  {error_location(err['loc'])}: {err['msg']} (got {_preview(err.get('input'))})"
        )
    return "\n".join(lines)


def coerce_bool(v: Any) -> bool | Any:
    """Map "true"/"yes"/"on"/"1" and their negatives to bool; other values pass through."""
    if isinstance(v, str):
        text = v.strip().lower()
        if text in ("true", "1", "yes", "on"):
            return True
        if text in ("false", "0", "no", "off", ""):
            return False
    return v
