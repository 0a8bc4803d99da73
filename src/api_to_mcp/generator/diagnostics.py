"""Diagnostics reported by the generator.

Nothing the generator encounters in its input is fatal: malformed
configuration, unsupported verbs or return shapes, and loop-guarded routes
all become diagnostics and the affected action is simply skipped.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

logger = logging.getLogger(__name__)


class Severity(StrEnum):
    INFO = "info"
    WARNING = "warning"


@dataclass(frozen=True)
class DiagnosticDescriptor:
    """Static description of one kind of diagnostic."""

    id: str
    title: str
    message_format: str
    severity: Severity

    def create(self, *args: object) -> "Diagnostic":
        return Diagnostic(
            id=self.id,
            title=self.title,
            message=self.message_format.format(*args),
            severity=self.severity,
        )


@dataclass(frozen=True)
class Diagnostic:
    """A single reported condition."""

    id: str
    title: str
    message: str
    severity: Severity

    def __str__(self) -> str:
        return f"{self.id} [{self.severity}] {self.message}"


CONFIG_PARSE_ERROR = DiagnosticDescriptor(
    id="MCP001",
    title="Configuration Parse Error",
    message_format="Failed to parse generator config: {0}",
    severity=Severity.WARNING,
)

UNSUPPORTED_HTTP_METHOD = DiagnosticDescriptor(
    id="MCP002",
    title="Unsupported HTTP Method",
    message_format=(
        "Action '{0}.{1}' uses HTTP method '{2}' which is not enabled. "
        "Enabled methods: {3}."
    ),
    severity=Severity.INFO,
)

UNSUPPORTED_RETURN_TYPE = DiagnosticDescriptor(
    id="MCP003",
    title="Unsupported Return Type",
    message_format="Action '{0}.{1}' has return type '{2}' which is not supported. Skipping.",
    severity=Severity.INFO,
)

MCP_ROUTE_SKIPPED = DiagnosticDescriptor(
    id="MCP004",
    title="MCP Route Skipped",
    message_format="Action '{0}.{1}' was skipped because its route contains '/mcp' (loop prevention).",
    severity=Severity.INFO,
)

NO_CONFIG_FILE = DiagnosticDescriptor(
    id="MCP005",
    title="No Configuration File",
    message_format=(
        "No generator config found. Using default configuration "
        "(SelectedOnly mode with empty include list)."
    ),
    severity=Severity.INFO,
)


def log_diagnostics(diagnostics: Iterable[Diagnostic]) -> None:
    """Log diagnostics at the level matching their severity."""
    for diagnostic in diagnostics:
        level = logging.WARNING if diagnostic.severity == Severity.WARNING else logging.INFO
        logger.log(level, f"{diagnostic.id}: {diagnostic.message}")
