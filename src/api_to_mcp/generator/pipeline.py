"""End-to-end generation: descriptors and policy in, tool modules out."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from api_to_mcp.generator.diagnostics import Diagnostic, log_diagnostics
from api_to_mcp.generator.emitter import (
    GENERATED_HEADER,
    GENERATED_MARKER,
    GeneratedTool,
    emit_tool,
)
from api_to_mcp.generator.models import EndpointDescriptor, GeneratorConfig
from api_to_mcp.generator.registration import (
    REGISTRY_MODULE,
    ToolRegistry,
    emit_registry,
    module_name_for,
    resolve_class_names,
)
from api_to_mcp.generator.selection import select_actions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    """Output of one generation pass."""

    tools: tuple[GeneratedTool, ...]
    registry: ToolRegistry
    diagnostics: tuple[Diagnostic, ...] = ()

    def files(self) -> dict[str, str]:
        """Relative file name to source text for the generated package."""
        files = {
            "__init__.py": _package_init(),
            f"{REGISTRY_MODULE}.py": self.registry.source,
        }
        for tool, module_name in zip(self.tools, self.registry.module_names):
            files[f"{module_name}.py"] = tool.source
        return files


@dataclass
class WriteReport:
    written: list[Path] = field(default_factory=list)
    unchanged: list[Path] = field(default_factory=list)
    removed: list[Path] = field(default_factory=list)


def _package_init() -> str:
    return (
        f"{GENERATED_HEADER}"
        f"from .{REGISTRY_MODULE} import TOOL_TYPES\n"
        "\n"
        '__all__ = ["TOOL_TYPES"]\n'
    )


def generate(
    descriptors: Iterable[EndpointDescriptor],
    config: GeneratorConfig | None = None,
    diagnostics: Iterable[Diagnostic] = (),
) -> GenerationResult:
    """Run selection, emission and registration.

    The pass has no side effects and returns identical output for identical
    input, so it can be re-run as often as the build wants.

    Args:
        descriptors: Endpoint actions reported by the extractor
        config: Selection and naming policy (defaults when None)
        diagnostics: Diagnostics already raised while loading the policy

    Returns:
        GenerationResult with one tool per selected action and the registry
    """
    config = config or GeneratorConfig()
    selected, selection_diagnostics = select_actions(descriptors, config)

    class_names = resolve_class_names(selected)
    taken: set[str] = set()
    module_names = [module_name_for(name, taken) for name in class_names]
    tools = tuple(
        emit_tool(action, config, class_name)
        for action, class_name in zip(selected, class_names)
    )
    registry = emit_registry(class_names, module_names)

    all_diagnostics = (*diagnostics, *selection_diagnostics)
    logger.info(f"Generated {len(tools)} tool(s) from {len(selected)} selected action(s)")
    return GenerationResult(tools=tools, registry=registry, diagnostics=all_diagnostics)


def _is_generated(path: Path) -> bool:
    try:
        with path.open(encoding="utf-8") as f:
            return f.readline().rstrip("\n") == GENERATED_MARKER
    except (OSError, UnicodeDecodeError):
        return False


def write_generated_package(result: GenerationResult, output_dir: Path | str) -> WriteReport:
    """Write the generated package, touching only files whose content changed.

    Modules carrying the generated-file header that are no longer produced
    are removed. Hand-written files in the directory are left alone.
    """
    output = Path(output_dir)
    output.mkdir(parents=True, exist_ok=True)
    report = WriteReport()

    files = result.files()
    for file_name, source in files.items():
        path = output / file_name
        if path.is_file() and path.read_text(encoding="utf-8") == source:
            report.unchanged.append(path)
            continue
        path.write_text(source, encoding="utf-8")
        report.written.append(path)
        logger.debug(f"Wrote {path}")

    for path in sorted(output.glob("*.py")):
        if path.name not in files and _is_generated(path):
            path.unlink()
            report.removed.append(path)
            logger.debug(f"Removed stale generated module {path}")

    logger.info(
        f"Generated package at {output}: {len(report.written)} written, "
        f"{len(report.unchanged)} unchanged, {len(report.removed)} removed"
    )
    return report


def run(
    descriptors: Iterable[EndpointDescriptor],
    config: GeneratorConfig,
    output_dir: Path | str,
    diagnostics: Iterable[Diagnostic] = (),
) -> tuple[GenerationResult, WriteReport]:
    """Generate, log diagnostics, and write the package."""
    result = generate(descriptors, config, diagnostics)
    log_diagnostics(result.diagnostics)
    return result, write_generated_package(result, output_dir)
