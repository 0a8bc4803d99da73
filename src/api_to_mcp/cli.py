"""Command-line interface for api-to-mcp."""

import logging
import os
from pathlib import Path

import click

from api_to_mcp import __version__
from api_to_mcp.core.config.settings import get_settings
from api_to_mcp.core.mcp.exceptions import DescriptorLoadError
from api_to_mcp.generator.config_parser import load_config
from api_to_mcp.generator.diagnostics import Severity
from api_to_mcp.generator.models import load_descriptors
from api_to_mcp.generator.pipeline import generate, write_generated_package
from api_to_mcp.servers.http.base_url import normalize_binding_address


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else get_settings().application.log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.version_option(version=__version__, prog_name="api-to-mcp")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """api-to-mcp - expose HTTP API endpoints as MCP tools"""
    configure_logging(verbose)


@cli.command()
def info() -> None:
    """Show project information."""
    click.echo(f"api-to-mcp v{__version__}")
    click.echo("api-to-mcp - expose HTTP API endpoints as MCP tools")


@cli.command("generate")
@click.argument(
    "descriptors", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generator config (JSON or YAML); defaults apply when missing",
)
@click.option(
    "--output",
    "-o",
    "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    required=True,
    help="Directory of the generated tools package",
)
@click.option("--dry-run", is_flag=True, help="Report what would be generated without writing")
def generate_tools(
    descriptors: Path, config_path: Path | None, output_dir: Path, dry_run: bool
) -> None:
    """Generate MCP tool modules from endpoint DESCRIPTORS."""
    try:
        endpoints = load_descriptors(descriptors)
    except DescriptorLoadError as e:
        raise click.ClickException(str(e)) from e

    config, config_diagnostics = load_config(config_path)
    result = generate(endpoints, config, config_diagnostics)

    for diagnostic in result.diagnostics:
        click.echo(str(diagnostic), err=diagnostic.severity == Severity.WARNING)

    click.echo(f"🔧 {len(result.tools)} tool(s) from {len(endpoints)} endpoint(s)")
    for tool, module_name in zip(result.tools, result.registry.module_names):
        click.echo(f"   • {tool.tool_name} ({tool.class_name} in {module_name}.py)")

    if dry_run:
        click.echo("Dry run: nothing written")
        return

    report = write_generated_package(result, output_dir)
    click.echo(
        f"✅ {output_dir}: {len(report.written)} written, "
        f"{len(report.unchanged)} unchanged, {len(report.removed)} removed"
    )


@cli.command("normalize-url")
@click.argument("address")
def normalize_url(address: str) -> None:
    """Print ADDRESS with wildcard bind hosts rewritten to localhost."""
    click.echo(normalize_binding_address(address))


@cli.command()
@click.argument("app")
@click.option("--host", help="Bind host (overrides MCP_TOOLS_HOST)")
@click.option("--port", type=int, help="Bind port (overrides MCP_TOOLS_PORT)")
@click.option("--reload", is_flag=True, help="Enable auto-reload")
def serve(app: str, host: str | None, port: int | None, reload: bool) -> None:
    """Run the host ASGI APP (module:attribute) with uvicorn."""
    import uvicorn

    settings = get_settings().mcp_tools
    actual_host = host or settings.host
    actual_port = port or settings.port

    # The app reads these to resolve its self-call address
    settings.host, settings.port = actual_host, actual_port
    os.environ["MCP_TOOLS_HOST"] = actual_host
    os.environ["MCP_TOOLS_PORT"] = str(actual_port)

    click.echo(f"🚀 Starting {app} on http://{actual_host}:{actual_port}")
    click.echo(f"   MCP endpoint: http://{actual_host}:{actual_port}{settings.path}")
    uvicorn.run(app, host=actual_host, port=actual_port, reload=reload)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
