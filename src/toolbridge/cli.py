"""CLI entry point for toolbridge."""

from __future__ import annotations

import asyncio
import json
import logging

import typer
from rich.console import Console
from rich.table import Table

from toolbridge.catalog import ToolCatalog, ToolDefinition
from toolbridge.config import ToolbridgeConfig
from toolbridge.tool.base import ToolResult
from toolbridge.tool.bridge import ToolBridge
from toolbridge.tool.registry import Invocation, ToolRegistry

app = typer.Typer(
    name="toolbridge",
    help="Run client tool definitions through the local mcporter CLI.",
    no_args_is_help=True,
)

console = Console()


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_config(config_file: str | None, catalog: str | None) -> ToolbridgeConfig:
    config = ToolbridgeConfig.load(config_file)
    if catalog:
        config.catalog.default_client_tools_path = catalog
    return config


@app.command()
def tools(
    catalog: str | None = typer.Option(
        None, "--catalog", help="Client tools JSON file (default: from env/config)."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path."
    ),
) -> None:
    """List the client tools in the catalog."""
    setup_logging(verbose)
    config = _load_config(config_file, catalog)
    loader = ToolCatalog(config.catalog)

    definitions = asyncio.run(loader.load_tools())
    if definitions is None:
        typer.echo(f"No client tools loaded from {loader.path}", err=True)
        raise typer.Exit(1)

    table = Table(title=f"Client tools ({loader.path})")
    table.add_column("Name", style="bold")
    table.add_column("Description")
    for definition in definitions:
        table.add_row(definition.name, definition.description)
    console.print(table)


@app.command()
def call(
    tool: str = typer.Argument(help="Name of the tool to call."),
    args: str = typer.Option("{}", "--args", "-a", help="Tool parameters as JSON."),
    mcporter_config: str | None = typer.Option(
        None, "--mcporter-config", help="mcporter config file passed as --config."
    ),
    timeout_ms: int | None = typer.Option(
        None, "--timeout-ms", help="Call timeout in milliseconds (0 disables)."
    ),
    catalog: str | None = typer.Option(
        None, "--catalog", help="Client tools JSON file (default: from env/config)."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path."
    ),
) -> None:
    """Call one tool through mcporter and print its result payload."""
    setup_logging(verbose)
    config = _load_config(config_file, catalog)
    if mcporter_config:
        config.bridge.config_path = mcporter_config
    if timeout_ms is not None:
        config.bridge.timeout_ms = timeout_ms

    try:
        params = json.loads(args)
    except json.JSONDecodeError as e:
        typer.echo(f"Error: --args is not valid JSON: {e}", err=True)
        raise typer.Exit(2)

    result = asyncio.run(_run_call(config, tool, params))
    console.print_json(result.to_content())
    if result.is_error:
        raise typer.Exit(1)


async def _run_call(config: ToolbridgeConfig, tool: str, params: object) -> ToolResult:
    """Bridge the catalog (or an ad-hoc definition) and dispatch one call."""
    definitions = list(await ToolCatalog(config.catalog).load_tools() or [])
    if not any(d.name == tool for d in definitions):
        definitions.append(ToolDefinition.model_validate({"function": {"name": tool}}))

    registry = ToolRegistry()
    registry.register_many(ToolBridge(config.bridge).bridge(definitions))
    return await registry.dispatch(Invocation(tool_name=tool, params=params))


if __name__ == "__main__":
    app()
