"""
botblocks command line.

Reads a saved editor project (``{"logicBlocks": [...], "flexBlocks": [...]}``)
and runs the compiler on it, or queries the block registry.
"""

import json
import logging
import platform
import sys
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from botblocks._version import get_version
from botblocks.compiler import TargetMode, compile_graph
from botblocks.core.config import BotBlocksConfig, load_config
from botblocks.core.errors import BotBlocksError, CompileError, ConfigError
from botblocks.core.ir import Category, ValidationReport, WorkspaceContext
from botblocks.core.registry import build_registry

app = typer.Typer(
    help="""botblocks - compile LINE bot block projects

Commands:
  • compile: generate the webhook server or the Flex Message document
  • validate: check a project without writing anything
  • blocks, aliases: browse the block registry
""",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

MODES = {"source": TargetMode.SOURCE, "document": TargetMode.DOCUMENT}


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"botblocks {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log compiler fallbacks to stderr"),
) -> None:
    """botblocks main callback for global options."""
    if verbose:
        _configure_logging(logging.DEBUG)


def _configure_logging(level: int) -> None:
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)
    logging.getLogger("botblocks").setLevel(level)


# =============================================================================
# Helpers
# =============================================================================


def _load_project(path: Path) -> tuple[list[Any], list[Any]]:
    """Read logic and flex block lists from a saved project file."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read project {path}: {e.strerror}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Project {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Project {path} must be a JSON object")
    return data.get("logicBlocks", []), data.get("flexBlocks", [])


def _load_config(path: Path | None) -> BotBlocksConfig:
    config = load_config(path)
    if config.path is not None:
        _configure_logging(config.log_level)
    return config


def _print_report(report: ValidationReport) -> None:
    for error in report.errors:
        err_console.print(f"[red]ERROR[/red] {escape(error)}")
    for warning in report.warnings:
        err_console.print(f"[yellow]WARNING[/yellow] {escape(warning)}")


def _parse_mode(mode: str) -> TargetMode:
    if mode not in MODES:
        raise typer.BadParameter(f"expected one of: {', '.join(MODES)}", param_hint="--mode")
    return MODES[mode]


# =============================================================================
# Commands
# =============================================================================


@app.command("compile")
def compile_command(
    project: Path = typer.Argument(..., help="Saved project JSON"),  # noqa: B008
    mode: str = typer.Option("source", "--mode", "-m", help="Output: 'source' or 'document'"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the artifact here"),  # noqa: B008
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to botblocks.toml"),  # noqa: B008
    fail_on_error: bool = typer.Option(False, "--fail-on-error", help="Exit 1 when the report has errors"),
) -> None:
    """Compile a project to a webhook server or a Flex Message document."""
    target = _parse_mode(mode)
    try:
        config = _load_config(config_path)
        logic, flex = _load_project(project)
        result = compile_graph(logic, flex, target, config=config)
        _print_report(result.report)
        if fail_on_error and not result.report.is_valid:
            raise CompileError(f"{len(result.report.errors)} error(s) in {project}")
        if result.artifact is None:
            raise CompileError("The Flex Message document failed validation and was not written")

        if isinstance(result.artifact, str):
            text = result.artifact
        else:
            text = json.dumps(result.artifact, indent=2, ensure_ascii=False) + "\n"
        if output is None:
            typer.echo(text, nl=False)
        else:
            output.write_text(text, encoding="utf-8")
            err_console.print(f"[green]✓[/green] Wrote {escape(str(output))}")
    except BotBlocksError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e


@app.command("validate")
def validate_command(
    project: Path = typer.Argument(..., help="Saved project JSON"),  # noqa: B008
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to botblocks.toml"),  # noqa: B008
) -> None:
    """Check a project and print its errors and warnings."""
    try:
        config = _load_config(config_path)
        logic, flex = _load_project(project)
        report = compile_graph(logic, flex, TargetMode.SOURCE, config=config).report
    except BotBlocksError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e

    _print_report(report)
    if not report.is_valid:
        raise typer.Exit(code=1)
    console.print("[green]OK:[/green] project is valid.")


@app.command("blocks")
def blocks_command(
    category: str | None = typer.Option(None, "--category", help="Block family, e.g. 'reply'"),
    context: str | None = typer.Option(None, "--context", help="Workspace: 'logic' or 'flex'"),
    search: str | None = typer.Option(None, "--search", "-s", help="Free-text or legacy-name search"),
) -> None:
    """List block definitions in the registry."""
    try:
        categories = [Category(category)] if category else None
        workspace = WorkspaceContext(context) if context else None
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    definitions = build_registry().filter(categories=categories, context=workspace, search=search)
    if not definitions:
        console.print("[yellow]No matching blocks[/yellow]")
        raise typer.Exit(code=1)

    table = Table(title="Block definitions")
    table.add_column("Id", style="cyan")
    table.add_column("Category")
    table.add_column("Kind")
    table.add_column("Workspaces")
    table.add_column("Name")
    for definition in definitions:
        table.add_row(
            definition.id,
            definition.category.value,
            definition.kind or "",
            ", ".join(c.value for c in definition.compatibility),
            definition.display_name,
        )
    console.print(table)


@app.command("aliases")
def aliases_command(
    block_type: str = typer.Argument(..., help="Canonical family or historical type string"),
) -> None:
    """Show the historical type strings that migrate to a block type."""
    alias_table = build_registry().aliases
    rule = alias_table.lookup(block_type)
    if rule is not None:
        console.print(f"{escape(block_type)} -> [cyan]{rule.canonical_type}[/cyan] ({rule.kind or 'any kind'})")
        aliases = alias_table.aliases_for(rule.canonical_type, rule.kind)
    else:
        aliases = alias_table.aliases_for(block_type)
        if aliases == [block_type]:
            console.print(f"[yellow]No aliases for '{escape(block_type)}'[/yellow]")
            raise typer.Exit(code=1)

    for alias in aliases:
        console.print(f"  {escape(alias)}")


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


if __name__ == "__main__":
    main(sys.argv[1:])
