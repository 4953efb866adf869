"""yarnflow CLI - typer application entry point."""

from __future__ import annotations

import atexit
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from yarnflow.config import (
    CONFIG_FILENAME,
    ConfigError,
    ProjectConfig,
    find_config,
    load_config,
    write_default_config,
)
from yarnflow.formats import (
    FormatError,
    GraphFormat,
    JsonFormat,
    format_for_path,
    get_format,
    load_script,
    loads_graph,
    save_script,
)
from yarnflow.graph import GraphIntegrityError, check_graph, expand
from yarnflow.observability import (
    LOG_FILENAME,
    close_file_logging,
    configure_logging,
    get_logger,
    get_logs_dir,
)

if TYPE_CHECKING:
    from yarnflow.formats.base import ScriptFormat

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="yarnflow",
    help="yarnflow: convert and validate branching dialogue scripts.",
    no_args_is_help=True,
)
console = Console()

DEFAULT_LOGS_DIR = Path("logs")
TEXT_PREVIEW_LEN = 60

# Global state set by the callback, used by commands
_config_path: Path | None = None

log = get_logger(__name__)


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    log_to_file: Annotated[
        bool,
        typer.Option(
            "--log",
            help="Enable file logging to ./logs/debug.jsonl.",
        ),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help=f"Config file (default: ./{CONFIG_FILENAME} if present).",
            envvar="YARNFLOW_CONFIG",
        ),
    ] = None,
) -> None:
    """yarnflow: convert and validate branching dialogue scripts."""
    global _config_path
    _config_path = config

    configure_logging(verbosity=verbose, log_to_file=log_to_file, log_dir=DEFAULT_LOGS_DIR)
    logs_dir = get_logs_dir()
    if logs_dir is not None:
        atexit.register(close_file_logging)
        log.info("file_logging_enabled", path=str(logs_dir / LOG_FILENAME))


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]Error:[/red] {escape(message)}")
    return typer.Exit(1)


def _load_config() -> ProjectConfig:
    try:
        if _config_path is not None:
            return load_config(_config_path)
        return find_config(Path.cwd())
    except ConfigError as e:
        raise _fail(str(e)) from e


def _handler(path: Path, format_name: str | None, config: ProjectConfig) -> ScriptFormat:
    """Pick a format handler and apply config settings to it."""
    try:
        handler = get_format(format_name) if format_name else format_for_path(path)
    except ValueError as e:
        raise _fail(str(e)) from e

    if isinstance(handler, JsonFormat):
        return JsonFormat(indent=config.json_indent)
    if isinstance(handler, GraphFormat):
        return GraphFormat(layout=config.layout.to_layout(), indent=config.json_indent)
    return handler


def _report_error(error: Exception) -> typer.Exit:
    if isinstance(error, GraphIntegrityError):
        console.print(escape(error.to_feedback()))
    return _fail(str(error))


def _preview(text: str) -> str:
    flat = text.replace("\n", " ")
    if len(flat) > TEXT_PREVIEW_LEN:
        return flat[: TEXT_PREVIEW_LEN - 3] + "..."
    return flat


@app.command()
def version() -> None:
    """Show version information."""
    from yarnflow import __version__

    console.print(f"yarnflow v{__version__}")


@app.command()
def init(
    directory: Annotated[
        Path,
        typer.Argument(help="Directory to create the config in (default: current)."),
    ] = Path(),
) -> None:
    """Write a default yarnflow.yaml."""
    try:
        config_path = write_default_config(directory)
    except FileExistsError as e:
        raise _fail(f"'{e.args[0]}' already exists") from e

    console.print(f"[green]✓[/green] Created config: [bold]{escape(str(config_path))}[/bold]")


@app.command()
def convert(
    source: Annotated[Path, typer.Argument(help="Script to read (.json, .yarn, .graph.json).")],
    dest: Annotated[Path, typer.Argument(help="File to write.")],
    from_format: Annotated[
        str | None,
        typer.Option("--from", help="Input format (default: from the source suffix)."),
    ] = None,
    to_format: Annotated[
        str | None,
        typer.Option("--to", help="Output format (default: from the destination suffix)."),
    ] = None,
) -> None:
    """Convert a dialogue between JSON, Yarn text and editor graph formats."""
    config = _load_config()
    reader = _handler(source, from_format, config)
    writer = _handler(dest, to_format, config)

    try:
        script = reader.loads(source.read_text(encoding="utf-8"))
        save_script(script, dest, handler=writer)
    except (FormatError, GraphIntegrityError, OSError) as e:
        raise _report_error(e) from e

    console.print(
        f"[green]✓[/green] Wrote {len(script)} node(s) to [bold]{escape(str(dest))}[/bold] "
        f"({writer.format_name})"
    )


@app.command()
def validate(
    source: Annotated[Path, typer.Argument(help="Script or graph to check.")],
    start: Annotated[
        str | None,
        typer.Option("--start", "-s", help="Start node id (default: from config)."),
    ] = None,
) -> None:
    """Check that the dialogue is well-formed and has a way to end."""
    config = _load_config()
    start_id = start or config.effective_start_node

    try:
        if isinstance(format_for_path(source), GraphFormat):
            graph = loads_graph(source.read_text(encoding="utf-8"))
        else:
            graph = expand(load_script(source), layout=config.layout.to_layout(), strict=False)
    except (FormatError, GraphIntegrityError, OSError, ValueError) as e:
        raise _report_error(e) from e

    report = check_graph(graph, start_id)

    table = Table(title=f"Validation: {escape(source.name)} (start: {escape(start_id)})")
    table.add_column("Check", style="cyan")
    table.add_column("Result", style="bold")
    table.add_column("Details")

    icons = {
        "pass": "[green]✓[/green] pass",
        "warn": "[yellow]![/yellow] warn",
        "fail": "[red]✗[/red] fail",
    }
    for check in report.checks:
        table.add_row(check.name, icons[check.severity], escape(check.message))

    console.print()
    console.print(table)
    console.print(f"Summary: {report.summary}")
    log.info("graph_validated", source=str(source), summary=report.summary)

    if report.has_failures:
        raise typer.Exit(1)


@app.command()
def inspect(
    source: Annotated[Path, typer.Argument(help="Script to list.")],
) -> None:
    """List the nodes of a dialogue."""
    try:
        script = load_script(source)
    except (FormatError, GraphIntegrityError, OSError, ValueError) as e:
        raise _report_error(e) from e

    table = Table(title=f"Nodes: {escape(source.name)}")
    table.add_column("Id", style="cyan")
    table.add_column("Speaker")
    table.add_column("Text", style="dim")
    table.add_column("Next")

    for node in script:
        if node.choices:
            flow = "\n".join(f"{c.text} → {c.next}" for c in node.choices)
        elif node.next is not None:
            flow = f"→ {node.next}"
        else:
            flow = "(end)"
        table.add_row(
            escape(node.id),
            escape(node.speaker),
            escape(_preview(node.text)),
            escape(flow),
        )

    console.print()
    console.print(table)
    console.print(f"{len(script)} node(s)")
