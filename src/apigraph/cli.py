"""CLI interface for apigraph using Typer framework."""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from apigraph import __description__, __version__
from apigraph.config import ApigraphConfig, LogLevel, load_config
from apigraph.graph import CompiledGraph, GraphSession, JsonRenderer, MermaidRenderer, compile_document, graph_to_dict
from apigraph.graph.framework import GraphRenderer
from apigraph.layout import LayoutError
from apigraph.loader import DocumentLoadError, load_document
from apigraph.validation import ValidationFramework, ValidationResult, ValidationStatus

app = typer.Typer(
    name="apigraph",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()

_LOG_LEVELS = {
    LogLevel.ERROR.value: logging.ERROR,
    LogLevel.WARN.value: logging.WARNING,
    LogLevel.INFO.value: logging.INFO,
    LogLevel.DEBUG.value: logging.DEBUG,
}


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"apigraph version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """apigraph - Collapsible node/edge graphs of API descriptions."""


def _setup_logging(config: ApigraphConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else _LOG_LEVELS.get(config.logging.level, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load(spec: Path, config_path: Optional[Path], verbose: bool) -> tuple[ApigraphConfig, dict]:
    """Load configuration and document, exiting with an error message on failure."""
    try:
        apigraph_config = load_config(config_path)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    _setup_logging(apigraph_config, verbose)

    try:
        document = load_document(spec)
    except DocumentLoadError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    return apigraph_config, document


def _select_renderer(format: str, apigraph_config: ApigraphConfig, cluster: bool) -> GraphRenderer:
    renderers: list[GraphRenderer] = [
        JsonRenderer(),
        MermaidRenderer(
            direction=apigraph_config.layout.direction,
            cluster_by_top_level=cluster or apigraph_config.view.cluster_by_top_level,
        ),
    ]
    for renderer in renderers:
        if renderer.format_name == format:
            return renderer

    valid_formats = [renderer.format_name for renderer in renderers]
    console.print(f"[red]Error:[/red] Invalid format '{format}'. Must be one of: {', '.join(valid_formats)}")
    raise typer.Exit(1)


def _write_output(rendered: str, out: Optional[Path], spec: Path, renderer: GraphRenderer) -> None:
    """Write to ``out`` (a file, or a directory that gets ``<spec stem><extension>``) or stdout."""
    if out:
        output_file = out.resolve()
        if output_file.is_dir():
            output_file = output_file / f"{spec.stem}{renderer.get_file_extension()}"
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(rendered)
        console.print(f"[green]Graph written:[/green] {output_file}", highlight=False)
    else:
        typer.echo(rendered)


@app.command()
def graph(
    spec: Annotated[
        Path,
        typer.Argument(help="API description file (JSON or YAML)")
    ],
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: json, mermaid (default: json)")
    ] = "json",
    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Output file or directory (default: stdout)")
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .apigraph.json)")
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging")
    ] = False,
) -> None:
    """Compile the full graph (every node, no collapse)."""
    apigraph_config, document = _load(spec, config, verbose)
    renderer = _select_renderer(format, apigraph_config, cluster=False)

    if isinstance(renderer, JsonRenderer):
        compiled = compile_document(document, apigraph_config.compiler)
        _write_output(json.dumps(graph_to_dict(compiled), indent=2, ensure_ascii=False), out, spec, renderer)
        return

    session = GraphSession(apigraph_config)
    try:
        session.load_document(document)
        rendered = renderer.render(session.expand_all())
    except LayoutError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    _write_output(rendered, out, spec, renderer)


@app.command()
def view(
    spec: Annotated[
        Path,
        typer.Argument(help="API description file (JSON or YAML)")
    ],
    expand: Annotated[
        Optional[list[str]],
        typer.Option("--expand", "-e", help="Toggle a collapsed path node open (repeatable)")
    ] = None,
    collapse: Annotated[
        Optional[list[str]],
        typer.Option("--collapse", help="Toggle an expanded path node closed (repeatable)")
    ] = None,
    expand_all: Annotated[
        bool,
        typer.Option("--expand-all", help="Start with every path node expanded")
    ] = False,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: json, mermaid (default: json)")
    ] = "json",
    cluster: Annotated[
        bool,
        typer.Option("--cluster", help="Group Mermaid nodes by top-level path")
    ] = False,
    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Output file or directory (default: stdout)")
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .apigraph.json)")
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging")
    ] = False,
) -> None:
    """Render the visible, laid out subgraph for a collapse state."""
    apigraph_config, document = _load(spec, config, verbose)
    renderer = _select_renderer(format, apigraph_config, cluster)

    session = GraphSession(apigraph_config)
    try:
        session.load_document(document)
        if expand_all:
            session.expand_all()

        for node_id in expand or []:
            current = session.view
            if node_id in current.graph.node_index and not current.is_collapsed(node_id):
                continue
            session.toggle(node_id)
        for node_id in collapse or []:
            current = session.view
            if node_id in current.graph.node_index and current.is_collapsed(node_id):
                continue
            session.toggle(node_id)

        rendered = renderer.render(session.view)
    except LayoutError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    _write_output(rendered, out, spec, renderer)


@app.command()
def check(
    spec: Annotated[
        Path,
        typer.Argument(help="API description file (JSON or YAML)")
    ],
    rule: Annotated[
        Optional[list[str]],
        typer.Option("--rule", "-r", help="Run only this rule (repeatable, default: all)")
    ] = None,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json (default: table)")
    ] = "table",
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .apigraph.json)")
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging")
    ] = False,
) -> None:
    """Validate the compiled graph's invariants."""
    valid_formats = ["table", "json"]
    if format not in valid_formats:
        console.print(f"[red]Error:[/red] Invalid format '{format}'. Must be one of: {', '.join(valid_formats)}")
        raise typer.Exit(1)

    apigraph_config, document = _load(spec, config, verbose)

    compiled = compile_document(document, apigraph_config.compiler)

    framework = ValidationFramework()
    framework.create_default_rules()
    try:
        result = framework.validate(compiled, only=rule or None)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if format == "json":
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _print_check_table(compiled, result)

    if result.exit_code:
        raise typer.Exit(result.exit_code)


def _print_check_table(compiled: CompiledGraph, result: ValidationResult) -> None:
    console.print(f"[green]OK[/green] Graph with {len(compiled.nodes)} nodes and {len(compiled.edges)} edges")

    if result.counters:
        counter_table = Table(title="Counters")
        counter_table.add_column("Metric", style="cyan")
        counter_table.add_column("Count", justify="right")
        for key, value in sorted(result.counters.items()):
            counter_table.add_row(key.replace("_", " ").title(), str(value))
        console.print(counter_table)

    if result.issues:
        table = Table(title="Validation Issues")
        table.add_column("Severity")
        table.add_column("Rule", style="cyan")
        table.add_column("Message")
        table.add_column("Location", style="dim")

        for issue in result.issues:
            color = "red" if issue.severity == ValidationStatus.FAIL else "yellow"
            table.add_row(
                f"[{color}]{issue.severity.value.upper()}[/{color}]",
                issue.rule,
                issue.message,
                issue.node_id or "",
            )
        console.print(table)

    status_color = {"pass": "green", "warn": "yellow", "fail": "red"}[result.status.value]
    console.print(f"Status: [{status_color}]{result.status.value.upper()}[/{status_color}]")


if __name__ == "__main__":
    app()
