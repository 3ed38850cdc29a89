"""Typer CLI entrypoint for the ESI processor."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.table import Table
from typer import BadParameter

from .config import ProcessorConfig, load_config
from .engine import ESIProcessor, ProcessingState, find_include_tags
from .logging_conf import configure_logging

app = typer.Typer(
    help="Resolve <esi:include> directives in HTML documents.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console(stderr=True)


def _parse_headers(values: Optional[list[str]]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for raw in values or []:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise BadParameter(f"Header must look like 'Name: value', got {raw!r}", param_hint="--header")
        headers[name.strip()] = value.strip()
    return headers


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.exists():
        raise BadParameter(f"Input file not found: {source}", param_hint="INPUT")
    return path.read_text(encoding="utf-8")


def build_processor(config: ProcessorConfig) -> ESIProcessor:
    return ESIProcessor(config)


def _render_summary(state: ProcessingState) -> Table:
    table = Table(title="ESI processing", box=box.SIMPLE_HEAD)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="green", justify="right")
    table.add_row("Passes", str(state.passes))
    table.add_row("Included", str(state.included))
    table.add_row("Failed", str(state.failed))
    table.add_row("Dropped (depth)", str(state.dropped))
    return table


@app.command("process", help="Fetch and inline every include directive.")
def process_command(
    source: Annotated[str, typer.Argument(metavar="INPUT", help="HTML file, or '-' for stdin.")],
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Write the result here instead of stdout.")
    ] = None,
    base_url: Annotated[
        Optional[str], typer.Option("--base-url", help="Base URL for relative include sources.")
    ] = None,
    max_depth: Annotated[
        Optional[int], typer.Option("--max-depth", help="Maximum nesting of included fragments.")
    ] = None,
    timeout: Annotated[
        Optional[float], typer.Option("--timeout", help="Per-request timeout in seconds.")
    ] = None,
    no_cache: Annotated[
        bool, typer.Option("--no-cache", help="Do not share concurrent identical requests.")
    ] = False,
    header: Annotated[
        Optional[list[str]],
        typer.Option("--header", "-H", help="Extra request header 'Name: value' (repeatable)."),
    ] = None,
    config_path: Annotated[
        Optional[Path], typer.Option("--config", help="YAML or JSON configuration file.")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging.")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", help="Do not print the summary table.")] = False,
) -> None:
    configure_logging(verbose=verbose)
    headers = _parse_headers(header)
    try:
        config = load_config(
            config_path,
            base_url=base_url,
            max_depth=max_depth,
            timeout=timeout,
            cache=False if no_cache else None,
        )
    except (FileNotFoundError, ValueError, ValidationError) as exc:
        console.print(f"Invalid configuration: {exc}", style="red")
        raise typer.Exit(code=2) from exc

    html = _read_input(source)
    processor = build_processor(config)
    state = ProcessingState()
    result = processor.process_sync(html, headers=headers or None, state=state)

    if output is not None:
        output.write_text(result, encoding="utf-8")
    else:
        typer.echo(result, nl=False)
    if not quiet:
        console.print(_render_summary(state))


@app.command("scan", help="List include directives without fetching them.")
def scan_command(
    source: Annotated[str, typer.Argument(metavar="INPUT", help="HTML file, or '-' for stdin.")],
) -> None:
    html = _read_input(source)
    directives = find_include_tags(html)
    if not directives:
        console.print("No include directives found.", style="dim")
        return
    table = Table(title=f"Include directives · {len(directives)}", box=box.SIMPLE_HEAD)
    table.add_column("Offset", style="cyan", justify="right")
    table.add_column("Form", style="magenta")
    table.add_column("src", style="green", overflow="fold")
    for directive in directives:
        table.add_row(
            str(directive.start),
            directive.form,
            directive.src or "-",
        )
    console.print(table)


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
