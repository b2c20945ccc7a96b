"""
CLI entry point for render-redact.

Commands:
    render-redact render <file>    - Render a JSON or YAML document
    render-redact demo             - Render the built-in sample structures
    render-redact config           - Manage configuration
    render-redact version          - Show version information
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import typer
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from render_redact.config.settings import DEFAULT_CONFIG, get_config_file, load_options
from render_redact.marshaller import Marshaller
from render_redact.protocol.types import ConfigurationError, MaskDirection
from render_redact.registry.formatters import discover_type_formatters

app = typer.Typer(
    name="render-redact",
    help="Deterministic value rendering with field-level redaction",
    no_args_is_help=True,
)
console = Console()


def _load_document(path: Path) -> Any:
    """Parse a JSON or YAML document, choosing by file extension."""
    text = path.read_text()
    if path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def _build_marshaller(config_file: Path | None, **overrides: Any) -> Marshaller:
    options = load_options(config_file, **overrides)
    return Marshaller(options).with_type_formatters(discover_type_formatters())


@app.command()
def render(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON or YAML file"),
    redact: bool = typer.Option(False, "--redact", "-r", help="Mask every value"),
    mask_char: str | None = typer.Option(None, "--mask-char", help="Masking character"),
    mask_length: int | None = typer.Option(
        None, "--mask-length", help="Characters to mask (negative masks all)"
    ),
    reverse: bool = typer.Option(False, "--reverse", help="Mask the trailing characters"),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="Configuration file"),
) -> None:
    """Render a JSON or YAML document.

    Documents carry no field annotations, so --redact masks every value.
    """
    try:
        marshaller = _build_marshaller(
            config_file,
            masking_char=mask_char,
            masking_length=mask_length,
            masking_direction=MaskDirection.SUFFIX if reverse else None,
        )
        document = _load_document(path)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)
    except (json.JSONDecodeError, yaml.YAMLError, OSError) as e:
        console.print(f"[red]Cannot read {path}:[/red] {e}")
        sys.exit(1)

    text = marshaller.mask(document) if redact else marshaller.render(document)
    typer.echo(text)


@app.command()
def demo(
    redact: bool = typer.Option(False, "--redact", "-r", help="Apply redaction directives"),
) -> None:
    """Render the built-in sample structures."""
    from render_redact.cli.demo import (
        build_account,
        build_chain,
        build_recursive,
        format_datetime,
    )

    marshaller = Marshaller().with_type_formatter("datetime.datetime", format_datetime)
    samples = [
        ("Chain", build_chain(), False),
        ("Account", build_account(), False),
        ("Recursive message", build_recursive(), True),
    ]
    for title, value, is_message in samples:
        if is_message:
            text = marshaller.redact_message(value) if redact else marshaller.render_message(value)
        else:
            text = marshaller.redact(value) if redact else marshaller.render(value)
        console.print(Panel(Text(text), title=title, border_style="blue"))


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    init: bool = typer.Option(False, "--init", help="Initialize default configuration"),
) -> None:
    """Manage render-redact configuration."""
    config_file = get_config_file()
    config_dir = config_file.parent

    if show:
        try:
            options = load_options()
        except ConfigurationError as e:
            console.print(f"[red]Configuration error:[/red] {e}")
            sys.exit(1)
        table = Table(title="Effective Options")
        table.add_column("Option", style="cyan")
        table.add_column("Value")
        for name in (
            "redact_tag",
            "replacement_placeholder",
            "recursion_placeholder",
            "masking_char",
            "masking_length",
            "masking_direction",
        ):
            value = getattr(options, name)
            table.add_row(name, str(value.value if isinstance(value, MaskDirection) else value))
        console.print(table)
        if not config_file.exists():
            console.print("[yellow]No configuration file found.[/yellow]")
            console.print(f"Run 'render-redact config --init' to create one at {config_file}")
        return

    if init:
        config_dir.mkdir(parents=True, exist_ok=True)
        config_file.write_text(DEFAULT_CONFIG)
        console.print(f"[green]Created configuration at {config_file}[/green]")
        return

    console.print("Usage: render-redact config [--show | --init]")


@app.command()
def version() -> None:
    """Show version information."""
    from render_redact import __version__

    console.print(f"render-redact v{__version__}")


if __name__ == "__main__":
    app()
