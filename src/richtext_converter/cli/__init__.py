from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ..config import AppConfig, apply_settings, dump_config, load_config
from ..core import ConversionError, ConversionService
from ..detection import DetectionError, FormatKind
from ..emitter import emit_list_table_skeleton, emit_preamble
from ..settings import get_settings
from ..utils import atomic_write, output_path_for, read_text
from ..validation import validate as validate_document

console = Console()

app = typer.Typer(help="Detect and convert between plain text, Markdown, HTML and RTF")


def _load_config(path: Path | None) -> AppConfig:
    settings = get_settings()
    return apply_settings(load_config(path or settings.config_path), settings)


def _read_source(file: Path) -> str:
    if not file.is_file():
        console.print(f"[red]No such file[/red]: {file}")
        raise typer.Exit(1)
    return read_text(file)


def _parse_kind(value: str) -> FormatKind:
    try:
        return FormatKind.parse(value)
    except DetectionError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def detect(
    file: Path,
    hint: str | None = typer.Option(None, "--hint", help="Content-type hint, e.g. text/html"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    service = ConversionService(_load_config(config))
    result = service.detect_format(_read_source(file), hint=hint)
    table = Table(title=str(file))
    table.add_column("Format")
    table.add_column("Confidence")
    table.add_row(result.kind.value, f"{result.confidence:.2f}")
    console.print(table)


@app.command()
def convert(
    file: Path,
    to: str = typer.Option(..., "--to", help="Target format"),
    source: str | None = typer.Option(None, "--from", help="Source format (detected when omitted)"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output file; '-' prints to stdout"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    target = _parse_kind(to)
    source_kind = _parse_kind(source) if source else None
    service = ConversionService(_load_config(config))
    try:
        result = service.convert(source_kind, target, _read_source(file))
    except ConversionError as exc:
        console.print(f"[red]Conversion failed[/red]: {exc.code} - {exc}")
        raise typer.Exit(1) from exc
    if output is not None and str(output) == "-":
        typer.echo(result.text, nl=False)
        return
    destination = output or output_path_for(file, target)
    if destination.resolve() == file.resolve():
        console.print(f"[red]Refusing to overwrite the source file[/red]: {file}")
        raise typer.Exit(1)
    atomic_write(destination, result.text)
    status = "[yellow]Unchanged[/yellow]" if result.soft_failure else "[green]Success[/green]"
    console.print(f"{status}: {result.source_format.value} -> {result.target_format.value} ({destination})")
    if result.warnings:
        console.print(f"Warnings: {', '.join(result.warnings)}")


@app.command()
def validate(file: Path) -> None:
    verdict = validate_document(_read_source(file))
    table = Table(title="Structural check")
    table.add_column("Valid")
    table.add_column("Signatures")
    table.add_column("Balance")
    table.add_row("yes" if verdict.is_valid else "no", str(verdict.confidence), str(verdict.balance_delta))
    console.print(table)
    if not verdict.is_valid:
        raise typer.Exit(1)


@app.command()
def preamble(
    lists: bool = typer.Option(False, "--lists", help="Append the bullet list-table skeleton"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    props = _load_config(config).document_properties()
    text = emit_preamble(props)
    if lists:
        text += emit_list_table_skeleton()
    typer.echo(text)


@app.command("config")
def show_config(config: Path | None = typer.Option(None, "--config", help="Path to config.toml")) -> None:
    typer.echo(dump_config(_load_config(config)))


if __name__ == "__main__":
    app()
