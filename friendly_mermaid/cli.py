"""CLI interface."""
from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Optional

import typer

from friendly_mermaid.compiler import compile_source
from friendly_mermaid.compiler.direction import apply_direction
from friendly_mermaid.errors import MalformedLineError
from friendly_mermaid.pipeline import PreviewResult, render_preview
from friendly_mermaid.services.preview_scheduler import PreviewScheduler
from friendly_mermaid.utils.config import settings
from friendly_mermaid.utils.file_utils import ensure_dir, read_text_file

app = typer.Typer(add_completion=False)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")):
    """Write Mermaid diagrams with free-text names."""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _write_outputs(result: PreviewResult, output_name: str) -> Path:
    output_dir = ensure_dir(settings.output_dir)
    base_path = Path(output_dir) / output_name
    mmd_path = base_path.with_suffix(".mmd")
    svg_path = base_path.with_suffix(".svg")
    mmd_path.write_text(result.compiled.code, encoding="utf-8")
    svg_path.write_text(result.svg_text, encoding="utf-8")
    return svg_path


@app.command("compile")
def compile_cmd(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Diagram source file."),
    show_mapping: bool = typer.Option(False, "--show-mapping", help="Print the identifier mapping as JSON."),
    strict: bool = typer.Option(False, "--strict", help="Fail on lines that cannot be translated."),
):
    """Print the Mermaid text a source compiles to."""
    try:
        result = compile_source(read_text_file(str(file)), strict=strict or None)
    except MalformedLineError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
    typer.echo(result.code)
    if show_mapping:
        typer.echo(json.dumps(result.mapping.to_dict(), indent=2, ensure_ascii=False))
    for diagnostic in result.diagnostics:
        typer.echo(f"warning: line {diagnostic.line_no}: {diagnostic.message}", err=True)


@app.command()
def render(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Diagram source file."),
    output_name: Optional[str] = typer.Option(None, "--output-name", help="Defaults to the source file name."),
):
    """Render a source to SVG with display names restored."""
    result = render_preview(read_text_file(str(file)))
    if not result.ok:
        typer.echo(result.error or result.placeholder, err=True)
        raise typer.Exit(code=1)
    svg_path = _write_outputs(result, output_name or file.stem)
    typer.echo(str(svg_path))


@app.command("set-direction")
def set_direction(
    file: Path = typer.Argument(..., exists=True, dir_okay=False),
    direction: str = typer.Argument(..., help="TD, TB, BT, LR, RL or auto."),
):
    """Rewrite the layout direction of a source file."""
    value = None if direction.lower() == "auto" else direction
    try:
        updated = apply_direction(read_text_file(str(file)), value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc))
    file.write_text(updated, encoding="utf-8")


@app.command()
def watch(
    file: Path = typer.Argument(..., exists=True, dir_okay=False),
    output_name: Optional[str] = typer.Option(None, "--output-name"),
    interval: float = typer.Option(0.5, "--interval", help="Polling interval in seconds."),
):
    """Re-render a source file every time it changes."""
    name = output_name or file.stem

    def deliver(result: PreviewResult) -> None:
        if result.ok:
            typer.echo(f"rendered {_write_outputs(result, name)}")
        else:
            typer.echo(result.error or result.placeholder, err=True)

    scheduler = PreviewScheduler(deliver)
    last_mtime = None
    try:
        while True:
            mtime = file.stat().st_mtime
            if mtime != last_mtime:
                last_mtime = mtime
                scheduler.schedule(read_text_file(str(file)))
            time.sleep(interval)
    except KeyboardInterrupt:
        pass
    finally:
        scheduler.close()


if __name__ == "__main__":
    app()
