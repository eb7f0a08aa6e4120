from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import orjson
import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from adapters.excalidraw.repository import FileSystemExcalidrawRepository
from adapters.filesystem.json_utils import write_bytes_atomic
from app.config import load_settings
from app.render_wiring import build_exporter
from app.web_main import create_app
from domain.errors import RenderError
from domain.models import DEFAULT_PADDING, ExcalidrawDocument, Scene, is_skipped
from domain.services.compute_bounds import compute_bounds

app = typer.Typer(no_args_is_help=True)
console = Console()


def _load_document(input_path: Path) -> ExcalidrawDocument:
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)
    try:
        return FileSystemExcalidrawRepository().load(input_path)
    except orjson.JSONDecodeError as exc:
        console.print(f"[red]Invalid JSON in {input_path}:[/] {exc}")
        raise typer.Exit(code=1) from exc


def default_output_path(input_path: Path, fmt: str) -> Path:
    target = input_path.with_suffix(f".{fmt.lower()}")
    if target == input_path:
        target = input_path.with_name(f"{input_path.stem}.export.{fmt.lower()}")
    return target


@app.command("render")
def render(
    input_path: Path = typer.Argument(..., help="Excalidraw scene file (.excalidraw or .json)."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Where to write the result."),
    fmt: str = typer.Option("png", "--format", "-f", help="png, svg or json."),
    scale: Optional[float] = typer.Option(None, help="Export scale for png output."),
    padding: Optional[float] = typer.Option(None, help="Padding around the scene."),
    engine: Optional[str] = typer.Option(None, help="png engine: raster or browser."),
    config: Optional[Path] = typer.Option(None, help="YAML settings file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    settings = load_settings(config)
    updates: dict[str, object] = {}
    if padding is not None:
        updates["padding"] = padding
    if engine is not None:
        if engine not in {"raster", "browser"}:
            console.print(f"[red]Unknown engine:[/] {engine}")
            raise typer.Exit(code=1)
        updates["png_engine"] = engine
    if updates:
        settings = settings.model_copy(
            update={"render": settings.render.model_copy(update=updates)}
        )

    document = _load_document(input_path)
    request = document.to_request(
        format=fmt, scale=scale if scale is not None else settings.render.default_scale
    )
    try:
        rendered = build_exporter(settings).export(request)
    except RenderError as exc:
        console.print(f"[red]Render failed ({exc.kind}):[/] {exc.message}")
        raise typer.Exit(code=1) from exc

    target_path = output or default_output_path(input_path, rendered.format)
    write_bytes_atomic(target_path, rendered.content)
    console.print(f"[green]Wrote[/] {target_path} ({len(rendered.content)} bytes)")


@app.command("bounds")
def bounds(
    input_path: Path = typer.Argument(..., help="Excalidraw scene file."),
    padding: float = typer.Option(DEFAULT_PADDING, help="Padding around the scene."),
) -> None:
    document = _load_document(input_path)
    try:
        scene = Scene.from_payload(document.elements, document.app_state)
        result = compute_bounds(scene.elements, padding)
    except RenderError as exc:
        console.print(f"[red]{exc.message}[/]")
        raise typer.Exit(code=1) from exc

    table = Table(title=str(input_path))
    table.add_column("width")
    table.add_column("height")
    table.add_column("offset_x")
    table.add_column("offset_y")
    table.add_row(
        f"{result.width:g}", f"{result.height:g}", f"{result.offset_x:g}", f"{result.offset_y:g}"
    )
    console.print(table)


@app.command("validate")
def validate(input_path: Path = typer.Argument(..., help="Excalidraw scene file to validate.")) -> None:
    document = _load_document(input_path)
    try:
        scene = Scene.from_payload(document.elements, document.app_state)
    except RenderError as exc:
        console.print(f"[red]Validation failed:[/] {exc.message}")
        raise typer.Exit(code=1) from exc
    visible = [element for element in scene.elements if not is_skipped(element)]
    console.print(
        f"[green]Valid scene:[/] {input_path} "
        f"({len(visible)} visible of {len(scene.elements)} elements)"
    )


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(8000, help="Port to listen on."),
    config: Optional[Path] = typer.Option(None, help="YAML settings file."),
    log_level: str = typer.Option("info", help="uvicorn log level."),
) -> None:
    settings = load_settings(config)
    uvicorn.run(create_app(settings), host=host, port=port, log_level=log_level)


if __name__ == "__main__":
    app()
