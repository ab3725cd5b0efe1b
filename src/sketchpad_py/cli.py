"""Command line interface for sketchpad-py.

Inspect, render and edit saved drawings, and replay recorded pointer events
through the drawing engine.
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import rich_click as click
from rich.console import Console
from rich.table import Table

from sketchpad_py.config import SketchpadConfig
from sketchpad_py.core.engine import DrawingEngine
from sketchpad_py.core.logging import bind_session, configure_logging
from sketchpad_py.core.models import Point
from sketchpad_py.core.serialization import dumps_document, loads_document
from sketchpad_py.core.types import ElementType, RequestKind, ShapeType
from sketchpad_py.exceptions import SketchpadError
from sketchpad_py.services.export import ExportService
from sketchpad_py.services.imports import ImageImportService

if TYPE_CHECKING:
    from collections.abc import Generator

    from sketchpad_py.core.models import DrawingElement

console = Console()
err_console = Console(stderr=True)


@contextmanager
def handle_errors() -> Generator[None, None, None]:
    """Turn sketchpad errors into a red message and exit status 1."""
    try:
        yield
    except SketchpadError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc


def read_document(path: Path) -> list[DrawingElement]:
    """Read a saved drawing; a missing file is an empty drawing."""
    if not path.exists():
        return []
    return loads_document(path.read_text(encoding="utf-8"))


def write_document(path: Path, elements: list[DrawingElement] | tuple[DrawingElement, ...]) -> None:
    """Write a drawing to ``path`` as indented JSON."""
    path.write_text(dumps_document(elements, indent=2), encoding="utf-8")


def describe(element: DrawingElement) -> str:
    """One-line human description of an element."""
    if element.element_type == ElementType.PATH:
        return f"{len(element.points)} points, {element.color}, width {element.stroke_width:g}"
    if element.element_type == ElementType.SHAPE:
        start, end = element.start_point, element.end_point
        if element.shape_type == ShapeType.TEXT:
            return f"{element.text!r} at ({start.x:g}, {start.y:g})"
        return f"({start.x:g}, {start.y:g}) -> ({end.x:g}, {end.y:g}), {element.color}"
    return (
        f"{element.width:g}x{element.height:g} at ({element.position.x:g}, {element.position.y:g}), "
        f"original {element.original_width:g}x{element.original_height:g}"
    )


@click.group(name="sketchpad", help="Inspect, render and edit sketchpad drawings.")
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, default=False, help="Emit logs as JSON")
@click.pass_context
def cli(ctx: click.Context, debug: bool, json_logs: bool) -> None:
    """Inspect, render and edit sketchpad drawings."""
    config = SketchpadConfig()
    config.debug = config.debug or debug
    config.json_logs = config.json_logs or json_logs
    configure_logging(debug=config.debug, json_logs=config.json_logs)
    bind_session()
    ctx.obj = config


@cli.command(name="info", help="List the elements of a drawing.")
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def info(document: Path) -> None:
    """List the elements of a drawing."""
    with handle_errors():
        elements = read_document(document)

    table = Table(title=f"{document.name} ({len(elements)} elements)")
    table.add_column("#", style="dim", justify="right")
    table.add_column("ID", style="dim")
    table.add_column("Type", style="cyan")
    table.add_column("Kind", style="yellow")
    table.add_column("Details", style="green")

    for index, element in enumerate(elements):
        kind = element.shape_type.value if element.element_type == ElementType.SHAPE else "-"
        table.add_row(str(index), str(element.id)[:8] + "...", element.element_type.value, kind, describe(element))

    console.print(table)


@cli.command(name="render", help="Render a drawing to a PNG flattened onto white.")
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Output PNG file")
@click.option("--width", "-w", type=int, default=None, help="Canvas width")
@click.option("--height", "-h", type=int, default=None, help="Canvas height")
@click.option("--scale", "-s", type=float, default=1.0, help="Scale factor")
@click.pass_obj
def render(
    config: SketchpadConfig,
    document: Path,
    output: Path | None,
    width: int | None,
    height: int | None,
    scale: float,
) -> None:
    """Render a drawing to a PNG flattened onto white."""
    service = ExportService()
    with handle_errors():
        elements = read_document(document)
    target = output or document.with_name(service.export_filename())
    png = service.to_png(
        elements,
        width or config.canvas_width,
        height or config.canvas_height,
        scale=scale,
    )
    target.write_bytes(png)
    console.print(f"[green]Rendered[/green] {len(elements)} elements to {target}")


@cli.command(name="svg", help="Export a drawing to SVG.")
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), required=True, help="Output SVG file")
@click.option("--width", "-w", type=int, default=None, help="Canvas width")
@click.option("--height", "-h", type=int, default=None, help="Canvas height")
@click.pass_obj
def svg(config: SketchpadConfig, document: Path, output: Path, width: int | None, height: int | None) -> None:
    """Export a drawing to SVG."""
    with handle_errors():
        elements = read_document(document)
    markup = ExportService().to_svg(elements, width or config.canvas_width, height or config.canvas_height)
    output.write_text(markup, encoding="utf-8")
    console.print(f"[green]Exported[/green] {len(elements)} elements to {output}")


@cli.command(name="add-image", help="Import an image into a drawing (downscaled to the import bound).")
@click.argument("document", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("image", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--x", "x", type=float, default=0.0, help="Left edge of the placed image")
@click.option("--y", "y", type=float, default=0.0, help="Top edge of the placed image")
@click.pass_obj
def add_image(config: SketchpadConfig, document: Path, image: Path, x: float, y: float) -> None:
    """Import an image into a drawing."""
    service = ImageImportService()
    engine = DrawingEngine(config, import_service=service)
    with handle_errors():
        engine.load(read_document(document))
        imported = service.downscale(service.load_file(image), config.max_import_width, config.max_import_height)
        element = engine.add_image(Point(x, y), imported)
    write_document(document, engine.elements)
    console.print(f"[green]Added[/green] {image.name} as {element.width:g}x{element.height:g} to {document}")


def _point(event: dict[str, Any]) -> Point:
    try:
        return Point(float(event["x"]), float(event["y"]))
    except (KeyError, TypeError, ValueError) as exc:
        msg = f"Event needs numeric 'x' and 'y': {event}"
        raise click.ClickException(msg) from exc


def _width(event: dict[str, Any]) -> float:
    try:
        return float(event["width"])
    except (KeyError, TypeError, ValueError) as exc:
        msg = f"Event needs a numeric 'width': {event}"
        raise click.ClickException(msg) from exc


def apply_event(engine: DrawingEngine, event: dict[str, Any], pending: dict[str, Point]) -> None:
    """Apply one recorded event to the engine.

    ``pending`` remembers the point of the last text-entry request so a
    following ``text`` event without coordinates lands there.
    """
    name = event.get("event")
    if name == "tool":
        engine.set_tool(str(event.get("tool")))
    elif name == "color":
        engine.set_color(str(event.get("color")))
    elif name == "width":
        engine.set_stroke_width(_width(event))
    elif name == "down":
        request = engine.pointer_down(_point(event))
        if request is not None and request.kind == RequestKind.TEXT_ENTRY:
            pending["text"] = request.point
    elif name == "move":
        engine.pointer_move(_point(event))
    elif name == "up":
        engine.pointer_up()
    elif name == "text":
        point = _point(event) if "x" in event else pending.pop("text", None)
        if point is None:
            msg = "Text event without coordinates or a pending text request"
            raise click.ClickException(msg)
        engine.add_text(point, str(event.get("text", "")))
    elif name == "image":
        service = ImageImportService()
        imported = service.load_file(Path(str(event.get("path"))))
        config = engine.config
        engine.add_image(_point(event), service.downscale(imported, config.max_import_width, config.max_import_height))
    elif name == "undo":
        engine.undo()
    elif name == "redo":
        engine.redo()
    elif name == "clear":
        engine.clear()
    else:
        msg = f"Unknown event: {name!r}"
        raise click.ClickException(msg)


@cli.command(name="replay", help="Replay JSON-lines pointer events through the engine and save the result.")
@click.argument("events", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), required=True, help="Output drawing")
@click.pass_obj
def replay(config: SketchpadConfig, events: Path, output: Path) -> None:
    """Replay JSON-lines pointer events through the engine and save the result."""
    engine = DrawingEngine(config)
    pending: dict[str, Point] = {}
    count = 0
    with handle_errors():
        for line_number, line in enumerate(events.read_text(encoding="utf-8").splitlines(), start=1):
            if not line.strip():
                continue
            try:
                event = json.loads(line)
            except json.JSONDecodeError as exc:
                msg = f"Line {line_number} is not valid JSON: {exc.msg}"
                raise click.ClickException(msg) from exc
            if not isinstance(event, dict):
                msg = f"Line {line_number} must be a JSON object"
                raise click.ClickException(msg)
            apply_event(engine, event, pending)
            count += 1

    write_document(output, engine.elements)
    console.print(
        f"[green]Replayed[/green] {count} events: {len(engine.elements)} elements, "
        f"{len(engine.history)} snapshots, cursor {engine.history.cursor}"
    )


def main() -> None:
    """Entry point for the ``sketchpad`` command."""
    cli()


if __name__ == "__main__":
    main()
