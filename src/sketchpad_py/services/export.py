"""Rendering and export service for drawings."""

from __future__ import annotations

import io
import math
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog
from PIL import Image, ImageDraw, ImageFont

from sketchpad_py.core.serialization import document_to_dict, dumps_document
from sketchpad_py.core.types import ElementType, ShapeType
from sketchpad_py.exceptions import ImageImportError
from sketchpad_py.services.imports import decode_data_url

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID

    from sketchpad_py.core.engine import SelectionOverlay
    from sketchpad_py.core.models import DrawingElement, DrawingPath, ImageElement, Shape

logger = structlog.get_logger(__name__)

BACKGROUND_COLOR = (255, 255, 255)
SELECTION_COLOR = "#0066cc"
ARROW_HEAD_LENGTH = 20.0
ARROW_HEAD_ANGLE = math.pi / 6


def paint_order(elements: Iterable[DrawingElement]) -> list[DrawingElement]:
    """Order elements for painting: images first, then paths and shapes.

    Relative order inside each layer is the collection order.
    """
    elements = list(elements)
    images = [e for e in elements if e.element_type == ElementType.IMAGE]
    others = [e for e in elements if e.element_type != ElementType.IMAGE]
    return images + others


class ExportService:
    """Service for rendering drawings and exporting them to various formats.

    Supports exporting to:
    - JSON: Full element data
    - SVG: Vector graphics representation
    - PNG: Raster image flattened onto a white background

    Decoded images are cached per element id; an entry is re-decoded when the
    element's image data changes.
    """

    def __init__(self) -> None:
        """Initialize the service with an empty image cache."""
        self._image_cache: dict[UUID, tuple[str, Image.Image]] = {}

    def to_json(self, elements: Iterable[DrawingElement], *, indent: int | None = 2) -> str:
        """Export elements to a JSON document.

        Args:
            elements: The elements to export.
            indent: JSON indentation level (None for compact).

        Returns:
            JSON string representation of the drawing.
        """
        return dumps_document(elements, indent=indent)

    def to_dict(self, elements: Iterable[DrawingElement]) -> dict[str, Any]:
        """Export elements to a dictionary."""
        return document_to_dict(elements)

    def render(
        self,
        elements: Sequence[DrawingElement],
        width: int,
        height: int,
        *,
        scale: float = 1.0,
        selection: SelectionOverlay | None = None,
    ) -> Image.Image:
        """Paint elements onto a transparent RGBA surface.

        Args:
            elements: The elements to paint, in collection order.
            width: Canvas width.
            height: Canvas height.
            scale: Scale factor for the output image.
            selection: Optional selection overlay drawn last.

        Returns:
            The rendered surface.
        """
        surface = Image.new("RGBA", (int(width * scale), int(height * scale)), (0, 0, 0, 0))
        draw = ImageDraw.Draw(surface)

        for element in paint_order(elements):
            if element.element_type == ElementType.IMAGE:
                self._draw_image(surface, element, scale)
            elif element.element_type == ElementType.PATH:
                self._draw_path(draw, element, scale)
            elif element.element_type == ElementType.SHAPE:
                self._draw_shape(draw, element, scale)

        if selection is not None:
            self._draw_selection(draw, selection, scale)

        self._prune_cache(elements)
        return surface

    def flatten(self, surface: Image.Image) -> Image.Image:
        """Composite a rendered surface onto an opaque white background."""
        background = Image.new("RGBA", surface.size, (*BACKGROUND_COLOR, 255))
        background.alpha_composite(surface.convert("RGBA"))
        return background.convert("RGB")

    def to_png(
        self,
        elements: Sequence[DrawingElement],
        width: int,
        height: int,
        *,
        scale: float = 1.0,
    ) -> bytes:
        """Render elements and export them as a flattened PNG.

        Returns:
            PNG image as bytes.
        """
        image = self.flatten(self.render(elements, width, height, scale=scale))
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    def export_filename(self, now: datetime | None = None) -> str:
        """Build a download file name such as ``drawing_20240131120000.png``."""
        moment = now or datetime.now(UTC)
        return f"drawing_{moment.strftime('%Y%m%d%H%M%S')}.png"

    def to_svg(self, elements: Sequence[DrawingElement], width: int, height: int) -> str:
        """Export elements to SVG format.

        Returns:
            SVG string representation of the drawing.
        """
        svg_elements = [svg for element in paint_order(elements) if (svg := self._element_to_svg(element))]

        return f"""<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg"
     width="{width}"
     height="{height}"
     viewBox="0 0 {width} {height}">
  <rect width="100%" height="100%" fill="#ffffff"/>
{chr(10).join(svg_elements)}
</svg>"""

    def _parse_color(self, color: str | None) -> tuple[int, int, int, int]:
        """Parse hex color string to RGBA tuple."""
        if not color:
            return (0, 0, 0, 255)
        color = color.lstrip("#")
        try:
            if len(color) == 3:
                r, g, b = (int(c * 2, 16) for c in color)
                return (r, g, b, 255)
            if len(color) == 6:
                return (int(color[0:2], 16), int(color[2:4], 16), int(color[4:6], 16), 255)
            if len(color) == 8:
                return (int(color[0:2], 16), int(color[2:4], 16), int(color[4:6], 16), int(color[6:8], 16))
        except ValueError:
            pass
        return (0, 0, 0, 255)

    def _decoded_image(self, element: ImageElement) -> Image.Image | None:
        """Return the decoded bitmap for an image element, using the cache."""
        cached = self._image_cache.get(element.id)
        if cached is not None and cached[0] == element.image_data:
            return cached[1]
        try:
            with Image.open(io.BytesIO(decode_data_url(element.image_data))) as source:
                bitmap = source.convert("RGBA")
        except (ImageImportError, OSError) as exc:
            logger.warning("Skipping undecodable image", element_id=str(element.id), error=str(exc))
            return None
        self._image_cache[element.id] = (element.image_data, bitmap)
        return bitmap

    def _prune_cache(self, elements: Sequence[DrawingElement]) -> None:
        live = {e.id for e in elements if e.element_type == ElementType.IMAGE}
        for element_id in [key for key in self._image_cache if key not in live]:
            del self._image_cache[element_id]

    def _draw_image(self, surface: Image.Image, element: ImageElement, scale: float) -> None:
        """Draw a placed image onto the surface."""
        bitmap = self._decoded_image(element)
        if bitmap is None:
            return
        size = (max(1, round(element.width * scale)), max(1, round(element.height * scale)))
        resized = bitmap.resize(size, Image.Resampling.LANCZOS)
        surface.alpha_composite(resized, (round(element.position.x * scale), round(element.position.y * scale)))

    def _draw_path(self, draw: ImageDraw.ImageDraw, path: DrawingPath, scale: float) -> None:
        """Draw a freehand stroke as a polyline."""
        if len(path.points) < 2:
            return
        color = self._parse_color(path.color)
        width = max(1, int(path.stroke_width * scale))
        points = [(p.x * scale, p.y * scale) for p in path.points]
        draw.line(points, fill=color, width=width, joint="curve")

    def _draw_shape(self, draw: ImageDraw.ImageDraw, shape: Shape, scale: float) -> None:
        """Draw a shape according to its kind."""
        start, end = shape.start_point, shape.end_point
        x0, y0 = start.x * scale, start.y * scale
        x1, y1 = end.x * scale, end.y * scale
        color = self._parse_color(shape.color)
        width = max(1, int(shape.stroke_width * scale))

        if shape.shape_type == ShapeType.RECTANGLE:
            draw.rectangle([min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1)], outline=color, width=width)
        elif shape.shape_type == ShapeType.CIRCLE:
            cx, cy = (x0 + x1) / 2, (y0 + y1) / 2
            radius = math.hypot(x1 - x0, y1 - y0) / 2
            draw.ellipse([cx - radius, cy - radius, cx + radius, cy + radius], outline=color, width=width)
        elif shape.shape_type == ShapeType.ARROW:
            draw.line([(x0, y0), (x1, y1)], fill=color, width=width)
            for head in self._arrow_head(x0, y0, x1, y1, ARROW_HEAD_LENGTH * scale):
                draw.line([(x1, y1), head], fill=color, width=width)
        elif shape.shape_type == ShapeType.TEXT and shape.text:
            self._draw_text(draw, shape, scale, color)

    def _arrow_head(self, x0: float, y0: float, x1: float, y1: float, length: float) -> list[tuple[float, float]]:
        """Return the two barb endpoints of an arrow head at ``(x1, y1)``."""
        angle = math.atan2(y1 - y0, x1 - x0)
        return [
            (x1 - length * math.cos(angle - ARROW_HEAD_ANGLE), y1 - length * math.sin(angle - ARROW_HEAD_ANGLE)),
            (x1 - length * math.cos(angle + ARROW_HEAD_ANGLE), y1 - length * math.sin(angle + ARROW_HEAD_ANGLE)),
        ]

    def _draw_text(self, draw: ImageDraw.ImageDraw, shape: Shape, scale: float, color: tuple[int, ...]) -> None:
        """Draw a text label with its baseline at the start point."""
        size = max(1.0, shape.stroke_width * 8 * scale)
        font = ImageFont.load_default(size=size)
        x, y = shape.start_point.x * scale, shape.start_point.y * scale
        if isinstance(font, ImageFont.FreeTypeFont):
            draw.text((x, y), shape.text or "", fill=color, font=font, anchor="ls")
        else:
            draw.text((x, y - size), shape.text or "", fill=color, font=font)

    def _draw_selection(self, draw: ImageDraw.ImageDraw, overlay: SelectionOverlay, scale: float) -> None:
        """Draw the selection outline and the eight resize handles."""
        image = overlay.image
        x, y = image.position.x * scale, image.position.y * scale
        w, h = image.width * scale, image.height * scale
        draw.rectangle([x - 2, y - 2, x + w + 2, y + h + 2], outline=SELECTION_COLOR, width=2)
        size = overlay.handle_size * scale
        for handle in overlay.handles:
            hx, hy = handle.x * scale, handle.y * scale
            draw.rectangle([hx, hy, hx + size, hy + size], fill=SELECTION_COLOR, outline="#ffffff", width=1)

    def _element_to_svg(self, element: DrawingElement) -> str | None:
        """Convert an element to SVG markup."""
        if element.element_type == ElementType.PATH:
            return self._path_to_svg(element)
        if element.element_type == ElementType.SHAPE:
            return self._shape_to_svg(element)
        if element.element_type == ElementType.IMAGE:
            return (
                f'  <image x="{element.position.x}" y="{element.position.y}" '
                f'width="{element.width}" height="{element.height}" '
                f'href="{self._escape_xml(element.image_data)}"/>'
            )
        return None

    def _path_to_svg(self, path: DrawingPath) -> str:
        """Convert a stroke to an SVG path."""
        path_parts = []
        for i, point in enumerate(path.points):
            command = "M" if i == 0 else "L"
            path_parts.append(f"{command} {point.x} {point.y}")

        return (
            f'  <path d="{" ".join(path_parts)}" '
            f'stroke="{path.color}" '
            f'stroke-width="{path.stroke_width}" '
            f'fill="none" '
            f'stroke-linecap="round" '
            f'stroke-linejoin="round"/>'
        )

    def _shape_to_svg(self, shape: Shape) -> str | None:
        """Convert a shape to an SVG element."""
        start, end = shape.start_point, shape.end_point
        common_attrs = f'fill="none" stroke="{shape.color}" stroke-width="{shape.stroke_width}"'

        if shape.shape_type == ShapeType.RECTANGLE:
            x, y = min(start.x, end.x), min(start.y, end.y)
            width, height = abs(end.x - start.x), abs(end.y - start.y)
            return f'  <rect x="{x}" y="{y}" width="{width}" height="{height}" {common_attrs}/>'

        if shape.shape_type == ShapeType.CIRCLE:
            cx, cy = (start.x + end.x) / 2, (start.y + end.y) / 2
            radius = math.hypot(end.x - start.x, end.y - start.y) / 2
            return f'  <circle cx="{cx}" cy="{cy}" r="{radius}" {common_attrs}/>'

        if shape.shape_type == ShapeType.ARROW:
            (ax, ay), (bx, by) = self._arrow_head(start.x, start.y, end.x, end.y, ARROW_HEAD_LENGTH)
            return (
                f"  <g {common_attrs}>"
                f'<line x1="{start.x}" y1="{start.y}" x2="{end.x}" y2="{end.y}"/>'
                f'<polyline points="{ax},{ay} {end.x},{end.y} {bx},{by}"/>'
                f"</g>"
            )

        if shape.shape_type == ShapeType.TEXT and shape.text:
            return (
                f'  <text x="{start.x}" y="{start.y}" '
                f'font-family="Arial" '
                f'font-size="{shape.stroke_width * 8}" '
                f'fill="{shape.color}">'
                f"{self._escape_xml(shape.text)}</text>"
            )

        return None

    def _escape_xml(self, text: str) -> str:
        """Escape special XML characters."""
        return (
            text.replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;")
            .replace('"', "&quot;")
            .replace("'", "&apos;")
        )
