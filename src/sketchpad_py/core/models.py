"""Core domain models for the sketchpad-py drawing engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeAlias
from uuid import UUID, uuid4

from sketchpad_py.core.types import ElementType, HandlePosition, ShapeType, Tool

if TYPE_CHECKING:
    from sketchpad_py.core.style import ElementStyle


@dataclass(frozen=True)
class Point:
    """A point in canvas space.

    Attributes:
        x: X-coordinate position.
        y: Y-coordinate position.
    """

    x: float
    y: float


@dataclass(frozen=True)
class Element:
    """Base class for all drawing elements.

    Elements are immutable values. Edits build a new element with
    ``dataclasses.replace`` and swap it into the live collection, so history
    snapshots holding the previous value are never affected.

    Attributes:
        id: Unique identifier for the element.
        element_type: Discriminant tag (path, shape or image).
    """

    id: UUID = field(default_factory=uuid4)
    element_type: ElementType = field(init=False, default=ElementType.PATH)


@dataclass(frozen=True)
class DrawingPath(Element):
    """A freehand stroke.

    Attributes:
        points: Ordered points of the stroke polyline.
        color: Stroke color in hex format.
        stroke_width: Stroke width in canvas units.
        tool: Tool that produced the stroke.
    """

    element_type: ElementType = field(init=False, default=ElementType.PATH)
    points: tuple[Point, ...] = ()
    color: str = "#000000"
    stroke_width: float = 2.0
    tool: Tool = Tool.PEN


@dataclass(frozen=True)
class Shape(Element):
    """A parametric shape defined by its start and end points.

    Attributes:
        shape_type: Kind of shape (rectangle, circle, arrow or text).
        start_point: Point where the gesture started.
        end_point: Point where the gesture currently ends.
        color: Stroke or text color in hex format.
        stroke_width: Stroke width; text size is derived from it.
        text: Text payload, only meaningful for text shapes.
    """

    element_type: ElementType = field(init=False, default=ElementType.SHAPE)
    shape_type: ShapeType = ShapeType.RECTANGLE
    start_point: Point = field(default_factory=lambda: Point(0.0, 0.0))
    end_point: Point = field(default_factory=lambda: Point(0.0, 0.0))
    color: str = "#000000"
    stroke_width: float = 2.0
    text: str | None = None


@dataclass(frozen=True)
class ImageElement(Element):
    """A placed raster image.

    Attributes:
        position: Top-left corner of the image box.
        width: Current render width.
        height: Current render height.
        image_data: Encoded bitmap as a ``data:`` URL.
        original_width: Source width, used for aspect ratio during resize.
        original_height: Source height, used for aspect ratio during resize.
    """

    element_type: ElementType = field(init=False, default=ElementType.IMAGE)
    position: Point = field(default_factory=lambda: Point(0.0, 0.0))
    width: float = 0.0
    height: float = 0.0
    image_data: str = ""
    original_width: float = 0.0
    original_height: float = 0.0


DrawingElement: TypeAlias = DrawingPath | Shape | ImageElement


@dataclass(frozen=True)
class ResizeHandle:
    """A square resize handle around a selected image.

    Attributes:
        position: Which of the eight handles this is.
        x: X-coordinate of the top-left corner of the handle box.
        y: Y-coordinate of the top-left corner of the handle box.
    """

    position: HandlePosition
    x: float
    y: float


def create_path(point: Point, style: ElementStyle) -> DrawingPath:
    """Start a new freehand path at ``point`` with the given style."""
    return DrawingPath(points=(point,), color=style.color, stroke_width=style.stroke_width, tool=Tool.PEN)


def create_shape(shape_type: ShapeType, point: Point, style: ElementStyle) -> Shape:
    """Start a new shape whose start and end points are both ``point``."""
    return Shape(
        shape_type=shape_type,
        start_point=point,
        end_point=point,
        color=style.color,
        stroke_width=style.stroke_width,
    )


def create_text(point: Point, text: str, style: ElementStyle) -> Shape | None:
    """Create a text shape anchored at ``point``.

    Returns:
        The text shape, or None when the text is empty after trimming.
    """
    content = text.strip()
    if not content:
        return None
    return Shape(
        shape_type=ShapeType.TEXT,
        start_point=point,
        end_point=point,
        color=style.color,
        stroke_width=style.stroke_width,
        text=content,
    )


def create_image(point: Point, image_data: str, width: float, height: float) -> ImageElement:
    """Place an image with its top-left corner at ``point``.

    The imported dimensions become both the render size and the original
    size used for aspect-ratio math.
    """
    return ImageElement(
        position=point,
        width=width,
        height=height,
        image_data=image_data,
        original_width=width,
        original_height=height,
    )
