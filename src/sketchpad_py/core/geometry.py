"""Hit-testing geometry for drawing elements.

All functions here are pure: they never mutate their arguments and return the
same result for the same inputs.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from sketchpad_py.core.models import ResizeHandle
from sketchpad_py.core.types import ElementType, HandlePosition, ShapeType
from sketchpad_py.exceptions import InvalidElementError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sketchpad_py.core.models import DrawingElement, DrawingPath, ImageElement, Point, Shape

DEFAULT_TOLERANCE = 10.0
DEFAULT_HANDLE_SIZE = 8.0

# Text boxes are approximated from the stroke width: the renderer draws text
# at ``stroke_width * 8`` and an average glyph is about half as wide.
TEXT_CHAR_WIDTH_FACTOR = 4.0
TEXT_HEIGHT_FACTOR = 8.0


def distance_point_to_segment(p: Point, a: Point, b: Point) -> float:
    """Return the distance from ``p`` to the segment ``a``-``b``.

    The projection of ``p`` onto the line is clamped to the segment, so points
    beyond either end measure to the nearest endpoint. A zero-length segment
    measures to ``a``.
    """
    dx = b.x - a.x
    dy = b.y - a.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return math.hypot(p.x - a.x, p.y - a.y)

    t = ((p.x - a.x) * dx + (p.y - a.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    foot_x = a.x + t * dx
    foot_y = a.y + t * dy
    return math.hypot(p.x - foot_x, p.y - foot_y)


def is_near_path(p: Point, path: DrawingPath, tolerance: float = DEFAULT_TOLERANCE) -> bool:
    """Check whether ``p`` lies within ``tolerance`` of any segment of ``path``.

    Paths with fewer than two points have no segments and never match.
    """
    points = path.points
    return any(
        distance_point_to_segment(p, points[i], points[i + 1]) <= tolerance for i in range(len(points) - 1)
    )


def text_box(shape: Shape) -> tuple[float, float, float, float]:
    """Approximate the box of a text shape as ``(left, top, right, bottom)``.

    Text is drawn with its baseline at ``start_point``, so the box extends up
    and to the right of it.
    """
    width = shape.stroke_width * TEXT_CHAR_WIDTH_FACTOR * len(shape.text or "")
    height = shape.stroke_width * TEXT_HEIGHT_FACTOR
    start = shape.start_point
    return (start.x, start.y - height, start.x + width, start.y)


def is_inside_shape(p: Point, shape: Shape, arrow_tolerance: float = DEFAULT_TOLERANCE) -> bool:
    """Check whether ``p`` hits ``shape``.

    Args:
        p: The point to test.
        shape: The shape to test against.
        arrow_tolerance: Maximum distance from an arrow's shaft.

    Returns:
        True if the point is inside the rectangle or circle, near the arrow,
        or inside the approximate text box.
    """
    start, end = shape.start_point, shape.end_point

    if shape.shape_type == ShapeType.RECTANGLE:
        return min(start.x, end.x) <= p.x <= max(start.x, end.x) and min(start.y, end.y) <= p.y <= max(start.y, end.y)

    if shape.shape_type == ShapeType.CIRCLE:
        center_x = (start.x + end.x) / 2
        center_y = (start.y + end.y) / 2
        radius = math.hypot(end.x - start.x, end.y - start.y) / 2
        return math.hypot(p.x - center_x, p.y - center_y) <= radius

    if shape.shape_type == ShapeType.ARROW:
        return distance_point_to_segment(p, start, end) <= arrow_tolerance

    if shape.shape_type == ShapeType.TEXT:
        left, top, right, bottom = text_box(shape)
        return left <= p.x <= right and top <= p.y <= bottom

    return False


def is_inside_image(p: Point, image: ImageElement) -> bool:
    """Check whether ``p`` lies inside the image box (edges included)."""
    x, y = image.position.x, image.position.y
    return x <= p.x <= x + image.width and y <= p.y <= y + image.height


def resize_handles(image: ImageElement, handle_size: float = DEFAULT_HANDLE_SIZE) -> list[ResizeHandle]:
    """Compute the eight resize handles of an image, in hit-test order."""
    x, y = image.position.x, image.position.y
    w, h = image.width, image.height
    half = handle_size / 2
    anchors = {
        HandlePosition.NW: (x, y),
        HandlePosition.NE: (x + w, y),
        HandlePosition.SW: (x, y + h),
        HandlePosition.SE: (x + w, y + h),
        HandlePosition.N: (x + w / 2, y),
        HandlePosition.S: (x + w / 2, y + h),
        HandlePosition.W: (x, y + h / 2),
        HandlePosition.E: (x + w, y + h / 2),
    }
    return [ResizeHandle(position, ax - half, ay - half) for position, (ax, ay) in anchors.items()]


def hit_test_resize_handle(
    p: Point,
    image: ImageElement,
    handle_size: float = DEFAULT_HANDLE_SIZE,
) -> ResizeHandle | None:
    """Return the first handle whose box contains ``p``, or None."""
    for handle in resize_handles(image, handle_size):
        if handle.x <= p.x <= handle.x + handle_size and handle.y <= p.y <= handle.y + handle_size:
            return handle
    return None


def hit_test(
    p: Point,
    element: DrawingElement,
    tolerance: float = DEFAULT_TOLERANCE,
    arrow_tolerance: float = DEFAULT_TOLERANCE,
) -> bool:
    """Check whether ``p`` hits ``element``, dispatching on its type tag.

    Raises:
        InvalidElementError: If the element carries an unknown type tag.
    """
    if element.element_type == ElementType.PATH:
        return is_near_path(p, element, tolerance)
    if element.element_type == ElementType.SHAPE:
        return is_inside_shape(p, element, arrow_tolerance)
    if element.element_type == ElementType.IMAGE:
        return is_inside_image(p, element)
    msg = f"Unknown element type: {element.element_type}"
    raise InvalidElementError(msg)


def find_topmost(
    elements: Sequence[DrawingElement],
    p: Point,
    tolerance: float = DEFAULT_TOLERANCE,
    arrow_tolerance: float = DEFAULT_TOLERANCE,
) -> DrawingElement | None:
    """Return the top-most element (last in paint order) hit by ``p``."""
    for element in reversed(elements):
        if hit_test(p, element, tolerance, arrow_tolerance):
            return element
    return None


def find_topmost_image(elements: Sequence[DrawingElement], p: Point) -> ImageElement | None:
    """Return the top-most image whose box contains ``p``."""
    for element in reversed(elements):
        if element.element_type == ElementType.IMAGE and is_inside_image(p, element):
            return element
    return None
