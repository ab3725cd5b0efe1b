"""Selection tracking and move/resize math for placed images."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

import structlog

from sketchpad_py.core.geometry import (
    DEFAULT_HANDLE_SIZE,
    find_topmost_image,
    hit_test_resize_handle,
    is_inside_image,
)
from sketchpad_py.core.models import Point
from sketchpad_py.core.types import ElementType, HandlePosition

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from sketchpad_py.core.models import DrawingElement, ImageElement, ResizeHandle

logger = structlog.get_logger(__name__)

MIN_IMAGE_SIZE = 20.0


@dataclass
class SelectionState:
    """Selection of a single image under the select tool.

    Attributes:
        target_id: ID of the selected image.
        is_dragging: Whether a move gesture is in progress.
        is_resizing: Whether a resize gesture is in progress.
        active_handle: Handle grabbed by the current resize gesture.
        drag_offset: Pointer position relative to the image's top-left corner.
    """

    target_id: UUID
    is_dragging: bool = False
    is_resizing: bool = False
    active_handle: ResizeHandle | None = None
    drag_offset: Point | None = None


def aspect_ratio(image: ImageElement) -> float:
    """Return the width/height ratio to preserve when resizing ``image``."""
    if image.original_width > 0 and image.original_height > 0:
        return image.original_width / image.original_height
    if image.width > 0 and image.height > 0:
        return image.width / image.height
    return 1.0


def _fit(
    aspect: float,
    min_size: float,
    *,
    width: float | None = None,
    height: float | None = None,
) -> tuple[float, float]:
    """Derive the missing dimension from the aspect ratio and apply the floor."""
    if width is not None:
        w, h = width, width / aspect
    else:
        h = height if height is not None else min_size
        w = h * aspect
    if w < min_size:
        w, h = min_size, min_size / aspect
    if h < min_size:
        w, h = min_size * aspect, min_size
    return w, h


def move_image(image: ImageElement, p: Point, offset: Point) -> ImageElement:
    """Return ``image`` moved so that ``offset`` inside it sits under ``p``."""
    return replace(image, position=Point(p.x - offset.x, p.y - offset.y))


def resize_image(
    image: ImageElement,
    handle: HandlePosition,
    p: Point,
    min_size: float = MIN_IMAGE_SIZE,
) -> ImageElement:
    """Resize ``image`` by dragging ``handle`` to ``p``.

    The aspect ratio of the source image is always kept. Corner and
    east/west handles take the width from the horizontal pointer distance to
    the opposite edge and derive the height; north/south handles take the
    height from the vertical distance and derive the width. Neither
    dimension drops below ``min_size``. The corner or edge opposite the
    handle stays fixed; edge handles keep the perpendicular centre line.

    Args:
        image: The image being resized.
        handle: The handle being dragged.
        p: Current pointer position.
        min_size: Minimum width and height.

    Returns:
        A new image with updated position, width and height.
    """
    aspect = aspect_ratio(image)
    left, top = image.position.x, image.position.y
    right, bottom = left + image.width, top + image.height
    center_x, center_y = left + image.width / 2, top + image.height / 2

    if handle in (HandlePosition.NW, HandlePosition.SW, HandlePosition.W):
        w, h = _fit(aspect, min_size, width=right - p.x)
        x = right - w
    elif handle in (HandlePosition.NE, HandlePosition.SE, HandlePosition.E):
        w, h = _fit(aspect, min_size, width=p.x - left)
        x = left
    elif handle == HandlePosition.N:
        w, h = _fit(aspect, min_size, height=bottom - p.y)
        x = center_x - w / 2
    else:
        w, h = _fit(aspect, min_size, height=p.y - top)
        x = center_x - w / 2

    if handle in (HandlePosition.NW, HandlePosition.NE, HandlePosition.N):
        y = bottom - h
    elif handle in (HandlePosition.SW, HandlePosition.SE, HandlePosition.S):
        y = top
    else:
        y = center_y - h / 2

    return replace(image, position=Point(x, y), width=w, height=h)


class SelectionController:
    """Tracks the selected image and applies drag and resize gestures.

    Attributes:
        handle_size: Side length of the square resize handles.
        min_size: Minimum image width and height during resize.
        state: Current selection, or None when nothing is selected.
    """

    def __init__(self, handle_size: float = DEFAULT_HANDLE_SIZE, min_size: float = MIN_IMAGE_SIZE) -> None:
        """Initialize the controller with no selection.

        Args:
            handle_size: Side length of the square resize handles.
            min_size: Minimum image width and height during resize.
        """
        self.handle_size = handle_size
        self.min_size = min_size
        self.state: SelectionState | None = None

    @property
    def is_transforming(self) -> bool:
        """Whether a drag or resize gesture is in progress."""
        return self.state is not None and (self.state.is_dragging or self.state.is_resizing)

    def target(self, elements: Sequence[DrawingElement]) -> ImageElement | None:
        """Return the selected image from ``elements``, if it still exists."""
        if self.state is None:
            return None
        for element in elements:
            if element.id == self.state.target_id and element.element_type == ElementType.IMAGE:
                return element
        return None

    def begin(self, elements: Sequence[DrawingElement], p: Point) -> SelectionState | None:
        """Handle a pointer press under the select tool.

        A press on a handle of the current selection starts a resize, a press
        inside the selected image starts a drag, a press on another image
        selects it and starts a drag, and a press on empty space deselects.

        Returns:
            The resulting selection, or None when deselected.
        """
        current = self.target(elements)
        if current is not None and self.state is not None:
            handle = hit_test_resize_handle(p, current, self.handle_size)
            if handle is not None:
                self.state.is_resizing = True
                self.state.is_dragging = False
                self.state.active_handle = handle
                logger.debug("Resize started", element_id=str(current.id), handle=handle.position.value)
                return self.state
            if is_inside_image(p, current):
                self.state.is_dragging = True
                self.state.is_resizing = False
                self.state.drag_offset = Point(p.x - current.position.x, p.y - current.position.y)
                return self.state

        image = find_topmost_image(elements, p)
        if image is None:
            self.clear()
            return None

        self.state = SelectionState(
            target_id=image.id,
            is_dragging=True,
            drag_offset=Point(p.x - image.position.x, p.y - image.position.y),
        )
        logger.debug("Image selected", element_id=str(image.id))
        return self.state

    def update(self, elements: Sequence[DrawingElement], p: Point) -> ImageElement | None:
        """Apply the active drag or resize gesture for pointer position ``p``.

        Returns:
            The transformed image to swap into the collection, or None when
            no gesture is active.
        """
        image = self.target(elements)
        if image is None or self.state is None:
            return None
        if self.state.is_dragging and self.state.drag_offset is not None:
            return move_image(image, p, self.state.drag_offset)
        if self.state.is_resizing and self.state.active_handle is not None:
            return resize_image(image, self.state.active_handle.position, p, self.min_size)
        return None

    def finish(self) -> bool:
        """End the active gesture, keeping the selection.

        Returns:
            True if a drag or resize gesture was ended.
        """
        if not self.is_transforming or self.state is None:
            return False
        self.state.is_dragging = False
        self.state.is_resizing = False
        self.state.active_handle = None
        self.state.drag_offset = None
        return True

    def cancel(self) -> None:
        """Abort any active gesture without ending the selection."""
        self.finish()

    def clear(self) -> None:
        """Drop the selection."""
        self.state = None

    def revalidate(self, elements: Sequence[DrawingElement]) -> None:
        """Drop the selection if its target is no longer in ``elements``."""
        if self.state is not None and self.target(elements) is None:
            logger.debug("Selection target gone", element_id=str(self.state.target_id))
            self.clear()
