"""Interaction state machine turning pointer events into document edits."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

import structlog

from sketchpad_py.config import SketchpadConfig
from sketchpad_py.core.geometry import find_topmost, resize_handles
from sketchpad_py.core.history import HistoryLedger
from sketchpad_py.core.models import create_image, create_path, create_shape, create_text
from sketchpad_py.core.style import ElementStyle
from sketchpad_py.core.transform import SelectionController
from sketchpad_py.core.types import SHAPE_TOOLS, ElementType, RequestKind, Tool
from sketchpad_py.exceptions import ElementNotFoundError, ImageImportError, InvalidElementError, InvalidToolError
from sketchpad_py.services.imports import ImageImportService

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from sketchpad_py.core.models import DrawingElement, ImageElement, Point, ResizeHandle, Shape
    from sketchpad_py.core.transform import SelectionState
    from sketchpad_py.services.imports import ImportedImage

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ToolRequest:
    """A request for an external collaborator, emitted by a pointer press.

    Attributes:
        kind: What the caller should do (collect text or import an image).
        point: Canvas position the request refers to.
    """

    kind: RequestKind
    point: Point


@dataclass(frozen=True)
class SelectionOverlay:
    """What a renderer needs to draw the selection outline and handles.

    Attributes:
        image: The selected image.
        handles: The eight resize handles, in hit-test order.
        handle_size: Side length of each handle square.
    """

    image: ImageElement
    handles: tuple[ResizeHandle, ...]
    handle_size: float


class DrawingEngine:
    """The drawing-state engine.

    Owns the current tool and style, the live element collection, the
    in-progress element, the image selection and the history ledger. Pointer
    events are processed synchronously and run to completion; only discrete
    actions commit to history.

    Usage:
        engine = DrawingEngine()
        engine.pointer_down(Point(0, 0))
        engine.pointer_move(Point(10, 10))
        engine.pointer_up()
        engine.undo()

    Attributes:
        config: Engine configuration.
        history: Undo/redo ledger of document snapshots.
        style: Style applied to new strokes and shapes.
        is_drawing: Whether a stroke or shape gesture is in progress.
        in_progress: The stroke or shape being drawn, if any.
    """

    def __init__(
        self,
        config: SketchpadConfig | None = None,
        *,
        import_service: ImageImportService | None = None,
    ) -> None:
        """Initialize the engine with an empty document.

        Args:
            config: Engine configuration. Defaults to ``SketchpadConfig()``.
            import_service: Collaborator used by the image tool.
        """
        self.config = config or SketchpadConfig()
        self.history = HistoryLedger()
        self.style = ElementStyle(color=self.config.default_color, stroke_width=self.config.default_stroke_width)
        self.is_drawing = False
        self.in_progress: DrawingElement | None = None
        self._tool = Tool(self.config.default_tool)
        self._elements: list[DrawingElement] = list(self.history.current())
        self._selection = SelectionController(self.config.handle_size, self.config.min_image_size)
        self._import_service = import_service or ImageImportService()

    # State queries
    @property
    def tool(self) -> Tool:
        """The active tool."""
        return self._tool

    @property
    def elements(self) -> tuple[DrawingElement, ...]:
        """The live element collection, in paint order."""
        return tuple(self._elements)

    @property
    def selection(self) -> SelectionState | None:
        """The current image selection, if any."""
        return self._selection.state

    @property
    def can_undo(self) -> bool:
        """Whether undo would change the document."""
        return self.history.can_undo()

    @property
    def can_redo(self) -> bool:
        """Whether redo would change the document."""
        return self.history.can_redo()

    def selection_overlay(self) -> SelectionOverlay | None:
        """Describe the selection overlay, shown only under the select tool."""
        if self._tool != Tool.SELECT:
            return None
        image = self._selection.target(self._elements)
        if image is None:
            return None
        handles = tuple(resize_handles(image, self.config.handle_size))
        return SelectionOverlay(image=image, handles=handles, handle_size=self.config.handle_size)

    # Tool and style
    def set_tool(self, tool: Tool | str) -> None:
        """Switch the active tool.

        Any gesture still in progress is finished first. Leaving the select
        tool drops the selection.

        Raises:
            InvalidToolError: If the tool name is unknown.
        """
        try:
            new_tool = Tool(tool)
        except ValueError:
            raise InvalidToolError(str(tool)) from None

        self._finish_gesture()
        if new_tool != Tool.SELECT:
            self._selection.clear()
        self._tool = new_tool
        logger.debug("Tool changed", tool=new_tool.value)

    def set_color(self, color: str) -> None:
        """Set the color used for new strokes, shapes and text."""
        self.style.color = color

    def set_stroke_width(self, width: float) -> None:
        """Set the stroke width used for new strokes, shapes and text.

        Raises:
            InvalidElementError: If the width is not positive.
        """
        if width <= 0:
            msg = f"Stroke width must be positive, got {width}"
            raise InvalidElementError(msg)
        self.style.stroke_width = width

    # Pointer events
    def pointer_down(self, p: Point) -> ToolRequest | None:
        """Handle a pointer press at ``p``.

        Returns:
            A request for the text-entry or image-import collaborator when the
            active tool needs one, otherwise None.
        """
        self._finish_gesture()

        if self._tool == Tool.SELECT:
            self._selection.begin(self._elements, p)
            return None

        self._selection.clear()

        if self._tool == Tool.ERASER:
            self._erase_at(p)
            return None
        if self._tool == Tool.PEN:
            self._start_drawing(create_path(p, self.style))
            return None
        if self._tool in SHAPE_TOOLS:
            self._start_drawing(create_shape(SHAPE_TOOLS[self._tool], p, self.style))
            return None
        if self._tool == Tool.TEXT:
            return ToolRequest(kind=RequestKind.TEXT_ENTRY, point=p)
        return ToolRequest(kind=RequestKind.IMAGE_IMPORT, point=p)

    def pointer_move(self, p: Point) -> None:
        """Handle pointer movement to ``p``. Never commits."""
        if self._selection.is_transforming:
            updated = self._selection.update(self._elements, p)
            if updated is not None:
                self._replace(updated)
            return

        element = self.in_progress
        if not self.is_drawing or element is None:
            return

        if element.element_type == ElementType.PATH:
            updated = replace(element, points=(*element.points, p))
        elif element.element_type == ElementType.SHAPE:
            updated = replace(element, end_point=p)
        else:
            return
        self._replace(updated)
        self.in_progress = updated

    def pointer_up(self) -> None:
        """Handle a pointer release, committing a finished gesture."""
        if self._selection.finish():
            self._commit("transform")
            return

        if self.is_drawing:
            element = self.in_progress
            self.is_drawing = False
            self.in_progress = None
            self._commit("draw", element_type=element.element_type.value if element else None)

    # Discrete actions
    def add_text(self, point: Point, text: str) -> Shape | None:
        """Add a text label at ``point``.

        Text that is empty after trimming is dropped without a commit.

        Returns:
            The new text shape, or None if the text was dropped.
        """
        shape = create_text(point, text, self.style)
        if shape is None:
            return None
        self._append_committed(shape, "text")
        return shape

    def add_image(self, point: Point, image: ImportedImage) -> ImageElement:
        """Place an already imported image with its top-left at ``point``.

        Returns:
            The new image element.
        """
        element = create_image(point, image.data, image.width, image.height)
        self._append_committed(element, "image", width=image.width, height=image.height)
        return element

    async def import_image(self, point: Point) -> ImageElement:
        """Import an image through the import service and place it at ``point``.

        The document is only touched once the import has resolved, in a
        single append and commit. Several imports may be pending at once;
        each is applied when it resolves.

        Returns:
            The new image element.

        Raises:
            ImageImportError: If picking, decoding or downscaling fails. The
                document is left unchanged.
        """
        try:
            picked = await self._import_service.request_image()
            image = await asyncio.to_thread(
                self._import_service.downscale,
                picked,
                self.config.max_import_width,
                self.config.max_import_height,
            )
        except ImageImportError as exc:
            logger.warning("Image import failed", error=str(exc))
            raise
        return self.add_image(point, image)

    def clear(self) -> None:
        """Remove every element and commit the empty document."""
        self._cancel_gesture()
        self._elements = []
        self._selection.clear()
        self._commit("clear")

    def load(self, elements: Iterable[DrawingElement]) -> None:
        """Replace the document with ``elements`` and commit it.

        The load is recorded like any other action, so it can be undone.
        """
        self._cancel_gesture()
        self._elements = list(elements)
        self._selection.revalidate(self._elements)
        self._commit("load")

    def undo(self) -> None:
        """Step back one snapshot; a no-op at the start of history."""
        self._restore(self.history.undo())

    def redo(self) -> None:
        """Step forward one snapshot; a no-op at the end of history."""
        self._restore(self.history.redo())

    # Internals
    def _start_drawing(self, element: DrawingElement) -> None:
        self._elements.append(element)
        self.in_progress = element
        self.is_drawing = True

    def _erase_at(self, p: Point) -> None:
        target = find_topmost(self._elements, p, self.config.eraser_tolerance, self.config.arrow_tolerance)
        if target is None:
            return
        self._elements = [element for element in self._elements if element.id != target.id]
        self._selection.revalidate(self._elements)
        self._commit("erase", element_id=str(target.id), element_type=target.element_type.value)

    def _replace(self, element: DrawingElement) -> None:
        for index, existing in enumerate(self._elements):
            if existing.id == element.id:
                self._elements[index] = element
                return
        raise ElementNotFoundError(element.id)

    def _finish_gesture(self) -> None:
        if self.is_drawing or self._selection.is_transforming:
            self.pointer_up()

    def _cancel_gesture(self) -> None:
        self.is_drawing = False
        self.in_progress = None
        self._selection.cancel()

    def _restore(self, snapshot: Iterable[DrawingElement]) -> None:
        self._cancel_gesture()
        self._elements = list(snapshot)
        self._selection.revalidate(self._elements)
        logger.debug("History moved", cursor=self.history.cursor, elements=len(self._elements))

    def _append_committed(self, element: DrawingElement, action: str, **details: Any) -> None:
        # A running stroke, shape or image edit stays out of this snapshot.
        self._elements.append(element)
        self._commit(action, snapshot=(*self.history.current(), element), **details)

    def _commit(self, action: str, snapshot: Sequence[DrawingElement] | None = None, **details: Any) -> None:
        committed = self._elements if snapshot is None else snapshot
        self.history.commit(committed)
        logger.debug(
            "Snapshot committed",
            action=action,
            cursor=self.history.cursor,
            elements=len(committed),
            **details,
        )
