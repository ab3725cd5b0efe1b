"""Tests for the drawing engine state machine."""

from __future__ import annotations

import asyncio

import pytest

from sketchpad_py.core.engine import DrawingEngine, ToolRequest
from sketchpad_py.core.models import DrawingPath, ImageElement, Point, Shape
from sketchpad_py.core.types import ElementType, RequestKind, ShapeType, Tool
from sketchpad_py.exceptions import ImageImportError, InvalidElementError, InvalidToolError
from sketchpad_py.services.imports import ImageImportService, PickedFile


def _stroke(engine: DrawingEngine, *points: tuple[float, float]) -> None:
    first, *rest = points
    engine.pointer_down(Point(*first))
    for point in rest:
        engine.pointer_move(Point(*point))
    engine.pointer_up()


@pytest.fixture
def placed_image(engine: DrawingEngine, imported_factory) -> ImageElement:
    """Place a 200x100 image at (100, 100) and switch to the select tool."""
    image = engine.add_image(Point(100, 100), imported_factory(200, 100))
    engine.set_tool(Tool.SELECT)
    return image


class TestInitialState:
    """Tests for a fresh engine."""

    def test_defaults(self, engine: DrawingEngine) -> None:
        """Test the engine starts empty with the pen."""
        assert engine.tool == Tool.PEN
        assert engine.elements == ()
        assert engine.selection is None
        assert not engine.is_drawing
        assert not engine.can_undo
        assert not engine.can_redo
        assert len(engine.history) == 1


class TestToolsAndStyle:
    """Tests for tool and style changes."""

    def test_set_tool_accepts_names(self, engine: DrawingEngine) -> None:
        """Test tools can be set by value."""
        engine.set_tool("circle")
        assert engine.tool == Tool.CIRCLE

    def test_unknown_tool(self, engine: DrawingEngine) -> None:
        """Test unknown tool names are rejected."""
        with pytest.raises(InvalidToolError, match="lasso"):
            engine.set_tool("lasso")
        assert engine.tool == Tool.PEN

    def test_invalid_stroke_width(self, engine: DrawingEngine) -> None:
        """Test non-positive widths are rejected."""
        with pytest.raises(InvalidElementError):
            engine.set_stroke_width(0)

    def test_style_applies_to_new_elements(self, engine: DrawingEngine) -> None:
        """Test color and width are copied into new strokes."""
        engine.set_color("#ff0000")
        engine.set_stroke_width(5)
        _stroke(engine, (0, 0), (10, 10))
        path = engine.elements[0]
        assert path.color == "#ff0000"
        assert path.stroke_width == 5

    def test_style_change_does_not_touch_existing(self, engine: DrawingEngine) -> None:
        """Test committed elements keep the style they were drawn with."""
        _stroke(engine, (0, 0), (10, 10))
        engine.set_color("#00ff00")
        assert engine.elements[0].color == "#000000"


class TestDrawing:
    """Tests for pen and shape gestures."""

    def test_pen_stroke_undo_redo(self, engine: DrawingEngine) -> None:
        """Test a two-point stroke survives an undo/redo round trip."""
        _stroke(engine, (0, 0), (10, 10))
        assert len(engine.elements) == 1
        path = engine.elements[0]
        assert isinstance(path, DrawingPath)
        assert path.points == (Point(0, 0), Point(10, 10))

        engine.undo()
        assert engine.elements == ()

        engine.redo()
        assert len(engine.elements) == 1
        assert engine.elements[0].points == (Point(0, 0), Point(10, 10))

    def test_moves_do_not_commit(self, engine: DrawingEngine) -> None:
        """Test only the release commits a stroke."""
        engine.pointer_down(Point(0, 0))
        for step in range(1, 6):
            engine.pointer_move(Point(step, step))
        assert engine.is_drawing
        assert len(engine.elements) == 1
        assert len(engine.history) == 1

        engine.pointer_up()
        assert not engine.is_drawing
        assert engine.in_progress is None
        assert len(engine.history) == 2
        assert len(engine.elements[0].points) == 6

    def test_click_commits_single_point_stroke(self, engine: DrawingEngine) -> None:
        """Test press and release without movement still commits."""
        engine.pointer_down(Point(4, 4))
        engine.pointer_up()
        assert engine.elements[0].points == (Point(4, 4),)
        assert engine.can_undo

    def test_move_without_press_is_ignored(self, engine: DrawingEngine) -> None:
        """Test stray moves and releases do nothing."""
        engine.pointer_move(Point(10, 10))
        engine.pointer_up()
        assert engine.elements == ()
        assert len(engine.history) == 1

    @pytest.mark.parametrize(
        ("tool", "shape_type"),
        [(Tool.RECTANGLE, ShapeType.RECTANGLE), (Tool.CIRCLE, ShapeType.CIRCLE), (Tool.ARROW, ShapeType.ARROW)],
    )
    def test_shape_gesture(self, engine: DrawingEngine, tool: Tool, shape_type: ShapeType) -> None:
        """Test shape tools drag out their end point."""
        engine.set_tool(tool)
        _stroke(engine, (10, 10), (30, 30), (50, 60))
        shape = engine.elements[0]
        assert isinstance(shape, Shape)
        assert shape.shape_type == shape_type
        assert shape.start_point == Point(10, 10)
        assert shape.end_point == Point(50, 60)
        assert len(engine.history) == 2

    def test_press_during_gesture_finishes_it(self, engine: DrawingEngine) -> None:
        """Test a second press commits the unfinished stroke first."""
        engine.pointer_down(Point(0, 0))
        engine.pointer_move(Point(5, 5))
        engine.pointer_down(Point(50, 50))
        engine.pointer_up()
        assert len(engine.elements) == 2
        assert len(engine.history) == 3

    def test_undo_mid_stroke_discards_it(self, engine: DrawingEngine) -> None:
        """Test undo during a gesture drops the uncommitted element."""
        _stroke(engine, (0, 0), (10, 10))
        engine.pointer_down(Point(20, 20))
        engine.pointer_move(Point(30, 30))
        engine.undo()
        assert not engine.is_drawing
        assert engine.elements == ()
        engine.pointer_up()
        assert len(engine.history) == 2


class TestEraser:
    """Tests for the eraser tool."""

    def test_erases_topmost_only(self, engine: DrawingEngine) -> None:
        """Test one press removes only the element painted last."""
        _stroke(engine, (0, 50), (100, 50))
        engine.set_tool(Tool.RECTANGLE)
        _stroke(engine, (0, 0), (100, 100))
        engine.set_tool(Tool.ERASER)

        engine.pointer_down(Point(50, 50))
        engine.pointer_up()
        assert len(engine.elements) == 1
        assert engine.elements[0].element_type == ElementType.PATH
        assert len(engine.history) == 4

        engine.pointer_down(Point(50, 50))
        assert engine.elements == ()

    def test_miss_does_not_commit(self, engine: DrawingEngine) -> None:
        """Test pressing empty space leaves history alone."""
        _stroke(engine, (0, 0), (10, 0))
        engine.set_tool(Tool.ERASER)
        engine.pointer_down(Point(500, 500))
        assert len(engine.elements) == 1
        assert len(engine.history) == 2

    def test_erase_is_undoable(self, engine: DrawingEngine) -> None:
        """Test an erased element comes back on undo."""
        _stroke(engine, (0, 0), (10, 0))
        engine.set_tool(Tool.ERASER)
        engine.pointer_down(Point(5, 0))
        engine.undo()
        assert len(engine.elements) == 1

    def test_erases_images(self, engine: DrawingEngine, imported_factory) -> None:
        """Test images are erasable by box containment."""
        engine.add_image(Point(100, 100), imported_factory(20, 20))
        engine.set_tool(Tool.ERASER)
        engine.pointer_down(Point(110, 110))
        assert engine.elements == ()


class TestTextAndImageTools:
    """Tests for tools that need an external collaborator."""

    def test_text_tool_requests_entry(self, engine: DrawingEngine) -> None:
        """Test the text tool asks for text instead of drawing."""
        engine.set_tool(Tool.TEXT)
        request = engine.pointer_down(Point(20, 30))
        assert request == ToolRequest(kind=RequestKind.TEXT_ENTRY, point=Point(20, 30))
        assert not engine.is_drawing
        assert engine.elements == ()

    def test_blank_text_is_dropped(self, engine: DrawingEngine) -> None:
        """Test whitespace-only text adds nothing and commits nothing."""
        assert engine.add_text(Point(20, 30), "   ") is None
        assert engine.elements == ()
        assert len(engine.history) == 1

    def test_text_is_trimmed_and_committed(self, engine: DrawingEngine) -> None:
        """Test text labels are added as text shapes."""
        engine.set_color("#123456")
        shape = engine.add_text(Point(20, 30), "  hi  ")
        assert shape is not None
        assert shape.text == "hi"
        assert shape.color == "#123456"
        assert engine.elements == (shape,)
        assert len(engine.history) == 2

    def test_image_tool_requests_import(self, engine: DrawingEngine) -> None:
        """Test the image tool asks for an image."""
        engine.set_tool(Tool.IMAGE)
        request = engine.pointer_down(Point(5, 5))
        assert request is not None
        assert request.kind == RequestKind.IMAGE_IMPORT
        assert engine.elements == ()

    def test_other_tools_return_no_request(self, engine: DrawingEngine) -> None:
        """Test drawing tools return nothing from a press."""
        assert engine.pointer_down(Point(0, 0)) is None


class TestImageImport:
    """Tests for the async image import flow."""

    @pytest.mark.asyncio
    async def test_import_places_downscaled_image(self, config, png_factory) -> None:
        """Test an 800x400 image lands as 400x200."""

        async def picker() -> PickedFile:
            return PickedFile(name="wide.png", content=png_factory(800, 400))

        engine = DrawingEngine(config, import_service=ImageImportService(picker))
        element = await engine.import_image(Point(10, 20))
        assert (element.width, element.height) == (400, 200)
        assert (element.original_width, element.original_height) == (400, 200)
        assert element.position == Point(10, 20)
        assert engine.elements == (element,)
        assert len(engine.history) == 2

    @pytest.mark.asyncio
    async def test_cancelled_pick_changes_nothing(self, config) -> None:
        """Test a cancelled picker leaves the document untouched."""

        async def picker() -> None:
            return None

        engine = DrawingEngine(config, import_service=ImageImportService(picker))
        with pytest.raises(ImageImportError, match="No file selected"):
            await engine.import_image(Point(0, 0))
        assert engine.elements == ()
        assert len(engine.history) == 1

    @pytest.mark.asyncio
    async def test_non_image_changes_nothing(self, config) -> None:
        """Test a non-image file is rejected without a commit."""

        async def picker() -> PickedFile:
            return PickedFile(name="notes.txt", content=b"hello")

        engine = DrawingEngine(config, import_service=ImageImportService(picker))
        with pytest.raises(ImageImportError):
            await engine.import_image(Point(0, 0))
        assert len(engine.history) == 1

    @pytest.mark.asyncio
    async def test_concurrent_imports(self, config, png_factory) -> None:
        """Test overlapping imports are each applied once."""

        async def picker() -> PickedFile:
            await asyncio.sleep(0)
            return PickedFile(name="small.png", content=png_factory(30, 20))

        engine = DrawingEngine(config, import_service=ImageImportService(picker))
        await asyncio.gather(engine.import_image(Point(0, 0)), engine.import_image(Point(50, 50)))
        assert len(engine.elements) == 2
        assert len(engine.history) == 3


class TestAdditionsDuringGesture:
    """Tests for text and images added while a gesture is running."""

    @pytest.mark.asyncio
    async def test_import_resolving_mid_stroke(self, config, png_factory) -> None:
        """Test an import landing mid-stroke does not commit the partial stroke."""
        picked = asyncio.Event()

        async def picker() -> PickedFile:
            await picked.wait()
            return PickedFile(name="small.png", content=png_factory(30, 20))

        engine = DrawingEngine(config, import_service=ImageImportService(picker))
        task = asyncio.create_task(engine.import_image(Point(50, 50)))
        await asyncio.sleep(0)

        engine.pointer_down(Point(0, 0))
        engine.pointer_move(Point(5, 5))
        picked.set()
        image = await task
        engine.pointer_move(Point(10, 10))
        engine.pointer_up()

        path, placed = engine.elements
        assert isinstance(path, DrawingPath)
        assert len(path.points) == 3
        assert placed == image
        assert len(engine.history) == 3

        engine.undo()
        assert engine.elements == (image,)
        engine.undo()
        assert engine.elements == ()

    def test_text_added_mid_stroke(self, engine: DrawingEngine) -> None:
        """Test undoing the stroke keeps a label added while it was drawn."""
        engine.pointer_down(Point(0, 0))
        engine.pointer_move(Point(5, 5))
        label = engine.add_text(Point(40, 40), "note")
        engine.pointer_move(Point(10, 10))
        engine.pointer_up()

        assert [e.element_type for e in engine.elements] == [ElementType.PATH, ElementType.SHAPE]
        engine.undo()
        assert engine.elements == (label,)

    def test_text_added_mid_shape(self, engine: DrawingEngine) -> None:
        """Test a rectangle being dragged out is not committed by a new label."""
        engine.set_tool(Tool.RECTANGLE)
        engine.pointer_down(Point(0, 0))
        engine.pointer_move(Point(20, 20))
        label = engine.add_text(Point(40, 40), "note")
        engine.undo()
        assert engine.elements == ()
        engine.redo()
        assert engine.elements == (label,)

    def test_text_added_mid_drag(self, engine: DrawingEngine, placed_image: ImageElement) -> None:
        """Test undoing a drag restores the image and keeps the label."""
        engine.pointer_down(Point(150, 150))
        engine.pointer_move(Point(170, 160))
        label = engine.add_text(Point(0, 0), "note")
        engine.pointer_up()

        moved, _ = engine.elements
        assert moved.position == Point(120, 110)

        engine.undo()
        assert engine.elements == (placed_image, label)

    def test_image_added_mid_resize(
        self,
        engine: DrawingEngine,
        placed_image: ImageElement,
        imported_factory,
    ) -> None:
        """Test an image placed mid-resize does not commit the resize."""
        engine.pointer_down(Point(150, 150))
        engine.pointer_up()

        engine.pointer_down(Point(300, 200))
        assert engine.selection is not None
        assert engine.selection.is_resizing
        engine.pointer_move(Point(400, 250))
        other = engine.add_image(Point(0, 0), imported_factory(30, 20))
        engine.pointer_up()

        resized, _ = engine.elements
        assert resized.width > placed_image.width

        engine.undo()
        assert engine.elements == (placed_image, other)


class TestSelection:
    """Tests for selecting, moving and resizing images."""

    def test_drag_moves_and_commits_once(self, engine: DrawingEngine, placed_image: ImageElement) -> None:
        """Test a drag commits a single snapshot on release."""
        engine.pointer_down(Point(150, 150))
        assert engine.selection is not None
        assert engine.selection.target_id == placed_image.id

        engine.pointer_move(Point(200, 200))
        engine.pointer_move(Point(250, 250))
        assert engine.elements[0].position == Point(200, 200)
        assert len(engine.history) == 2

        engine.pointer_up()
        assert len(engine.history) == 3
        assert engine.selection is not None
        assert not engine.selection.is_dragging

    def test_drag_does_not_alter_history(self, engine: DrawingEngine, placed_image: ImageElement) -> None:
        """Test earlier snapshots keep the original position."""
        engine.pointer_down(Point(150, 150))
        engine.pointer_move(Point(250, 250))
        engine.pointer_up()

        engine.undo()
        assert engine.elements[0].position == Point(100, 100)
        assert engine.selection is not None

    def test_resize_from_handle(self, engine: DrawingEngine, placed_image: ImageElement) -> None:
        """Test dragging the south-east handle keeps the aspect ratio."""
        engine.pointer_down(Point(150, 150))
        engine.pointer_up()

        engine.pointer_down(Point(300, 200))
        assert engine.selection is not None
        assert engine.selection.is_resizing
        engine.pointer_move(Point(500, 0))
        engine.pointer_up()

        image = engine.elements[0]
        assert (image.width, image.height) == (400, 200)
        assert image.position == Point(100, 100)
        assert len(engine.history) == 4

    def test_press_on_empty_space_deselects(self, engine: DrawingEngine, placed_image: ImageElement) -> None:
        """Test deselecting commits nothing."""
        engine.pointer_down(Point(150, 150))
        engine.pointer_up()
        engine.pointer_down(Point(700, 500))
        engine.pointer_up()
        assert engine.selection is None
        assert len(engine.history) == 3

    def test_changing_tool_clears_selection(self, engine: DrawingEngine, placed_image: ImageElement) -> None:
        """Test the selection is dropped when leaving the select tool."""
        engine.pointer_down(Point(150, 150))
        engine.pointer_up()
        engine.set_tool(Tool.PEN)
        assert engine.selection is None

    def test_undo_removing_target_clears_selection(self, engine: DrawingEngine, placed_image: ImageElement) -> None:
        """Test undo never leaves a selection on a missing image."""
        engine.pointer_down(Point(150, 150))
        engine.pointer_up()
        engine.undo()
        engine.undo()
        assert engine.elements == ()
        assert engine.selection is None

    def test_overlay_only_under_select(self, engine: DrawingEngine, placed_image: ImageElement) -> None:
        """Test the overlay lists eight handles for the selected image."""
        assert engine.selection_overlay() is None
        engine.pointer_down(Point(150, 150))
        engine.pointer_up()

        overlay = engine.selection_overlay()
        assert overlay is not None
        assert overlay.image.id == placed_image.id
        assert len(overlay.handles) == 8
        assert overlay.handle_size == 8

    def test_shapes_are_not_selectable(self, engine: DrawingEngine) -> None:
        """Test the select tool ignores strokes and shapes."""
        _stroke(engine, (0, 0), (100, 0))
        engine.set_tool(Tool.SELECT)
        engine.pointer_down(Point(50, 0))
        engine.pointer_move(Point(80, 80))
        engine.pointer_up()
        assert engine.selection is None
        assert engine.elements[0].points[0] == Point(0, 0)


class TestDocumentActions:
    """Tests for clear, load, undo and redo."""

    def test_clear_is_undoable(self, engine: DrawingEngine) -> None:
        """Test clearing commits an empty snapshot."""
        _stroke(engine, (0, 0), (10, 10))
        engine.clear()
        assert engine.elements == ()
        assert len(engine.history) == 3
        engine.undo()
        assert len(engine.elements) == 1

    def test_load_is_undoable(self, engine: DrawingEngine, sample_path: DrawingPath, sample_image) -> None:
        """Test loading commits the loaded elements."""
        engine.load([sample_path, sample_image])
        assert engine.elements == (sample_path, sample_image)
        engine.undo()
        assert engine.elements == ()

    def test_new_action_discards_redo(self, engine: DrawingEngine) -> None:
        """Test drawing after undo makes redo impossible."""
        _stroke(engine, (0, 0), (10, 10))
        _stroke(engine, (20, 20), (30, 30))
        engine.undo()
        _stroke(engine, (40, 40), (50, 50))
        assert not engine.can_redo
        engine.redo()
        assert [e.points[0] for e in engine.elements] == [Point(0, 0), Point(40, 40)]

    def test_undo_redo_at_boundaries(self, engine: DrawingEngine) -> None:
        """Test undo and redo are no-ops at the ends of history."""
        engine.undo()
        assert engine.elements == ()
        _stroke(engine, (0, 0), (10, 10))
        engine.redo()
        assert len(engine.elements) == 1
        assert engine.history.cursor == 1
