"""Sketchpad-py: a drawing-state engine for interactive 2D drawing surfaces.

This package provides the in-memory document model for freehand strokes,
shapes, text labels and placed images, the pointer-event state machine that
creates and edits them, hit-testing geometry for selection and erasing, and a
linear undo/redo history. Around that core it ships image import, Pillow
rendering and export, local JSON persistence, and a command line.

Key Components:
    - Core Models: Point, DrawingPath, Shape, ImageElement
    - Engine: DrawingEngine (tools, pointer events, undo/redo)
    - History: HistoryLedger (linear snapshot history)
    - Services: ExportService, ImageImportService, PersistenceService
    - Storage: InMemoryStorage, FileStorage, StorageProtocol

Quick Start:
    >>> from sketchpad_py import DrawingEngine, Point
    >>>
    >>> engine = DrawingEngine()
    >>> engine.pointer_down(Point(0, 0))
    >>> engine.pointer_move(Point(10, 10))
    >>> engine.pointer_up()
    >>> len(engine.elements)
    1
    >>> engine.undo()
    >>> len(engine.elements)
    0
"""

from __future__ import annotations

from sketchpad_py.config import SketchpadConfig
from sketchpad_py.core import (
    DrawingElement,
    DrawingPath,
    ElementStyle,
    ElementType,
    HandlePosition,
    HistoryLedger,
    ImageElement,
    Point,
    RequestKind,
    ResizeHandle,
    Shape,
    ShapeType,
    Tool,
)
from sketchpad_py.core.engine import DrawingEngine, SelectionOverlay, ToolRequest
from sketchpad_py.exceptions import (
    DocumentLoadError,
    ElementNotFoundError,
    ImageImportError,
    InvalidElementError,
    InvalidToolError,
    SketchpadError,
    StorageError,
)
from sketchpad_py.services import ExportService, ImageImportService, ImportedImage, PersistenceService, PickedFile
from sketchpad_py.storage import FileStorage, InMemoryStorage, StorageProtocol

__all__ = [
    "DocumentLoadError",
    "DrawingElement",
    "DrawingEngine",
    "DrawingPath",
    "ElementNotFoundError",
    "ElementStyle",
    "ElementType",
    "ExportService",
    "FileStorage",
    "HandlePosition",
    "HistoryLedger",
    "ImageElement",
    "ImageImportError",
    "ImageImportService",
    "ImportedImage",
    "InMemoryStorage",
    "InvalidElementError",
    "InvalidToolError",
    "PersistenceService",
    "PickedFile",
    "Point",
    "RequestKind",
    "ResizeHandle",
    "SelectionOverlay",
    "Shape",
    "ShapeType",
    "SketchpadConfig",
    "SketchpadError",
    "StorageError",
    "StorageProtocol",
    "Tool",
    "ToolRequest",
]

__version__ = "0.1.0"
