"""Core domain models for sketchpad-py."""

from sketchpad_py.core.history import HistoryLedger
from sketchpad_py.core.models import (
    DrawingElement,
    DrawingPath,
    Element,
    ImageElement,
    Point,
    ResizeHandle,
    Shape,
)
from sketchpad_py.core.style import ElementStyle
from sketchpad_py.core.transform import SelectionController, SelectionState
from sketchpad_py.core.types import ElementType, HandlePosition, RequestKind, ShapeType, Tool

__all__ = [
    "DrawingElement",
    "DrawingPath",
    "Element",
    "ElementStyle",
    "ElementType",
    "HandlePosition",
    "HistoryLedger",
    "ImageElement",
    "Point",
    "RequestKind",
    "ResizeHandle",
    "SelectionController",
    "SelectionState",
    "Shape",
    "ShapeType",
    "Tool",
]
