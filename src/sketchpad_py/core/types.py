"""Core type definitions for sketchpad-py."""

from __future__ import annotations

from enum import StrEnum


class ElementType(StrEnum):
    """Discriminant tag carried by every drawing element."""

    PATH = "path"
    SHAPE = "shape"
    IMAGE = "image"


class ShapeType(StrEnum):
    """Enumeration of parametric shape kinds."""

    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    ARROW = "arrow"
    TEXT = "text"


class Tool(StrEnum):
    """Enumeration of the interaction tools."""

    PEN = "pen"
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    ARROW = "arrow"
    TEXT = "text"
    ERASER = "eraser"
    IMAGE = "image"
    SELECT = "select"


SHAPE_TOOLS: dict[Tool, ShapeType] = {
    Tool.RECTANGLE: ShapeType.RECTANGLE,
    Tool.CIRCLE: ShapeType.CIRCLE,
    Tool.ARROW: ShapeType.ARROW,
}


class HandlePosition(StrEnum):
    """Resize handle positions, in hit-test order."""

    NW = "nw"
    NE = "ne"
    SW = "sw"
    SE = "se"
    N = "n"
    S = "s"
    W = "w"
    E = "e"


class RequestKind(StrEnum):
    """Kinds of collaborator requests emitted by a pointer press."""

    TEXT_ENTRY = "text_entry"
    IMAGE_IMPORT = "image_import"
