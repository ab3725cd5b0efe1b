"""JSON-compatible encoding and strict decoding of drawing elements."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sketchpad_py.core.models import DrawingPath, ImageElement, Point, Shape
from sketchpad_py.core.types import ElementType, ShapeType, Tool
from sketchpad_py.exceptions import DocumentLoadError, InvalidElementError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sketchpad_py.core.models import DrawingElement


def _point_to_dict(point: Point) -> dict[str, float]:
    return {"x": point.x, "y": point.y}


def _point_from_dict(data: Any) -> Point:
    if not isinstance(data, dict):
        msg = f"Expected a point object, got {type(data).__name__}"
        raise DocumentLoadError(msg)
    return Point(x=_number(data, "x"), y=_number(data, "y"))


def _number(data: dict[str, Any], key: str) -> float:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int | float):
        msg = f"Field {key!r} must be a number"
        raise DocumentLoadError(msg)
    return float(value)


def _string(data: dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        msg = f"Field {key!r} must be a string"
        raise DocumentLoadError(msg)
    return value


def element_to_dict(element: DrawingElement) -> dict[str, Any]:
    """Convert an element to a JSON-compatible dictionary.

    Raises:
        InvalidElementError: If the element carries an unknown type tag.
    """
    base: dict[str, Any] = {
        "id": str(element.id),
        "element_type": element.element_type.value,
    }

    if element.element_type == ElementType.PATH:
        base["points"] = [_point_to_dict(p) for p in element.points]
        base["color"] = element.color
        base["stroke_width"] = element.stroke_width
        base["tool"] = element.tool.value

    elif element.element_type == ElementType.SHAPE:
        base["shape_type"] = element.shape_type.value
        base["start_point"] = _point_to_dict(element.start_point)
        base["end_point"] = _point_to_dict(element.end_point)
        base["color"] = element.color
        base["stroke_width"] = element.stroke_width
        base["text"] = element.text

    elif element.element_type == ElementType.IMAGE:
        base["position"] = _point_to_dict(element.position)
        base["width"] = element.width
        base["height"] = element.height
        base["image_data"] = element.image_data
        base["original_width"] = element.original_width
        base["original_height"] = element.original_height

    else:
        msg = f"Unknown element type: {element.element_type}"
        raise InvalidElementError(msg)

    return base


def element_from_dict(data: Any) -> DrawingElement:
    """Rebuild an element from its dictionary form.

    Raises:
        DocumentLoadError: If the data does not describe a valid element.
    """
    if not isinstance(data, dict):
        msg = f"Expected an element object, got {type(data).__name__}"
        raise DocumentLoadError(msg)

    try:
        element_id = UUID(_string(data, "id"))
        element_type = ElementType(data["element_type"])

        if element_type == ElementType.PATH:
            raw_points = data["points"]
            if not isinstance(raw_points, list) or not raw_points:
                msg = "A path needs at least one point"
                raise DocumentLoadError(msg)
            return DrawingPath(
                id=element_id,
                points=tuple(_point_from_dict(p) for p in raw_points),
                color=_string(data, "color"),
                stroke_width=_number(data, "stroke_width"),
                tool=Tool(data.get("tool", Tool.PEN.value)),
            )

        if element_type == ElementType.SHAPE:
            text = data.get("text")
            if text is not None and not isinstance(text, str):
                msg = "Field 'text' must be a string"
                raise DocumentLoadError(msg)
            return Shape(
                id=element_id,
                shape_type=ShapeType(data["shape_type"]),
                start_point=_point_from_dict(data["start_point"]),
                end_point=_point_from_dict(data["end_point"]),
                color=_string(data, "color"),
                stroke_width=_number(data, "stroke_width"),
                text=text,
            )

        return ImageElement(
            id=element_id,
            position=_point_from_dict(data["position"]),
            width=_number(data, "width"),
            height=_number(data, "height"),
            image_data=_string(data, "image_data"),
            original_width=_number(data, "original_width"),
            original_height=_number(data, "original_height"),
        )
    except KeyError as exc:
        msg = f"Missing field {exc.args[0]!r}"
        raise DocumentLoadError(msg) from exc
    except ValueError as exc:
        msg = f"Invalid element data: {exc}"
        raise DocumentLoadError(msg) from exc


def document_to_dict(elements: Iterable[DrawingElement], *, timestamp: datetime | None = None) -> dict[str, Any]:
    """Build the persisted document payload."""
    return {
        "elements": [element_to_dict(e) for e in elements],
        "timestamp": (timestamp or datetime.now(UTC)).isoformat(),
    }


def document_from_dict(data: Any) -> list[DrawingElement]:
    """Decode every element of a persisted payload.

    Decoding is all-or-nothing: the first invalid element aborts the whole
    load, so callers never see a partial document. Element ids must be unique.

    Raises:
        DocumentLoadError: If the payload or any element is invalid.
    """
    if not isinstance(data, dict) or not isinstance(data.get("elements"), list):
        msg = "Document must be an object with an 'elements' list"
        raise DocumentLoadError(msg)

    elements = [element_from_dict(item) for item in data["elements"]]
    if len({e.id for e in elements}) != len(elements):
        msg = "Document contains duplicate element ids"
        raise DocumentLoadError(msg)
    return elements


def dumps_document(elements: Iterable[DrawingElement], *, indent: int | None = None) -> str:
    """Serialize elements to a JSON document string."""
    return json.dumps(document_to_dict(elements), indent=indent)


def loads_document(text: str) -> list[DrawingElement]:
    """Parse a JSON document string into elements.

    Raises:
        DocumentLoadError: If the text is not valid JSON or not a valid document.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"Document is not valid JSON: {exc.msg}"
        raise DocumentLoadError(msg) from exc
    return document_from_dict(data)
