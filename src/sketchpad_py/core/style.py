"""Style definitions for the drawing engine."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ElementStyle:
    """Styling applied to newly created strokes and shapes.

    Attributes:
        color: Stroke color in hex format.
        stroke_width: Width of the stroke in canvas units.
    """

    color: str = "#000000"
    stroke_width: float = 2.0
