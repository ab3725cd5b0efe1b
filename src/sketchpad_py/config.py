"""Configuration for sketchpad-py."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from sketchpad_py.core.types import Tool


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def _env_bool(name: str, *, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class SketchpadConfig:
    """Configuration for the drawing engine and its services.

    Environment variables:
        SKETCHPAD_HANDLE_SIZE: Side length of image resize handles.
        SKETCHPAD_MIN_IMAGE_SIZE: Minimum image width/height while resizing.
        SKETCHPAD_ERASER_TOLERANCE: Eraser distance tolerance for strokes.
        SKETCHPAD_MAX_IMPORT_WIDTH: Imported images are downscaled to fit this width.
        SKETCHPAD_MAX_IMPORT_HEIGHT: Imported images are downscaled to fit this height.
        SKETCHPAD_STORAGE_DIR: Directory used by file storage.
        SKETCHPAD_DEBUG: Enable debug logging.
        SKETCHPAD_JSON_LOGS: Emit logs as JSON.

    Example:
        >>> config = SketchpadConfig(default_color="#ff0000", max_import_width=800)
    """

    # Interaction
    default_tool: Tool = Tool.PEN
    default_color: str = "#000000"
    default_stroke_width: float = 2.0
    handle_size: float = field(default_factory=lambda: _env_float("SKETCHPAD_HANDLE_SIZE", 8.0))
    min_image_size: float = field(default_factory=lambda: _env_float("SKETCHPAD_MIN_IMAGE_SIZE", 20.0))
    eraser_tolerance: float = field(default_factory=lambda: _env_float("SKETCHPAD_ERASER_TOLERANCE", 10.0))
    arrow_tolerance: float = 10.0

    # Image import
    max_import_width: int = field(default_factory=lambda: int(_env_float("SKETCHPAD_MAX_IMPORT_WIDTH", 400)))
    max_import_height: int = field(default_factory=lambda: int(_env_float("SKETCHPAD_MAX_IMPORT_HEIGHT", 400)))

    # Canvas and export
    canvas_width: int = 800
    canvas_height: int = 600

    # Persistence
    storage_slot: str = "drawing_save"
    storage_dir: Path = field(default_factory=lambda: Path(os.getenv("SKETCHPAD_STORAGE_DIR", ".sketchpad")))

    # Logging
    debug: bool = field(default_factory=lambda: _env_bool("SKETCHPAD_DEBUG"))
    json_logs: bool = field(default_factory=lambda: _env_bool("SKETCHPAD_JSON_LOGS"))
