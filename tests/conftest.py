"""Pytest configuration and fixtures for sketchpad-py tests."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

import pytest
from PIL import Image

from sketchpad_py.config import SketchpadConfig
from sketchpad_py.core.engine import DrawingEngine
from sketchpad_py.core.models import DrawingPath, ImageElement, Point, Shape
from sketchpad_py.core.style import ElementStyle
from sketchpad_py.core.types import ShapeType
from sketchpad_py.services.imports import ImportedImage, encode_data_url
from sketchpad_py.storage.memory import InMemoryStorage

if TYPE_CHECKING:
    from collections.abc import Callable


def _make_png(width: int, height: int, color: tuple[int, int, int, int] = (255, 0, 0, 255)) -> bytes:
    """Create a solid-color PNG of the given size."""
    buffer = io.BytesIO()
    Image.new("RGBA", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def _make_imported(width: int, height: int, color: tuple[int, int, int, int] = (255, 0, 0, 255)) -> ImportedImage:
    """Create an ImportedImage backed by a real PNG."""
    return ImportedImage(data=encode_data_url(_make_png(width, height, color)), width=width, height=height)


# Engine fixtures


@pytest.fixture
def config() -> SketchpadConfig:
    """Create a config with the documented defaults."""
    return SketchpadConfig(
        handle_size=8.0,
        min_image_size=20.0,
        eraser_tolerance=10.0,
        max_import_width=400,
        max_import_height=400,
    )


@pytest.fixture
def engine(config: SketchpadConfig) -> DrawingEngine:
    """Create a fresh engine with an empty document."""
    return DrawingEngine(config)


@pytest.fixture
def storage() -> InMemoryStorage:
    """Create a fresh InMemoryStorage instance for each test."""
    return InMemoryStorage()


# Image fixtures


@pytest.fixture
def png_factory() -> Callable[..., bytes]:
    """Return a factory producing solid-color PNG bytes."""
    return _make_png


@pytest.fixture
def imported_factory() -> Callable[..., ImportedImage]:
    """Return a factory producing decoded images backed by real PNG data."""
    return _make_imported


# Model fixtures


@pytest.fixture
def sample_style() -> ElementStyle:
    """Create a non-default style for testing."""
    return ElementStyle(color="#ff0000", stroke_width=3.0)


@pytest.fixture
def sample_path() -> DrawingPath:
    """Create a horizontal stroke from (0, 50) to (100, 50)."""
    return DrawingPath(points=(Point(0, 50), Point(50, 50), Point(100, 50)), color="#ff0000", stroke_width=4.0)


@pytest.fixture
def sample_rectangle() -> Shape:
    """Create a rectangle covering (0, 0)-(100, 100)."""
    return Shape(shape_type=ShapeType.RECTANGLE, start_point=Point(0, 0), end_point=Point(100, 100))


@pytest.fixture
def sample_image() -> ImageElement:
    """Create a 200x100 image at (100, 100) with a 2:1 source."""
    return ImageElement(
        position=Point(100, 100),
        width=200.0,
        height=100.0,
        image_data=encode_data_url(_make_png(200, 100)),
        original_width=200.0,
        original_height=100.0,
    )
