"""Image import service: picking, decoding and downscaling images."""

from __future__ import annotations

import asyncio
import base64
import binascii
import io
import mimetypes
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from PIL import Image

from sketchpad_py.exceptions import ImageImportError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from pathlib import Path

logger = structlog.get_logger(__name__)

DATA_URL_PREFIX = "data:"


@dataclass(frozen=True)
class PickedFile:
    """A file handed over by a file picker.

    Attributes:
        name: File name, used to guess the content type.
        content: Raw file bytes.
        content_type: MIME type reported by the picker, if any.
    """

    name: str
    content: bytes
    content_type: str | None = None


@dataclass(frozen=True)
class ImportedImage:
    """A decoded image ready to be placed on the canvas.

    Attributes:
        data: Encoded bitmap as a ``data:`` URL.
        width: Pixel width.
        height: Pixel height.
    """

    data: str
    width: int
    height: int


def encode_data_url(content: bytes, content_type: str = "image/png") -> str:
    """Encode raw bytes as a base64 ``data:`` URL."""
    return f"{DATA_URL_PREFIX}{content_type};base64,{base64.b64encode(content).decode('ascii')}"


def decode_data_url(data: str) -> bytes:
    """Decode a base64 ``data:`` URL back into raw bytes.

    Raises:
        ImageImportError: If the string is not a base64 data URL.
    """
    header, sep, payload = data.partition(",")
    if not sep or not header.startswith(DATA_URL_PREFIX) or not header.endswith(";base64"):
        msg = "Image data is not a base64 data URL"
        raise ImageImportError(msg)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        msg = "Image data is not valid base64"
        raise ImageImportError(msg) from exc


def fit_within(width: int, height: int, max_width: int, max_height: int) -> tuple[int, int]:
    """Scale ``width`` x ``height`` down to fit the bound, keeping aspect ratio.

    Images already inside the bound keep their size.
    """
    if width <= max_width and height <= max_height:
        return width, height
    scale = min(max_width / width, max_height / height)
    return max(1, round(width * scale)), max(1, round(height * scale))


class ImageImportService:
    """Service for bringing raster images into a drawing.

    The file picker is an injected async callable so that any front end
    (dialog, drag-and-drop, CLI argument) can supply the file.

    Usage:
        service = ImageImportService(picker=my_picker)
        image = await service.request_image()
        image = service.downscale(image, 400, 400)
    """

    def __init__(self, picker: Callable[[], Awaitable[PickedFile | None]] | None = None) -> None:
        """Initialize the import service.

        Args:
            picker: Async callable returning the chosen file, or None when the
                user cancels.
        """
        self._picker = picker

    async def request_image(self) -> ImportedImage:
        """Ask the picker for a file and decode it.

        Returns:
            The decoded image at its source size.

        Raises:
            ImageImportError: If no file is chosen, the file is not an image,
                or it cannot be decoded.
        """
        if self._picker is None:
            msg = "No file picker configured"
            raise ImageImportError(msg)
        picked = await self._picker()
        if picked is None:
            msg = "No file selected"
            raise ImageImportError(msg)
        return await asyncio.to_thread(self.decode, picked)

    def decode(self, picked: PickedFile) -> ImportedImage:
        """Validate and decode a picked file.

        Raises:
            ImageImportError: If the file is not an image or cannot be decoded.
        """
        content_type = picked.content_type or mimetypes.guess_type(picked.name)[0]
        if not content_type or not content_type.startswith("image/"):
            msg = f"File must be an image: {picked.name}"
            raise ImageImportError(msg)

        try:
            with Image.open(io.BytesIO(picked.content)) as image:
                image.load()
                width, height = image.size
        except (OSError, Image.DecompressionBombError) as exc:
            msg = f"Could not decode image: {picked.name}"
            raise ImageImportError(msg) from exc

        logger.info("Image decoded", name=picked.name, width=width, height=height)
        return ImportedImage(data=encode_data_url(picked.content, content_type), width=width, height=height)

    def load_file(self, path: Path) -> ImportedImage:
        """Read and decode an image file from disk.

        Raises:
            ImageImportError: If the file cannot be read or decoded.
        """
        try:
            content = path.read_bytes()
        except OSError as exc:
            msg = f"Could not read file: {path}"
            raise ImageImportError(msg) from exc
        return self.decode(PickedFile(name=path.name, content=content))

    def downscale(self, image: ImportedImage, max_width: int, max_height: int) -> ImportedImage:
        """Shrink an image to fit within a bound, keeping its aspect ratio.

        The result is always re-encoded as PNG.

        Args:
            image: The decoded image.
            max_width: Maximum width.
            max_height: Maximum height.

        Returns:
            The (possibly) resized image.

        Raises:
            ImageImportError: If the image data cannot be decoded.
        """
        width, height = fit_within(image.width, image.height, max_width, max_height)
        try:
            with Image.open(io.BytesIO(decode_data_url(image.data))) as source:
                resized = source.convert("RGBA").resize((width, height), Image.Resampling.LANCZOS)
        except (OSError, Image.DecompressionBombError) as exc:
            msg = "Could not decode image for resizing"
            raise ImageImportError(msg) from exc

        buffer = io.BytesIO()
        resized.save(buffer, format="PNG")
        if (width, height) != (image.width, image.height):
            logger.debug("Image downscaled", width=width, height=height, source_width=image.width)
        return ImportedImage(data=encode_data_url(buffer.getvalue()), width=width, height=height)
