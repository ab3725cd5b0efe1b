"""Custom exceptions for sketchpad-py."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID


class SketchpadError(Exception):
    """Base exception class for all sketchpad-py errors."""


class InvalidElementError(SketchpadError):
    """Raised when an element or style value is invalid or malformed."""

    def __init__(self, message: str) -> None:
        """Initialize the exception with a custom message.

        Args:
            message: Description of why the element is invalid.
        """
        super().__init__(message)


class InvalidToolError(SketchpadError):
    """Raised when an unknown tool name is requested.

    Attributes:
        tool: The tool name that was requested.
    """

    def __init__(self, tool: str) -> None:
        """Initialize the exception with the tool name.

        Args:
            tool: The unknown tool name.
        """
        self.tool = tool
        super().__init__(f"Unknown tool: {tool}")


class ElementNotFoundError(SketchpadError):
    """Raised when an element with the specified ID is not in the document.

    Attributes:
        element_id: The UUID of the element that was not found.
    """

    def __init__(self, element_id: UUID) -> None:
        """Initialize the exception with the element ID.

        Args:
            element_id: The UUID of the element that was not found.
        """
        self.element_id = element_id
        super().__init__(f"Element with ID {element_id} not found")


class ImageImportError(SketchpadError):
    """Raised when an image cannot be picked, read or decoded."""


class DocumentLoadError(SketchpadError):
    """Raised when persisted drawing data cannot be parsed."""


class StorageError(SketchpadError):
    """Raised when a storage operation fails."""
