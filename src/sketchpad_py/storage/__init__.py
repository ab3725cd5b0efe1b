"""Storage backends for sketchpad-py."""

from __future__ import annotations

from sketchpad_py.storage.base import StorageProtocol
from sketchpad_py.storage.file import FileStorage
from sketchpad_py.storage.memory import InMemoryStorage

__all__ = ["FileStorage", "InMemoryStorage", "StorageProtocol"]
