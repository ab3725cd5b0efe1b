"""File-system storage implementation for sketchpad-py."""

from __future__ import annotations

import re
from pathlib import Path

import structlog

from sketchpad_py.exceptions import StorageError

logger = structlog.get_logger(__name__)

_SLOT_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileStorage:
    """Storage backend keeping one JSON file per slot in a directory.

    Attributes:
        directory: Directory holding the ``<slot>.json`` files.
    """

    def __init__(self, directory: Path | str) -> None:
        """Initialize the storage.

        Args:
            directory: Directory for slot files. Created on first save.
        """
        self.directory = Path(directory)

    def _path(self, slot: str) -> Path:
        if not _SLOT_PATTERN.match(slot) or slot.startswith("."):
            msg = f"Invalid slot name: {slot!r}"
            raise StorageError(msg)
        return self.directory / f"{slot}.json"

    def save(self, slot: str, payload: str) -> None:
        """Write a payload to a slot file.

        Raises:
            StorageError: If the slot name is invalid or the file cannot be written.
        """
        path = self._path(slot)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(payload, encoding="utf-8")
        except OSError as exc:
            msg = f"Could not write slot {slot!r}: {exc}"
            raise StorageError(msg) from exc
        logger.debug("Slot written", slot=slot, path=str(path), size=len(payload))

    def load(self, slot: str) -> str | None:
        """Read a slot file, or return None if it does not exist.

        Raises:
            StorageError: If the slot name is invalid or the file cannot be read.
        """
        path = self._path(slot)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Could not read slot {slot!r}: {exc}"
            raise StorageError(msg) from exc

    def delete(self, slot: str) -> bool:
        """Remove a slot file, returning whether it existed."""
        path = self._path(slot)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as exc:
            msg = f"Could not delete slot {slot!r}: {exc}"
            raise StorageError(msg) from exc
        return True

    def list_slots(self) -> list[str]:
        """List slot names found in the directory."""
        if not self.directory.is_dir():
            return []
        return sorted(path.stem for path in self.directory.glob("*.json"))
