"""Storage protocol definition for sketchpad-py."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class StorageProtocol(Protocol):
    """Protocol defining the storage interface for saved drawings.

    A storage backend maps named slots to serialized document payloads. The
    payload is opaque to the backend.
    """

    def save(self, slot: str, payload: str) -> None:
        """Write a payload to a slot, replacing any previous content.

        Args:
            slot: Name of the storage slot.
            payload: Serialized document.

        Raises:
            StorageError: If the payload cannot be written.
        """
        ...

    def load(self, slot: str) -> str | None:
        """Read the payload stored in a slot.

        Args:
            slot: Name of the storage slot.

        Returns:
            The payload if the slot exists, None otherwise.

        Raises:
            StorageError: If the slot exists but cannot be read.
        """
        ...

    def delete(self, slot: str) -> bool:
        """Remove a slot.

        Args:
            slot: Name of the storage slot.

        Returns:
            True if the slot was removed, False if it did not exist.
        """
        ...

    def list_slots(self) -> list[str]:
        """List the names of all stored slots, sorted alphabetically."""
        ...
