"""In-memory storage implementation for sketchpad-py."""

from __future__ import annotations


class InMemoryStorage:
    """In-memory storage implementation.

    Note:
        All data is lost when the process stops. This storage is suitable for
        tests and ephemeral sessions.

    Attributes:
        _slots: Internal dictionary mapping slot names to payloads.
    """

    def __init__(self) -> None:
        """Initialize the storage with no slots."""
        self._slots: dict[str, str] = {}

    def save(self, slot: str, payload: str) -> None:
        """Write a payload to a slot."""
        self._slots[slot] = payload

    def load(self, slot: str) -> str | None:
        """Read the payload stored in a slot, or None."""
        return self._slots.get(slot)

    def delete(self, slot: str) -> bool:
        """Remove a slot, returning whether it existed."""
        return self._slots.pop(slot, None) is not None

    def list_slots(self) -> list[str]:
        """List stored slot names."""
        return sorted(self._slots)
