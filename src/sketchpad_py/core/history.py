"""Linear snapshot history for undo/redo functionality."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sketchpad_py.core.models import DrawingElement

HistorySnapshot: TypeAlias = "tuple[DrawingElement, ...]"


class HistoryLedger:
    """Manages document snapshots for undo/redo functionality.

    The ledger is a list of full-document snapshots plus a cursor. The first
    snapshot is always the empty document and the visible document is always
    the snapshot under the cursor. History is strictly linear: committing
    after an undo discards every snapshot past the cursor.
    """

    def __init__(self) -> None:
        """Initialize the ledger with a single empty snapshot."""
        self._snapshots: list[HistorySnapshot] = [()]
        self._cursor = 0

    def commit(self, snapshot: Iterable[DrawingElement]) -> None:
        """Record a new snapshot after the cursor.

        Any redo-able snapshots after the cursor are dropped, since a new
        action invalidates the undone future.

        Args:
            snapshot: The full element collection to record.
        """
        del self._snapshots[self._cursor + 1 :]
        self._snapshots.append(tuple(snapshot))
        self._cursor = len(self._snapshots) - 1

    def undo(self) -> HistorySnapshot:
        """Move the cursor one snapshot back, if possible.

        Returns:
            The snapshot now under the cursor.
        """
        if self._cursor > 0:
            self._cursor -= 1
        return self.current()

    def redo(self) -> HistorySnapshot:
        """Move the cursor one snapshot forward, if possible.

        Returns:
            The snapshot now under the cursor.
        """
        if self._cursor < len(self._snapshots) - 1:
            self._cursor += 1
        return self.current()

    def current(self) -> HistorySnapshot:
        """Return the snapshot under the cursor."""
        return self._snapshots[self._cursor]

    def can_undo(self) -> bool:
        """Check if there is an earlier snapshot to return to."""
        return self._cursor > 0

    def can_redo(self) -> bool:
        """Check if there is a later snapshot to return to."""
        return self._cursor < len(self._snapshots) - 1

    @property
    def cursor(self) -> int:
        """Index of the visible snapshot."""
        return self._cursor

    def __len__(self) -> int:
        """Number of snapshots held, including the initial empty one."""
        return len(self._snapshots)
