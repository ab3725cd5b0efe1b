"""Persistence service saving and loading drawings to a storage slot."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from sketchpad_py.core.serialization import dumps_document, loads_document
from sketchpad_py.exceptions import DocumentLoadError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sketchpad_py.core.engine import DrawingEngine
    from sketchpad_py.core.models import DrawingElement
    from sketchpad_py.storage.base import StorageProtocol

logger = structlog.get_logger(__name__)

DEFAULT_SLOT = "drawing_save"


class PersistenceService:
    """Service saving the element collection to a fixed storage slot.

    There is no schema versioning: the payload mirrors the element model, so
    any change to the model is a breaking change for saved drawings.

    Attributes:
        slot: Name of the storage slot.
    """

    def __init__(self, storage: StorageProtocol, slot: str = DEFAULT_SLOT) -> None:
        """Initialize the persistence service.

        Args:
            storage: Storage backend implementing StorageProtocol.
            slot: Name of the storage slot.
        """
        self._storage = storage
        self.slot = slot

    def save(self, elements: Iterable[DrawingElement]) -> None:
        """Serialize and store the elements.

        Raises:
            StorageError: If the storage backend fails.
        """
        elements = list(elements)
        self._storage.save(self.slot, dumps_document(elements))
        logger.info("Drawing saved", slot=self.slot, elements=len(elements))

    def load(self) -> list[DrawingElement]:
        """Read and decode the stored elements.

        Returns:
            The decoded elements.

        Raises:
            DocumentLoadError: If nothing is stored or the payload is malformed.
            StorageError: If the storage backend fails.
        """
        payload = self._storage.load(self.slot)
        if payload is None:
            msg = f"No saved drawing in slot {self.slot!r}"
            raise DocumentLoadError(msg)
        try:
            elements = loads_document(payload)
        except DocumentLoadError as exc:
            logger.warning("Saved drawing is malformed", slot=self.slot, error=str(exc))
            raise
        logger.info("Drawing loaded", slot=self.slot, elements=len(elements))
        return elements

    def restore(self, engine: DrawingEngine) -> None:
        """Load the stored drawing into ``engine``.

        The engine is only touched once the whole payload decoded.

        Raises:
            DocumentLoadError: If nothing is stored or the payload is malformed.
        """
        engine.load(self.load())
