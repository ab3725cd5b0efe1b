"""Collaborator services for sketchpad-py."""

from sketchpad_py.services.export import ExportService
from sketchpad_py.services.imports import ImageImportService, ImportedImage, PickedFile
from sketchpad_py.services.persistence import PersistenceService

__all__ = ["ExportService", "ImageImportService", "ImportedImage", "PersistenceService", "PickedFile"]
