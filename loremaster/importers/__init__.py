"""Event sources for the campaign timeline."""

from .base import BaseImporter, normalize_events
from .static import StaticImporter

__all__ = ["BaseImporter", "StaticImporter", "normalize_events"]
