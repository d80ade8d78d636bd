"""
Loremaster: name resolution and timeline search for a campaign assistant.

Resolves misspelled character names to canonical identities and ranks
campaign timeline events against free-text questions.
"""

__version__ = "0.1.0"
__author__ = "Loremaster Project"

# Import main components
from .cache import CacheManager, TimelineSnapshot
from .config import ConfigManager
from .importers import BaseImporter, StaticImporter
from .indexing import IndexBuilder, SearchEngine, TimelineIndices
from .models import CacheStats, Event, EventRecord, RankedEvent, RebuildResult
from .resolution import NameRegistry

__all__ = [
    "CacheManager",
    "TimelineSnapshot",
    "ConfigManager",
    "BaseImporter",
    "StaticImporter",
    "IndexBuilder",
    "SearchEngine",
    "TimelineIndices",
    "CacheStats",
    "Event",
    "EventRecord",
    "RankedEvent",
    "RebuildResult",
    "NameRegistry"
]
