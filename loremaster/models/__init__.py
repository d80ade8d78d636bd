"""Data models for Loremaster."""

from .events import Event, EventRecord, RankedEvent, parse_year
from .snapshot import CacheStats, RebuildResult, SnapshotRecord, TimelineOverview

__all__ = [
    "Event",
    "EventRecord",
    "RankedEvent",
    "parse_year",
    "CacheStats",
    "RebuildResult",
    "SnapshotRecord",
    "TimelineOverview"
]
