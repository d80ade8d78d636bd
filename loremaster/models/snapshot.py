"""
Snapshot and maintenance models for Loremaster.

These are the records exchanged with the cache layer: the on-disk snapshot
format and the results reported back to whoever triggers a rebuild.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .events import Event


class SnapshotRecord(BaseModel):
    """
    The persisted form of a timeline snapshot.

    Indices are never stored; they are rebuilt from `events` on load.
    """

    events: List[Event] = Field(
        default_factory=list,
        description="Every stored event in source order"
    )

    last_build_time: Optional[datetime] = Field(
        default=None,
        alias="lastBuildTime",
        description="When the snapshot was built (ISO-8601 on disk)"
    )

    previous_event_count: Optional[int] = Field(
        default=None,
        alias="previousEventCount",
        description="Event count at build time, used to detect appended events"
    )

    model_config = ConfigDict(populate_by_name=True)


class RebuildResult(BaseModel):
    """
    The outcome of a cache rebuild.
    """

    new_events: List[Event] = Field(
        default_factory=list,
        alias="newEvents",
        description="Events appended since the previous snapshot"
    )

    total_events: int = Field(
        default=0,
        alias="totalEvents",
        description="Events in the live snapshot after the rebuild"
    )

    success: bool = Field(
        default=True,
        description="False if the rebuild was rejected or failed"
    )

    error: Optional[str] = Field(
        default=None,
        description="Why the rebuild failed, if it did"
    )

    model_config = ConfigDict(populate_by_name=True)


class CacheStats(BaseModel):
    """
    Size of the live snapshot and its indices.
    """

    total_events: int = Field(default=0, alias="totalEvents")
    keyword_count: int = Field(default=0, alias="keywordCount")
    character_count: int = Field(default=0, alias="characterCount")
    location_count: int = Field(default=0, alias="locationCount")
    last_build_time: str = Field(default="never", alias="lastBuildTime")

    model_config = ConfigDict(populate_by_name=True)


class TimelineOverview(BaseModel):
    """
    Coverage summary of the live timeline: year span and distinct locations.
    """

    total_events: int = 0
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    unique_locations: int = 0
    locations: List[str] = Field(
        default_factory=list,
        description="First ten distinct locations in event order"
    )
