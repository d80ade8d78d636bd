"""
Cache manager for Loremaster.

This module owns the live timeline snapshot: it rebuilds it from fresh event
rows, detects newly appended events, persists the snapshot to a JSON file and
reloads it on startup. Rebuilds never modify the live snapshot; they build a
new one and swap it in only once it is complete.
"""

import logging
import os
import tempfile
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Iterable, Optional, Tuple, Union

from pydantic import ValidationError

from ..importers import BaseImporter, normalize_events
from ..importers.base import RawRow
from ..indexing.builder import IndexBuilder, TimelineIndices
from ..models import CacheStats, Event, RebuildResult, SnapshotRecord, TimelineOverview


@dataclass(frozen=True)
class TimelineSnapshot:
    """
    An immutable bundle of events and the indices derived from them.
    """

    events: Tuple[Event, ...] = ()
    indices: TimelineIndices = field(default_factory=TimelineIndices)
    last_build_time: Optional[datetime] = None
    previous_event_count: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.last_build_time is None and not self.events


EMPTY_SNAPSHOT = TimelineSnapshot()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheManager:
    """
    Manages the live timeline snapshot and its on-disk copy.

    Usage:
        cache = CacheManager("data/cache/timeline_cache.json")
        cache.load_from_disk()
        result = cache.rebuild(rows)  # called by the external scheduler
    """

    def __init__(
        self,
        snapshot_path: Union[str, Path] = "data/cache/timeline_cache.json",
        index_builder: Optional[IndexBuilder] = None,
        clock: Callable[[], datetime] = _utcnow
    ):
        """
        Initialize the cache manager with no snapshot loaded.

        Args:
            snapshot_path: Where the snapshot is persisted
            index_builder: Builder used for every rebuild and load
            clock: Returns the current time; must be timezone-aware
        """
        self.snapshot_path = Path(snapshot_path)
        self.index_builder = index_builder or IndexBuilder()
        self.clock = clock
        self._snapshot: TimelineSnapshot = EMPTY_SNAPSHOT
        self._rebuild_lock = threading.Lock()

    @property
    def snapshot(self) -> TimelineSnapshot:
        """The snapshot currently served to readers."""
        return self._snapshot

    @property
    def state(self) -> str:
        """One of "empty", "loaded" or "rebuilding"."""
        if self._rebuild_lock.locked():
            return "rebuilding"
        return "empty" if self._snapshot.is_empty else "loaded"

    def load_from_disk(self) -> bool:
        """
        Load the persisted snapshot and rebuild its indices.

        A missing or unreadable file leaves the live snapshot as it was
        (empty at startup). A load is rejected while a rebuild is running.

        Returns:
            True if a snapshot was loaded
        """
        if not self._rebuild_lock.acquire(blocking=False):
            logging.warning("Timeline cache load rejected: a rebuild is in progress")
            return False

        try:
            return self._load()
        finally:
            self._rebuild_lock.release()

    def _load(self) -> bool:
        if not self.snapshot_path.exists():
            logging.info(f"No timeline cache at {self.snapshot_path}")
            return False

        try:
            with open(self.snapshot_path, 'r', encoding='utf-8') as f:
                record = SnapshotRecord.model_validate_json(f.read())
        except (OSError, ValueError, ValidationError) as e:
            logging.error(f"Error loading timeline cache: {e}")
            return False

        events = tuple(record.events)
        self._snapshot = TimelineSnapshot(
            events=events,
            indices=self.index_builder.build(events),
            last_build_time=record.last_build_time,
            previous_event_count=record.previous_event_count
        )
        logging.info(f"Loaded timeline cache: {len(events)} events, built at {record.last_build_time}")
        return True

    def rebuild(self, rows: Iterable[RawRow]) -> RebuildResult:
        """
        Replace the live snapshot with one built from `rows`.

        Events beyond the previous snapshot's count are reported as new; this
        assumes the source only ever appends.

        Args:
            rows: The complete, current timeline from the event source

        Returns:
            The new events and total count, or a failed result if another
            rebuild is running or the build raised
        """
        if not self._rebuild_lock.acquire(blocking=False):
            logging.warning("Timeline cache rebuild rejected: another rebuild is in progress")
            return RebuildResult(
                total_events=len(self._snapshot.events),
                success=False,
                error="rebuild already in progress"
            )

        try:
            return self._rebuild(rows)
        except Exception as e:
            logging.error(f"Error rebuilding timeline cache: {e}")
            return RebuildResult(
                total_events=len(self._snapshot.events),
                success=False,
                error=str(e)
            )
        finally:
            self._rebuild_lock.release()

    def _rebuild(self, rows: Iterable[RawRow]) -> RebuildResult:
        logging.info("Rebuilding timeline cache...")
        current = self._snapshot
        events = tuple(normalize_events(rows))

        if not events:
            logging.warning("No timeline data available for cache rebuild")
            return RebuildResult(total_events=len(current.events))

        old_count = current.previous_event_count or 0
        new_events = list(events[old_count:]) if len(events) > old_count else []

        snapshot = TimelineSnapshot(
            events=events,
            indices=self.index_builder.build(events),
            last_build_time=self.clock(),
            previous_event_count=len(events)
        )
        self._snapshot = snapshot
        self._save(snapshot)

        logging.info(f"Timeline cache rebuilt: {len(events)} events ({len(new_events)} new)")
        return RebuildResult(new_events=new_events, total_events=len(events))

    def refresh(self, importer: BaseImporter) -> RebuildResult:
        """
        Pull the current timeline from an event source and rebuild.

        Args:
            importer: The event source

        Returns:
            The rebuild result; a failing source yields a failed result
        """
        try:
            rows = importer.get_all_rows()
        except Exception as e:
            logging.error(f"Event source failed, keeping previous timeline cache: {e}")
            return RebuildResult(
                total_events=len(self._snapshot.events),
                success=False,
                error=str(e)
            )
        return self.rebuild(rows)

    def _save(self, snapshot: TimelineSnapshot) -> bool:
        """Write the snapshot to disk atomically; failures are only logged."""
        record = SnapshotRecord(
            events=list(snapshot.events),
            last_build_time=snapshot.last_build_time,
            previous_event_count=snapshot.previous_event_count
        )

        try:
            self.snapshot_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=self.snapshot_path.name, suffix=".tmp", dir=self.snapshot_path.parent
            )
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    f.write(record.model_dump_json(by_alias=True))
                os.replace(tmp_name, self.snapshot_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logging.error(f"Error saving timeline cache: {e}")
            return False

        logging.debug(f"Timeline cache saved to {self.snapshot_path}")
        return True

    def is_stale(self, max_age: Union[timedelta, float]) -> bool:
        """
        Check whether the live snapshot is older than `max_age`.

        Args:
            max_age: Allowed age, as a timedelta or in seconds

        Returns:
            True if the snapshot was never built or is too old
        """
        last_build = self._snapshot.last_build_time
        if last_build is None:
            return True
        if not isinstance(max_age, timedelta):
            max_age = timedelta(seconds=max_age)
        if last_build.tzinfo is None:
            last_build = last_build.replace(tzinfo=timezone.utc)
        return self.clock() - last_build > max_age

    def stats(self) -> CacheStats:
        """Get sizes of the live snapshot and its indices."""
        snapshot = self._snapshot
        return CacheStats(
            total_events=len(snapshot.events),
            keyword_count=len(snapshot.indices.keyword),
            character_count=len(snapshot.indices.character),
            location_count=len(snapshot.indices.location),
            last_build_time=snapshot.last_build_time.isoformat() if snapshot.last_build_time else "never"
        )

    def overview(self) -> TimelineOverview:
        """Summarize the year span and locations covered by the timeline."""
        events = self._snapshot.events
        years = [event.parsed_year for event in events if event.parsed_year]
        locations = list(dict.fromkeys(event.location for event in events if event.location))

        return TimelineOverview(
            total_events=len(events),
            min_year=min(years) if years else None,
            max_year=max(years) if years else None,
            unique_locations=len(locations),
            locations=locations[:10]
        )

    def compact_context(self, limit: int = 20) -> str:
        """
        Render the most recent events as compact prompt context.

        Args:
            limit: Number of trailing events to include

        Returns:
            One "{date} [{location}]: {description}" line per event
        """
        if limit <= 0:
            return ""
        recent = self._snapshot.events[-limit:]
        return "\n".join(event.to_context_line() for event in recent)

