"""
Base importer interface for Loremaster.

This module defines the abstract interface that all event sources must implement,
and the single normalization step that turns their raw rows into events.
"""

from abc import ABC, abstractmethod
import logging
from typing import Any, Iterable, List, Mapping, Union

from pydantic import ValidationError

from ..models import Event, EventRecord


RawRow = Union[EventRecord, Mapping[str, Any]]


class BaseImporter(ABC):
    """
    Abstract base class for all event sources.

    Each importer delivers the campaign timeline (spreadsheet, CSV export, etc.)
    as an ordered list of rows. Sources are expected to be append-only: rows
    are never reordered or removed between calls.
    """

    @abstractmethod
    def get_all_rows(self) -> List[RawRow]:
        """
        Retrieve every timeline row from the source, oldest first.

        Returns:
            List of raw rows (mappings or EventRecord objects)
        """
        pass


def normalize_events(rows: Iterable[RawRow]) -> List[Event]:
    """
    Validate raw rows against the ingestion schema and convert them to events.

    Rows that fail validation, or that have no date or no description, are
    skipped; processing always continues.

    Args:
        rows: Raw rows in source order

    Returns:
        The well-formed events, in source order
    """
    events: List[Event] = []
    skipped = 0

    for position, row in enumerate(rows):
        try:
            record = row if isinstance(row, EventRecord) else EventRecord.model_validate(row)
        except ValidationError as e:
            logging.debug(f"Skipping row {position}: {e.error_count()} validation error(s)")
            skipped += 1
            continue

        if not record.is_well_formed():
            logging.debug(f"Skipping row {position}: missing date or description")
            skipped += 1
            continue

        events.append(Event.from_record(record))

    if skipped:
        logging.info(f"Skipped {skipped} malformed timeline row(s)")

    return events
