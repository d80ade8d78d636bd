"""
Timeline event models for Loremaster.

This module defines the ingestion schema that every event source must satisfy
and the immutable event records the index and search layers work with.
"""

import re
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


_LEADING_NUMBER = re.compile(r"^\s*(-?\d+)")


def parse_year(date: Optional[str]) -> int:
    """
    Extract the leading numeric component of a timeline date.

    Examples:
        parse_year("4707.01.16")  # 4707
        parse_year("-1,293.00")   # -1293
        parse_year("0499.00.00")  # 499
        parse_year("unknown")     # 0

    Args:
        date: Raw date string from the event source

    Returns:
        The year as an integer, or 0 if the date has no numeric prefix
    """
    if not date:
        return 0

    cleaned = date.replace('"', '').replace(',', '')
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return 0
    return int(match.group(1))


class EventRecord(BaseModel):
    """
    A raw timeline row as delivered by an event source.

    Missing fields default to empty strings so a partially filled spreadsheet
    row can still be validated; rows are rejected later if they lack a date
    or a description.
    """

    date: str = Field(
        default="",
        description="Timeline date, e.g. '4707.01.16' (year first)"
    )

    location: str = Field(
        default="",
        description="Where the event took place"
    )

    category: str = Field(
        default="",
        validation_alias=AliasChoices("category", "ap"),
        description="Free-form grouping such as the adventure path"
    )

    description: str = Field(
        default="",
        description="What happened"
    )

    model_config = ConfigDict(extra="ignore")

    @field_validator("date", "location", "category", "description", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        return str(value)

    def is_well_formed(self) -> bool:
        """Return True if the row carries both a date and a description."""
        return bool(self.date.strip()) and bool(self.description.strip())


class Event(BaseModel):
    """
    An immutable timeline event stored in a snapshot.
    """

    date: str = Field(default="", description="Timeline date as supplied by the source")
    location: str = Field(default="", description="Where the event took place")
    category: str = Field(default="", description="Free-form grouping")
    description: str = Field(default="", description="What happened")
    parsed_year: int = Field(
        default=0,
        alias="parsedYear",
        description="Leading numeric component of the date, 0 if unparsable"
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @classmethod
    def from_record(cls, record: EventRecord) -> "Event":
        """
        Build an event from a validated ingestion record.

        Args:
            record: The raw row

        Returns:
            The event with its year parsed once
        """
        return cls(
            date=record.date.strip(),
            location=record.location.strip(),
            category=record.category.strip(),
            description=record.description.strip(),
            parsed_year=parse_year(record.date)
        )

    def to_context_line(self) -> str:
        """Render the event as a single line of prompt context."""
        return f"{self.date} [{self.location}]: {self.description}"


class RankedEvent(Event):
    """
    An event returned by a search together with its relevance score.
    """

    score: int = Field(..., description="Accumulated relevance score")

    @classmethod
    def from_event(cls, event: Event, score: int) -> "RankedEvent":
        return cls(**event.model_dump(), score=score)
