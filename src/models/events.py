"""
Data models for calendar events and the sync window.

Events are frozen dataclasses: built once per Graph item, never mutated.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple


class CalendarInfo(NamedTuple):
    """Calendar listing result."""
    name: str | None
    id: str | None


@dataclass(frozen=True)
class CalendarEvent:
    """Event fields kept from the calendar view. Any field may be missing."""
    subject: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    organizer_address: str | None = None
    location_display_name: str | None = None
    body_preview: str | None = None


@dataclass(frozen=True)
class TimeWindow:
    """Inclusive [start, end] range of aware datetimes."""
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("TimeWindow bounds must be timezone-aware")
        if self.start > self.end:
            raise ValueError(
                f"TimeWindow start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )
