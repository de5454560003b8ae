"""
Pytest configuration and shared fixtures.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from msgraph.generated.models.date_time_time_zone import DateTimeTimeZone
from msgraph.generated.models.email_address import EmailAddress
from msgraph.generated.models.event import Event
from msgraph.generated.models.event_collection_response import EventCollectionResponse
from msgraph.generated.models.location import Location
from msgraph.generated.models.recipient import Recipient

from core.database import create_tables, get_connection
from models.events import CalendarEvent


def make_graph_event(subject="Team sync", start="2024-06-03T09:00:00.0000000",
                     end="2024-06-03T10:00:00.0000000", organizer="lead@contoso.com",
                     location="Room 4", body_preview="Weekly planning"):
    """MS Graph Event as returned by the calendar view."""
    return Event(
        subject=subject,
        start=DateTimeTimeZone(date_time=start, time_zone="UTC") if start else None,
        end=DateTimeTimeZone(date_time=end, time_zone="UTC") if end else None,
        organizer=Recipient(email_address=EmailAddress(address=organizer)) if organizer else None,
        location=Location(display_name=location) if location else None,
        body_preview=body_preview,
    )


def make_page(events, next_link=None):
    return EventCollectionResponse(value=events, odata_next_link=next_link)


@pytest.fixture
def fake_graph():
    """GraphServiceClient stand-in exposing users/{id}/calendarView and me/calendars."""
    graph = MagicMock()
    calendar_view = graph.users.by_user_id.return_value.calendar_view
    calendar_view.get = AsyncMock(return_value=make_page([]))
    calendar_view.with_url.return_value.get = AsyncMock(return_value=make_page([]))
    graph.me.calendars.get = AsyncMock()
    graph.me.calendars.with_url.return_value.get = AsyncMock()
    return graph


@pytest.fixture
def sample_event():
    """Fully populated calendar event."""
    return CalendarEvent(
        subject="Team sync",
        start=datetime(2024, 6, 3, 9, 0, tzinfo=timezone.utc),
        end=datetime(2024, 6, 3, 10, 0, tzinfo=timezone.utc),
        organizer_address="lead@contoso.com",
        location_display_name="Room 4",
        body_preview="Weekly planning",
    )


@pytest.fixture
def sample_events(sample_event):
    """List of sample events for testing."""
    return [
        sample_event,
        CalendarEvent(
            subject="Offsite",
            start=datetime(2024, 6, 10, 8, 0, tzinfo=timezone.utc),
            end=datetime(2024, 6, 10, 17, 0, tzinfo=timezone.utc),
        ),
    ]


@pytest.fixture
def db_path(tmp_path):
    """SQLite file with the calendar_events table created."""
    path = tmp_path / "calendar-events.db"
    conn = get_connection(path)
    try:
        create_tables(conn)
    finally:
        conn.close()
    return path
