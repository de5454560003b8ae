"""
SQLite storage for synced calendar events.
"""

import logging
import sqlite3
from contextlib import closing
from datetime import datetime
from pathlib import Path

from core.config import DB_PATH, DB_TIMEOUT_SECONDS
from core.exceptions import PersistError
from models.events import CalendarEvent

logger = logging.getLogger(__name__)

INSERT_EVENT_SQL = """
    INSERT INTO calendar_events (
        subject, start_time, end_time, organizer, location, body_preview
    ) VALUES (?, ?, ?, ?, ?, ?)
"""


def get_connection(
    db_path: Path | str = DB_PATH, timeout: float = DB_TIMEOUT_SECONDS
) -> sqlite3.Connection:
    """Get a database connection."""
    return sqlite3.connect(db_path, timeout=timeout)


def create_tables(conn: sqlite3.Connection):
    """Create the calendar_events table if it doesn't exist."""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS calendar_events (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            subject TEXT,
            start_time TEXT,
            end_time TEXT,
            organizer TEXT,
            location TEXT,
            body_preview TEXT,
            synced_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    """)
    conn.commit()


def _timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def event_to_row(event: CalendarEvent) -> tuple:
    """Insert parameters for one event. Missing fields stay None (NULL)."""
    return (
        event.subject,
        _timestamp(event.start),
        _timestamp(event.end),
        event.organizer_address,
        event.location_display_name,
        event.body_preview,
    )


def insert_events(conn: sqlite3.Connection, events: list[CalendarEvent]) -> int:
    """Insert one row per event. Does not commit."""
    cursor = conn.cursor()
    count = 0
    for event in events:
        cursor.execute(INSERT_EVENT_SQL, event_to_row(event))
        count += 1
    return count


def save_events(
    events: list[CalendarEvent],
    db_path: Path | str = DB_PATH,
    timeout: float = DB_TIMEOUT_SECONDS,
) -> int:
    """
    Persist events and return the number of rows written.

    All inserts share one transaction: if any insert fails the whole
    batch is rolled back. Rows are never deduplicated, so saving the same
    events twice stores them twice.

    Raises:
        PersistError: if the database can't be opened or an insert fails
    """
    try:
        with closing(get_connection(db_path, timeout)) as conn:
            with conn:
                count = insert_events(conn, events)
    except sqlite3.Error as e:
        logger.error("Failed to save events to %s: %s", db_path, e)
        raise PersistError(f"Could not save events to {db_path}: {e}") from e

    logger.info("Saved %d events to %s", count, db_path)
    return count
