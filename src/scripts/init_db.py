#!/usr/bin/env python3
"""Create the calendar-events SQLite3 database with the calendar_events table."""

import argparse
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import get_settings
from core.database import create_tables, get_connection


def create_database(db_path: Path):
    """Create the database and tables if they don't exist."""
    # Ensure directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = get_connection(db_path)
    try:
        create_tables(conn)
    finally:
        conn.close()
    print(f"Database created successfully at: {db_path}")


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description="Create the calendar events database")
    parser.add_argument("--db-path", type=Path, help="SQLite file. Defaults to CALENDAR_DB_PATH.")
    args = parser.parse_args(argv)

    create_database(args.db_path or get_settings().db_path)


if __name__ == "__main__":
    main()
