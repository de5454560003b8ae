#!/usr/bin/env python3
"""
Sync events from a shared MS365 calendar into the SQLite events table.

Authenticates with the configured user, fetches the calendar view for
MonthsBefore..MonthsAfter around now, and inserts every event as a new row.

Usage:
    uv run python src/scripts/sync_calendar.py
    uv run python src/scripts/sync_calendar.py --verify-login
    uv run python src/scripts/sync_calendar.py --list-calendars
    uv run python src/scripts/sync_calendar.py --display --months-before 0
"""

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx

from core.auth import authenticate
from core.config import Settings, get_settings
from core.database import save_events
from core.exceptions import ConfigurationError, SyncError
from core.graph_client import create_graph_client, get_signed_in_user
from models.events import CalendarEvent
from services.calendar import get_calendar_events, get_time_window, list_calendars

logger = logging.getLogger(__name__)


# =============================================================================
# OUTPUT
# =============================================================================


def format_event(event: CalendarEvent) -> str:
    """Console block for one event."""
    start = event.start.isoformat() if event.start else ""
    end = event.end.isoformat() if event.end else ""
    return (
        f"Subject: {event.subject or ''}\n"
        f"Start: {start}\n"
        f"End: {end}\n"
        f"Organizer: {event.organizer_address or ''}\n"
        f"Location: {event.location_display_name or ''}\n"
        f"BodyPreview: {event.body_preview or ''}\n"
        "---"
    )


# =============================================================================
# PIPELINE
# =============================================================================


async def acquire_token(settings: Settings) -> str:
    """Run the blocking token exchange off the event loop."""
    access_token = await asyncio.to_thread(
        authenticate,
        settings.client_id,
        settings.tenant_id,
        settings.username,
        settings.password,
    )
    return access_token.token


async def run(settings: Settings, first_page_only: bool = False) -> None:
    """
    Run one sync in the mode selected by `settings`.

    Mode precedence: verify login, list calendars, display events, save events.

    Raises:
        SyncError: subclass naming the stage that failed
    """
    if settings.debug_login:
        token = await acquire_token(settings)
        display_name, upn = await get_signed_in_user(token, settings.graph_timeout)
        print(f"Login successful. User: {display_name} ({upn})")
        return

    if not settings.debug_list_calendars and not settings.calendar_email:
        raise ConfigurationError("Shared calendar email is not configured (SHARED_CALENDAR_EMAIL)")

    token = await acquire_token(settings)

    async with httpx.AsyncClient(timeout=settings.graph_timeout) as http_client:
        graph = create_graph_client(token, http_client)

        if settings.debug_list_calendars:
            calendars = await list_calendars(graph)
            print("Calendars visible to the login user:")
            if not calendars:
                print("No calendars found or insufficient permissions.")
            for cal in calendars:
                print(f"Name: {cal.name}, Id: {cal.id}")
            return

        window = get_time_window(settings.months_before, settings.months_after)
        logger.info(
            "Fetching %s from %s to %s",
            settings.calendar_email,
            window.start.isoformat(),
            window.end.isoformat(),
        )
        events = await get_calendar_events(
            graph, settings.calendar_email, window, follow_pages=not first_page_only
        )

    if settings.debug_display_calendar:
        for event in events:
            print(format_event(event))
        return

    count = save_events(events, settings.db_path, settings.db_timeout)
    print(f"Saved {count} events to {settings.db_path}")


# =============================================================================
# MAIN
# =============================================================================


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sync a shared MS365 calendar into SQLite")
    parser.add_argument("--verify-login", action="store_true", help="Only check that login works")
    parser.add_argument(
        "--list-calendars", action="store_true", help="List calendars visible to the login user"
    )
    parser.add_argument(
        "--display", action="store_true", help="Print events instead of saving them"
    )
    parser.add_argument(
        "--first-page-only",
        action="store_true",
        help="Stop after the first page of the calendar view",
    )
    parser.add_argument("--months-before", type=_non_negative_int, help="Months to look back")
    parser.add_argument("--months-after", type=_non_negative_int, help="Months to look ahead")
    parser.add_argument("--db-path", type=Path, help="SQLite file to write events to")
    return parser.parse_args(argv)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Command line flags win over environment values."""
    overrides = {}
    if args.verify_login:
        overrides["debug_login"] = True
    if args.list_calendars:
        overrides["debug_list_calendars"] = True
    if args.display:
        overrides["debug_display_calendar"] = True
    if args.months_before is not None:
        overrides["months_before"] = args.months_before
    if args.months_after is not None:
        overrides["months_after"] = args.months_after
    if args.db_path is not None:
        overrides["db_path"] = args.db_path
    return dataclasses.replace(settings, **overrides)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        settings = apply_overrides(get_settings(), args)
        logging.basicConfig(
            level=settings.log_level, format="%(asctime)s [%(levelname)s] %(message)s"
        )
        logging.getLogger("azure").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)

        asyncio.run(run(settings, first_page_only=args.first_page_only))
    except SyncError as e:
        print(f"Error during {e.stage}: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
