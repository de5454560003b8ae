"""
Calendar view fetching and calendar listing from MS Graph.
"""

import calendar
import logging
import re
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from kiota_abstractions.base_request_configuration import RequestConfiguration
from msgraph import GraphServiceClient
from msgraph.generated.models.o_data_errors.o_data_error import ODataError
from msgraph.generated.users.item.calendar_view.calendar_view_request_builder import (
    CalendarViewRequestBuilder,
)

from core.config import DEFAULT_PAGE_SIZE, EVENT_SELECT_FIELDS
from core.exceptions import CalendarError
from models.events import CalendarEvent, CalendarInfo, TimeWindow

logger = logging.getLogger(__name__)

# Graph sends 7 fractional digits ("2024-06-01T09:00:00.0000000")
_FRACTION_RE = re.compile(r"\.(\d{6})\d+")


# =============================================================================
# DATE UTILITIES
# =============================================================================


def add_months(value: datetime, months: int) -> datetime:
    """
    Shift a datetime by whole calendar months.

    The day is clamped to the length of the target month,
    e.g. 2024-03-31 minus 1 month is 2024-02-29.
    """
    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def get_time_window(
    months_before: int, months_after: int, now: datetime | None = None
) -> TimeWindow:
    """
    Calculate the sync window around `now` (UTC).

    Args:
        months_before: Months to look back (>= 0)
        months_after: Months to look ahead (>= 0)
        now: Reference time. Uses the current UTC time if None.
    """
    if months_before < 0 or months_after < 0:
        raise ValueError("months_before and months_after must be >= 0")
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    else:
        now = now.astimezone(timezone.utc)
    return TimeWindow(
        start=add_months(now, -months_before),
        end=add_months(now, months_after),
    )


def parse_graph_datetime(value) -> datetime | None:
    """Convert a Graph DateTimeTimeZone into an aware datetime."""
    if value is None or not value.date_time:
        return None

    text = _FRACTION_RE.sub(r".\1", value.date_time.replace("Z", "+00:00"))
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        return parsed

    tz_name = value.time_zone
    if not tz_name or tz_name.upper() in {"UTC", "Z"}:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.replace(tzinfo=ZoneInfo(tz_name))
    except (ZoneInfoNotFoundError, ValueError):
        # Windows zone names ("Pacific Standard Time") are not in the tz database
        logger.warning("Unknown time zone '%s', treating %s as UTC", tz_name, value.date_time)
        return parsed.replace(tzinfo=timezone.utc)


# =============================================================================
# EVENTS
# =============================================================================


def parse_event(event) -> CalendarEvent:
    """Parse MS Graph event into our format."""
    organizer = None
    if event.organizer and event.organizer.email_address:
        organizer = event.organizer.email_address.address

    location = None
    if event.location:
        location = event.location.display_name

    return CalendarEvent(
        subject=event.subject,
        start=parse_graph_datetime(event.start),
        end=parse_graph_datetime(event.end),
        organizer_address=organizer,
        location_display_name=location,
        body_preview=event.body_preview,
    )


async def get_calendar_events(
    graph: GraphServiceClient,
    mailbox: str,
    window: TimeWindow,
    page_size: int = DEFAULT_PAGE_SIZE,
    follow_pages: bool = True,
) -> list[CalendarEvent]:
    """
    Fetch events from a mailbox's calendar view within `window`.

    Follows @odata.nextLink until the view is exhausted unless
    `follow_pages` is False, in which case only the first page is returned.
    Events keep the order Graph returns them in.

    Raises:
        CalendarError: on any Graph or transport failure
    """
    query_params = CalendarViewRequestBuilder.CalendarViewRequestBuilderGetQueryParameters(
        start_date_time=window.start.isoformat(),
        end_date_time=window.end.isoformat(),
        select=EVENT_SELECT_FIELDS,
        top=page_size,
    )
    config = RequestConfiguration(query_parameters=query_params)
    calendar_view = graph.users.by_user_id(mailbox).calendar_view

    events = []
    try:
        response = await calendar_view.get(request_configuration=config)
        page = 1
        while response is not None:
            raw_events = response.value if response.value else []
            events.extend(parse_event(event) for event in raw_events)
            logger.debug("Page %d: %d events", page, len(raw_events))

            next_link = response.odata_next_link
            if not next_link or not follow_pages:
                if next_link:
                    logger.warning("More events available; returning first page only")
                break
            response = await calendar_view.with_url(next_link).get()
            page += 1

    except ODataError as e:
        message = e.error.message if e.error and e.error.message else str(e)
        logger.error("Graph API error: %s", message)
        raise CalendarError(message) from e
    except Exception as e:
        logger.error("Error accessing calendar of %s: %s", mailbox, e)
        raise CalendarError(str(e)) from e

    logger.info("Fetched %d events for %s", len(events), mailbox)
    return events


# =============================================================================
# CALENDARS
# =============================================================================


async def list_calendars(graph: GraphServiceClient) -> list[CalendarInfo]:
    """List calendars visible to the signed-in user (not the shared mailbox)."""
    calendars = []
    try:
        response = await graph.me.calendars.get()
        while response is not None:
            for cal in response.value or []:
                calendars.append(CalendarInfo(name=cal.name, id=cal.id))
            if not response.odata_next_link:
                break
            response = await graph.me.calendars.with_url(response.odata_next_link).get()

    except ODataError as e:
        message = e.error.message if e.error and e.error.message else str(e)
        logger.error("Graph API error: %s", message)
        raise CalendarError(message) from e
    except Exception as e:
        logger.error("Error listing calendars: %s", e)
        raise CalendarError(str(e)) from e

    return calendars
