"""
Parse channel iCal exports into date-only external events.

Channel feeds (Airbnb, Booking.com) publish one VEVENT per blocked stay with
UID, SUMMARY, DTSTART and DTEND. Stays are whole nights, so every date or
date-time is reduced to a calendar date in the property's timezone and DTEND
is treated as the (exclusive) check-out day.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo

import structlog
from icalendar import Calendar

from stay_sync.config import DEBUG, PROPERTY_TIMEZONE
from stay_sync.errors import ParseError
from stay_sync.metrics import events_dropped
from stay_sync.schemas.feeds import ExternalEvent, FeedSource

logger = structlog.get_logger(__name__)


def _to_date(value: Any, tz: ZoneInfo) -> Optional[date]:
    """
    Reduce an iCal DATE or DATE-TIME to a calendar date.

    Aware date-times are converted to the property timezone first; floating
    (naive) date-times are already local time.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    if isinstance(value, date):
        return value
    return None


def _event_dates(component: Any, tz: ZoneInfo) -> tuple[Optional[date], Optional[date]]:
    dtstart = component.get("DTSTART")
    if dtstart is None:
        return None, None
    start_value = dtstart.dt
    check_in = _to_date(start_value, tz)
    if check_in is None:
        return None, None

    dtend = component.get("DTEND")
    if dtend is not None:
        return check_in, _to_date(dtend.dt, tz)

    duration = component.get("DURATION")
    if duration is not None and isinstance(duration.dt, timedelta):
        return check_in, _to_date(start_value + duration.dt, tz)

    # RFC 5545: an all-day event without DTEND lasts one day
    if not isinstance(start_value, datetime):
        return check_in, check_in + timedelta(days=1)
    return check_in, check_in


def _drop(source: FeedSource, reason: str, **details: Any) -> None:
    events_dropped.labels(source=source.value).inc()
    logger.warning("vevent_dropped", source=source.value, reason=reason, **details)


def parse_feed(
    source: FeedSource,
    raw: Union[bytes, str],
    timezone: str = PROPERTY_TIMEZONE,
) -> list[ExternalEvent]:
    """
    Parse a calendar feed into ExternalEvents.

    Malformed events (no UID, unreadable dates, check-in not before check-out)
    are dropped and logged; they never fail the whole feed.

    Args:
        source (FeedSource): Channel the feed belongs to.
        raw (bytes | str): Feed payload.
        timezone (str): IANA timezone used to turn date-times into dates.

    Returns:
        list[ExternalEvent]: One event per usable VEVENT, in document order.

    Raises:
        ParseError: If the payload is not a VCALENDAR document.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseError(f"{source.value} feed is not valid UTF-8: {e}") from e

    if not raw.strip():
        raise ParseError(f"{source.value} feed is empty")

    try:
        calendar = Calendar.from_ical(raw)
    except (ValueError, IndexError, KeyError) as e:
        raise ParseError(f"{source.value} feed is not a valid calendar: {e}") from e

    if getattr(calendar, "name", None) != "VCALENDAR":
        raise ParseError(f"{source.value} feed has no VCALENDAR component")

    tz = ZoneInfo(timezone)
    events: list[ExternalEvent] = []
    vevent_count = 0

    for component in calendar.walk("VEVENT"):
        vevent_count += 1

        uid = str(component.get("UID", "") or "").strip()
        if not uid:
            _drop(source, "missing_uid", index=vevent_count)
            continue

        try:
            check_in, check_out = _event_dates(component, tz)
        except (ValueError, TypeError, AttributeError) as e:
            _drop(source, "invalid_dates", uid=uid, error=str(e))
            continue

        if check_in is None or check_out is None:
            _drop(source, "missing_dates", uid=uid)
            continue

        if check_in >= check_out:
            _drop(source, "empty_range", uid=uid, check_in=str(check_in), check_out=str(check_out))
            continue

        events.append(
            ExternalEvent(
                uid=uid,
                source=source,
                summary=str(component.get("SUMMARY", "") or ""),
                check_in=check_in,
                check_out=check_out,
            )
        )

    if DEBUG and events:
        logger.debug("sample_external_event", event=events[0].model_dump(mode="json"))

    logger.info(
        "feed_parsed",
        source=source.value,
        vevents=vevent_count,
        events=len(events),
    )
    return events
