"""
Availability reconciler.

Merges manual overrides, admitted internal reservations and cached external
bookings into one status per date. Nothing computed here is stored; every
query reads the three sources again.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

import structlog
from sqlalchemy.engine import Engine

from stay_sync.config import DEFAULT_ROOM_ID
from stay_sync.db.readers.availability import list_overrides
from stay_sync.db.readers.external_bookings import list_overlapping
from stay_sync.db.readers.reservations import list_occupying
from stay_sync.db.writers.availability import delete_overrides, upsert_overrides
from stay_sync.errors import ValidationError
from stay_sync.metrics import availability_queries
from stay_sync.schemas.availability import AvailabilityDay, AvailabilityStatus
from stay_sync.utils.datetime import covers, iter_dates, month_bounds

logger = structlog.get_logger(__name__)

MAX_RANGE_DAYS = 366


def compute_availability(
    engine: Engine,
    room_id: int,
    start: date,
    end: date,
    default_room_id: int = DEFAULT_ROOM_ID,
) -> list[AvailabilityDay]:
    """
    Compute the availability grid for a room over [start, end).

    Precedence per date, highest first: manual override, admitted internal
    booking, external booking, available. External feeds are not room-scoped
    and only block `default_room_id`.

    Args:
        engine (Engine): SQLAlchemy engine.
        room_id (int): Room to compute.
        start (date): First date.
        end (date): Day after the last date.
        default_room_id (int): Room that external bookings apply to.

    Returns:
        list[AvailabilityDay]: One entry per date, in date order, no gaps.

    Raises:
        ValidationError: If the range is empty or longer than a year.
        StoreError: If any source store cannot be read.
    """
    if end <= start:
        raise ValidationError(f"end {end} must be after start {start}", field="end")
    if (end - start).days > MAX_RANGE_DAYS:
        raise ValidationError(f"Range may not exceed {MAX_RANGE_DAYS} days", field="end")

    availability_queries.inc()

    overrides = list_overrides(engine, room_id, start, end)
    reservations = list_occupying(engine, room_id, start, end)
    external = list_overlapping(engine, start, end) if room_id == default_room_id else []

    days: list[AvailabilityDay] = []
    for day in iter_dates(start, end):
        if day in overrides:
            days.append(
                AvailabilityDay(date=day, status=AvailabilityStatus.BLOCKED_MANUAL, room_id=room_id)
            )
            continue

        booked = next(
            (r for r in reservations if covers(r.check_in_date, r.check_out_date, day)), None
        )
        if booked is not None:
            days.append(
                AvailabilityDay(
                    date=day,
                    status=AvailabilityStatus.BOOKED,
                    room_id=room_id,
                    reservation_number=booked.reservation_number,
                )
            )
            continue

        blocked = next((b for b in external if covers(b.check_in, b.check_out, day)), None)
        if blocked is not None:
            days.append(
                AvailabilityDay(
                    date=day,
                    status=AvailabilityStatus.BLOCKED_EXTERNAL,
                    room_id=room_id,
                    reservation_number=blocked.reservation_number,
                    source=blocked.source,
                )
            )
            continue

        days.append(AvailabilityDay(date=day, status=AvailabilityStatus.AVAILABLE, room_id=room_id))

    logger.debug(
        "availability_computed",
        room_id=room_id,
        start=str(start),
        end=str(end),
        overrides=len(overrides),
        reservations=len(reservations),
        external=len(external),
    )
    return days


def compute_month_availability(
    engine: Engine,
    room_id: int,
    year: int,
    month: int,
    default_room_id: int = DEFAULT_ROOM_ID,
) -> list[AvailabilityDay]:
    """Availability for every day of a calendar month."""
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month: {month}", field="month")
    start, end = month_bounds(year, month)
    return compute_availability(engine, room_id, start, end, default_room_id=default_room_id)


def update_availability(
    engine: Engine,
    room_id: int,
    start: date,
    end: Optional[date],
    status: AvailabilityStatus,
    note: Optional[str] = None,
) -> int:
    """
    Set or clear manual overrides for every date in start..end (inclusive).

    BLOCKED_MANUAL upserts override rows; AVAILABLE deletes them. Existing
    bookings on those dates are not checked.

    Returns:
        int: Number of dates written, or override rows removed.

    Raises:
        ValidationError: On an inverted range or a status other than AVAILABLE/BLOCKED_MANUAL.
        StoreError: If the override store cannot be written.
    """
    last = end or start
    if last < start:
        raise ValidationError(f"end {last} must not be before start {start}", field="end")
    if (last - start).days >= MAX_RANGE_DAYS:
        raise ValidationError(f"Range may not exceed {MAX_RANGE_DAYS} days", field="end")

    dates = list(iter_dates(start, last + timedelta(days=1)))

    if status == AvailabilityStatus.AVAILABLE:
        removed = delete_overrides(engine, room_id, dates)
        logger.info("availability_cleared", room_id=room_id, start=str(start), end=str(last))
        return removed

    if status == AvailabilityStatus.BLOCKED_MANUAL:
        upsert_overrides(engine, room_id, dates, status=status, note=note)
        logger.info("availability_blocked", room_id=room_id, start=str(start), end=str(last))
        return len(dates)

    raise ValidationError(
        f"Status {status.value} cannot be set manually; use AVAILABLE or BLOCKED_MANUAL",
        field="status",
    )


def check_conflicts(
    engine: Engine,
    room_id: int,
    check_in: date,
    check_out: date,
    default_room_id: int = DEFAULT_ROOM_ID,
) -> list[AvailabilityDay]:
    """
    Dates in [check_in, check_out) that are not available for a new stay.

    Admission does not call this itself; callers check before admitting.
    """
    days = compute_availability(
        engine, room_id, check_in, check_out, default_room_id=default_room_id
    )
    return [day for day in days if day.status != AvailabilityStatus.AVAILABLE]
