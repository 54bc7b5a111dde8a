"""
Reservation listing, search and the front-desk dashboard.

Internal reservations come from the reservations table. External stays are
merged in from the feed cache (deduplicated across channels); they are always
APPROVED, so they only appear when listing all statuses or APPROVED ones.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

import structlog
from sqlalchemy.engine import Engine

from stay_sync.db.readers import reservations as reservation_reader
from stay_sync.errors import ValidationError
from stay_sync.schemas.reservations import Dashboard, Reservation, ReservationStatus
from stay_sync.services.sync import get_external_bookings
from stay_sync.utils.datetime import property_today

logger = structlog.get_logger(__name__)

MAX_PER_PAGE = 100


def _newest_first(reservations: list[Reservation]) -> list[Reservation]:
    return sorted(reservations, key=lambda r: (r.check_in_date, r.id), reverse=True)


def list_reservations(
    engine: Engine,
    status: Optional[ReservationStatus] = None,
    page: int = 1,
    per_page: int = 10,
    include_external: bool = True,
) -> list[Reservation]:
    """
    One page of reservations, latest check-in first.

    With `include_external`, cached channel stays are merged with internal
    rows before paging, so pages stay consistent across both sets.

    Raises:
        ValidationError: If page < 1 or per_page is outside 1..100.
        StoreError: If a store cannot be read.
    """
    if page < 1:
        raise ValidationError("page must be 1 or greater", field="page")
    if not 1 <= per_page <= MAX_PER_PAGE:
        raise ValidationError(f"per_page must be between 1 and {MAX_PER_PAGE}", field="per_page")

    wants_external = include_external and status in (None, ReservationStatus.APPROVED)
    if not wants_external:
        return reservation_reader.list_reservations(
            engine, status=status, page=page, per_page=per_page
        )

    merged = _newest_first(
        reservation_reader.list_reservations(engine, status=status, per_page=None)
        + get_external_bookings(engine)
    )
    offset = (page - 1) * per_page
    return merged[offset : offset + per_page]


def _matches(reservation: Reservation, term: str) -> bool:
    guest = reservation.primary_guest
    lowered = term.lower()
    return (
        (guest is not None and lowered in guest.full_name.lower())
        or (guest is not None and term in guest.phone)
        or lowered in reservation.reservation_number.lower()
        or term in reservation.check_in_date.isoformat()
        or term in reservation.check_out_date.isoformat()
    )


def search_reservations(engine: Engine, query: str) -> list[Reservation]:
    """
    Search internal and external reservations by guest name, phone,
    reservation number or ISO stay date fragment (e.g. "2024-05").

    Raises:
        ValidationError: If the query is blank.
    """
    term = query.strip()
    if not term:
        raise ValidationError("Search query must not be blank", field="q")

    internal = reservation_reader.search_reservations(engine, term)
    external = [r for r in get_external_bookings(engine) if _matches(r, term)]
    results = _newest_first(internal + external)
    logger.debug("reservations_searched", query=term, results=len(results))
    return results


def get_dashboard(engine: Engine, day: Optional[date] = None) -> Dashboard:
    """
    Arrivals and departures for `day` (default: today at the property), the
    rest of that week's arrivals (through Sunday) and reservations awaiting
    a decision.
    """
    day = day or property_today()
    week_end = day + timedelta(days=7 - day.weekday())
    external = get_external_bookings(engine)

    check_ins = reservation_reader.list_check_ins(engine, day, day + timedelta(days=1)) + [
        r for r in external if r.check_in_date == day
    ]
    check_outs = reservation_reader.list_check_outs(engine, day) + [
        r for r in external if r.check_out_date == day
    ]
    week_arrivals = reservation_reader.list_check_ins(engine, day, week_end) + [
        r for r in external if day <= r.check_in_date < week_end
    ]
    pending = reservation_reader.list_reservations(
        engine, status=ReservationStatus.PENDING, per_page=None
    )

    return Dashboard(
        day=day,
        check_ins=check_ins,
        check_outs=check_outs,
        week_arrivals=sorted(week_arrivals, key=lambda r: (r.check_in_date, r.id)),
        pending=sorted(pending, key=lambda r: (r.check_in_date, r.id)),
    )
