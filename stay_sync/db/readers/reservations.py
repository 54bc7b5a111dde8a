from datetime import date
from typing import Any, Optional

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from stay_sync.errors import StoreError
from stay_sync.models.reservations import Reservation as ReservationRow
from stay_sync.schemas.reservations import (
    BookingSource,
    Guest,
    Reservation,
    ReservationStatus,
)
from stay_sync.utils.datetime import ensure_utc

OCCUPYING_STATUSES = [ReservationStatus.APPROVED.value, ReservationStatus.COMPLETED.value]


def row_to_reservation(row: Any) -> Reservation:
    """Map a reservations table row to the domain Reservation."""
    return Reservation(
        id=row.id,
        reservation_number=row.reservation_number,
        status=ReservationStatus(row.status),
        check_in_date=row.check_in_date,
        check_out_date=row.check_out_date,
        adults=row.adults,
        kids=row.kids,
        has_pet=row.has_pet,
        total_amount=row.total_amount,
        primary_guest=Guest(
            full_name=row.guest_name,
            phone=row.guest_phone,
            email=row.guest_email or "",
        ),
        room_id=row.room_id,
        booking_source=BookingSource(row.booking_source),
        arrival_time=row.arrival_time,
        transaction_id=row.transaction_id,
        payment_status=row.payment_status,
        created_at=ensure_utc(row.created_at) if row.created_at else None,
    )


def get_reservation(engine: Engine, reservation_id: int) -> Optional[Reservation]:
    """
    Fetch one internal reservation by id.

    Returns:
        Optional[Reservation]: The reservation or None if not found.
    """
    try:
        with engine.connect() as conn:
            row = conn.execute(
                select(ReservationRow).where(ReservationRow.id == reservation_id)
            ).fetchone()
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to read reservation {reservation_id}: {e}") from e
    return row_to_reservation(row) if row else None


def count_reservations(engine: Engine) -> int:
    """Number of stored internal reservations, any status."""
    try:
        with engine.connect() as conn:
            return int(
                conn.execute(select(func.count()).select_from(ReservationRow)).scalar_one()
            )
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to count reservations: {e}") from e


def list_occupying(engine: Engine, room_id: int, start: date, end: date) -> list[Reservation]:
    """
    Fetch APPROVED/COMPLETED reservations for a room that intersect [start, end).

    Pending and cancelled reservations never hold the room.

    Args:
        engine (Engine): SQLAlchemy engine.
        room_id (int): Room to check.
        start (date): First date of the window.
        end (date): Day after the last date of the window.
    """
    try:
        with engine.connect() as conn:
            rows = conn.execute(
                select(ReservationRow)
                .where(ReservationRow.room_id == room_id)
                .where(ReservationRow.status.in_(OCCUPYING_STATUSES))
                .where(ReservationRow.check_in_date < end)
                .where(ReservationRow.check_out_date > start)
                .order_by(ReservationRow.check_in_date, ReservationRow.id)
            ).fetchall()
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to read reservations for room {room_id}: {e}") from e
    return [row_to_reservation(row) for row in rows]


def list_reservations(
    engine: Engine,
    status: Optional[ReservationStatus] = None,
    page: int = 1,
    per_page: Optional[int] = 10,
) -> list[Reservation]:
    """
    List internal reservations, latest check-in first.

    Args:
        engine (Engine): SQLAlchemy engine.
        status (Optional[ReservationStatus]): Only this status; None for all.
        page (int): 1-based page number.
        per_page (Optional[int]): Page size; None returns every matching row.
    """
    stmt = select(ReservationRow).order_by(
        ReservationRow.check_in_date.desc(), ReservationRow.id.desc()
    )
    if status is not None:
        stmt = stmt.where(ReservationRow.status == status.value)
    if per_page is not None:
        stmt = stmt.limit(per_page).offset((page - 1) * per_page)

    try:
        with engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to list reservations: {e}") from e
    return [row_to_reservation(row) for row in rows]


def search_reservations(engine: Engine, query: str) -> list[Reservation]:
    """
    Find internal reservations whose guest name, phone, reservation number or
    stay dates contain `query`. Name and number match case-insensitively.
    """
    term = query.strip()
    stmt = (
        select(ReservationRow)
        .where(
            or_(
                ReservationRow.guest_name.icontains(term, autoescape=True),
                ReservationRow.reservation_number.icontains(term, autoescape=True),
                ReservationRow.guest_phone.contains(term, autoescape=True),
                cast(ReservationRow.check_in_date, String).contains(term, autoescape=True),
                cast(ReservationRow.check_out_date, String).contains(term, autoescape=True),
            )
        )
        .order_by(ReservationRow.check_in_date.desc(), ReservationRow.id.desc())
    )
    try:
        with engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to search reservations: {e}") from e
    return [row_to_reservation(row) for row in rows]


def list_check_ins(engine: Engine, start: date, end: date) -> list[Reservation]:
    """APPROVED/COMPLETED reservations arriving in [start, end), earliest first."""
    try:
        with engine.connect() as conn:
            rows = conn.execute(
                select(ReservationRow)
                .where(ReservationRow.status.in_(OCCUPYING_STATUSES))
                .where(ReservationRow.check_in_date >= start)
                .where(ReservationRow.check_in_date < end)
                .order_by(ReservationRow.check_in_date, ReservationRow.id)
            ).fetchall()
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to read check-ins: {e}") from e
    return [row_to_reservation(row) for row in rows]


def list_check_outs(engine: Engine, day: date) -> list[Reservation]:
    """APPROVED/COMPLETED reservations leaving on `day`."""
    try:
        with engine.connect() as conn:
            rows = conn.execute(
                select(ReservationRow)
                .where(ReservationRow.status.in_(OCCUPYING_STATUSES))
                .where(ReservationRow.check_out_date == day)
                .order_by(ReservationRow.id)
            ).fetchall()
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to read check-outs: {e}") from e
    return [row_to_reservation(row) for row in rows]
