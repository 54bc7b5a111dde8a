"""Admin booking admission and reservation status changes."""

from __future__ import annotations

import re
import secrets
from typing import Optional

import structlog
from sqlalchemy.engine import Engine

from stay_sync.db.readers.reservations import get_reservation
from stay_sync.db.writers.reservations import insert_reservation, update_reservation_status
from stay_sync.errors import StoreError, ValidationError
from stay_sync.metrics import bookings_admitted
from stay_sync.schemas.reservations import BookingRequest, Reservation, ReservationStatus
from stay_sync.schemas.results import Failure, Result, Success
from stay_sync.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

ARRIVAL_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def generate_reservation_number() -> str:
    """Return a new admin reservation number, e.g. ``ADM-20240510-3f9a1c``."""
    return f"ADM-{utc_now():%Y%m%d}-{secrets.token_hex(3)}"


def validate_booking(request: BookingRequest) -> Optional[ValidationError]:
    """
    Check a booking request.

    Returns:
        Optional[ValidationError]: The first problem found, or None if the request is valid.
    """
    if not request.guest_name.strip():
        return ValidationError("Guest name is required", field="guest_name")
    if not request.contact_number.strip():
        return ValidationError("Contact number is required", field="contact_number")
    if request.guests_count < 1:
        return ValidationError("At least one guest is required", field="guests_count")
    if request.check_out <= request.check_in:
        return ValidationError("Check-out must be after check-in", field="check_out")
    if request.amount_paid is not None and request.amount_paid < 0:
        return ValidationError("Amount paid cannot be negative", field="amount_paid")
    if request.arrival_time and not ARRIVAL_TIME_PATTERN.match(request.arrival_time):
        return ValidationError("Arrival time must be HH:MM", field="arrival_time")
    return None


def admit_booking(engine: Engine, request: BookingRequest) -> Result[Reservation]:
    """
    Validate and persist an admin booking as an APPROVED reservation.

    Date conflicts are not checked here; call check_conflicts first.
    A rejected request persists nothing.

    Args:
        engine (Engine): SQLAlchemy engine.
        request (BookingRequest): Booking input from the admin.

    Returns:
        Result[Reservation]: Success(stored reservation), Failure(ValidationError)
        for bad input, or Failure(StoreError) if the insert failed.
    """
    error = validate_booking(request)
    if error is not None:
        bookings_admitted.labels(status="rejected").inc()
        logger.info("booking_rejected", field=error.field, reason=error.message)
        return Failure(error)

    amount = request.amount_paid or 0.0
    row = {
        "reservation_number": generate_reservation_number(),
        "status": ReservationStatus.APPROVED.value,
        "check_in_date": request.check_in,
        "check_out_date": request.check_out,
        "adults": request.guests_count,
        "kids": 0,
        "has_pet": request.has_pet,
        "total_amount": amount,
        "guest_name": request.guest_name.strip(),
        "guest_phone": request.contact_number.strip(),
        "guest_email": (request.guest_email or "").strip() or None,
        "room_id": request.room_id,
        "booking_source": request.booking_source.value,
        "arrival_time": request.arrival_time,
        "transaction_id": request.transaction_id,
        "payment_status": "Paid" if amount > 0 else "Pending",
    }

    try:
        reservation_id = insert_reservation(engine, row)
        reservation = get_reservation(engine, reservation_id)
    except StoreError as e:
        bookings_admitted.labels(status="error").inc()
        return Failure(e)

    if reservation is None:
        bookings_admitted.labels(status="error").inc()
        return Failure(StoreError(f"Reservation {reservation_id} missing after insert"))

    bookings_admitted.labels(status="admitted").inc()
    logger.info(
        "booking_admitted",
        reservation_id=reservation.id,
        reservation_number=reservation.reservation_number,
        room_id=reservation.room_id,
        check_in=str(reservation.check_in_date),
        check_out=str(reservation.check_out_date),
    )
    return Success(reservation)


def set_reservation_status(
    engine: Engine, reservation_id: int, status: ReservationStatus
) -> Optional[Reservation]:
    """
    Accept, decline or complete an internal reservation.

    Returns:
        Optional[Reservation]: The updated reservation, or None if the id is unknown.

    Raises:
        StoreError: If the reservation store cannot be written.
    """
    if not update_reservation_status(engine, reservation_id, status):
        logger.warning("reservation_not_found", reservation_id=reservation_id)
        return None
    logger.info("reservation_status_updated", reservation_id=reservation_id, status=status.value)
    return get_reservation(engine, reservation_id)
