"""
Project cached external bookings onto the domain Reservation.

Feeds only expose a stay's dates and a summary line. Everything else a
Reservation carries (guest counts, amounts, payment data, room) is unknown,
so the projection fills fixed defaults. Those values are placeholders for
display and must not be read as real guest or payment data.
"""

from __future__ import annotations

import zlib

from stay_sync.schemas.feeds import CachedExternalBooking, FeedSource
from stay_sync.schemas.reservations import (
    BookingSource,
    Guest,
    Reservation,
    ReservationStatus,
)

EXTERNAL_DEFAULT_ADULTS = 2
EXTERNAL_DEFAULT_KIDS = 0
EXTERNAL_DEFAULT_AMOUNT = 0.0
EXTERNAL_PAYMENT_STATUS = "N/A"

_SOURCE_TO_BOOKING_SOURCE = {
    FeedSource.AIRBNB: BookingSource.AIRBNB,
    FeedSource.BOOKING_COM: BookingSource.BOOKING_COM,
    FeedSource.OTHER: BookingSource.OTHER,
}


def external_reservation_id(uid: str) -> int:
    """
    Stable id for an external stay.

    Negative so it never collides with the positive ids of internal reservations.
    """
    return -(zlib.crc32(uid.encode("utf-8")) + 1)


def project_external_booking(booking: CachedExternalBooking) -> Reservation:
    """
    Build the Reservation shown for an externally-synced stay.

    Args:
        booking (CachedExternalBooking): Cached feed row.

    Returns:
        Reservation: APPROVED, unassigned room, placeholder guest and payment fields.
    """
    summary = booking.summary.strip()
    return Reservation(
        id=external_reservation_id(booking.uid),
        reservation_number=booking.reservation_number,
        status=ReservationStatus.APPROVED,
        check_in_date=booking.check_in,
        check_out_date=booking.check_out,
        adults=EXTERNAL_DEFAULT_ADULTS,
        kids=EXTERNAL_DEFAULT_KIDS,
        has_pet=False,
        total_amount=EXTERNAL_DEFAULT_AMOUNT,
        primary_guest=Guest(full_name=summary or booking.source.display_name()),
        room_id=None,
        booking_source=_SOURCE_TO_BOOKING_SOURCE[booking.source],
        payment_status=EXTERNAL_PAYMENT_STATUS,
        created_at=booking.synced_at,
    )


def project_all(bookings: list[CachedExternalBooking]) -> list[Reservation]:
    return [project_external_booking(booking) for booking in bookings]
