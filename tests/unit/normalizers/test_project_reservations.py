"""
Unit tests for projecting cached external bookings onto Reservations.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from stay_sync.normalizers.reservations import (
    EXTERNAL_DEFAULT_ADULTS,
    EXTERNAL_PAYMENT_STATUS,
    external_reservation_id,
    project_all,
    project_external_booking,
)
from stay_sync.schemas.feeds import CachedExternalBooking, FeedSource
from stay_sync.schemas.reservations import BookingSource, ReservationStatus

SYNCED_AT = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


def _cached(summary: str = "Reserved", source: FeedSource = FeedSource.AIRBNB):
    return CachedExternalBooking(
        uid="1418fb94e984@airbnb.com",
        source=source,
        summary=summary,
        reservation_number="EXT-AIRBNB-1418fb94",
        check_in=date(2024, 5, 10),
        check_out=date(2024, 5, 12),
        synced_at=SYNCED_AT,
    )


@pytest.mark.unit
def test_projection_fills_synthetic_defaults() -> None:
    reservation = project_external_booking(_cached())

    assert reservation.status == ReservationStatus.APPROVED
    assert reservation.adults == EXTERNAL_DEFAULT_ADULTS
    assert reservation.kids == 0
    assert reservation.total_amount == 0.0
    assert reservation.payment_status == EXTERNAL_PAYMENT_STATUS
    assert reservation.room_id is None
    assert reservation.booking_source == BookingSource.AIRBNB
    assert reservation.check_in_date == date(2024, 5, 10)
    assert reservation.check_out_date == date(2024, 5, 12)
    assert reservation.created_at == SYNCED_AT


@pytest.mark.unit
def test_blank_summary_uses_channel_display_name() -> None:
    reservation = project_external_booking(_cached(summary="  ", source=FeedSource.BOOKING_COM))

    assert reservation.primary_guest is not None
    assert reservation.primary_guest.full_name == "Booking from Booking.com"


@pytest.mark.unit
def test_external_ids_are_negative_and_stable() -> None:
    uid = "1418fb94e984@airbnb.com"

    assert external_reservation_id(uid) < 0
    assert external_reservation_id(uid) == external_reservation_id(uid)
    assert external_reservation_id(uid) != external_reservation_id("other@airbnb.com")


@pytest.mark.unit
def test_project_all_keeps_order() -> None:
    first = _cached()
    second = first.model_copy(update={"uid": "second", "reservation_number": "EXT-AIRBNB-second"})

    result = project_all([first, second])

    assert [r.reservation_number for r in result] == ["EXT-AIRBNB-1418fb94", "EXT-AIRBNB-second"]
