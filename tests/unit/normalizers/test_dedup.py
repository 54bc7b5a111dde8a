"""
Unit tests for cross-channel deduplication of external reservations.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from stay_sync.normalizers.dedup import booking_score, deduplicate_external
from stay_sync.normalizers.reservations import project_external_booking
from stay_sync.schemas.feeds import CachedExternalBooking, FeedSource
from stay_sync.schemas.reservations import (
    BookingSource,
    Guest,
    Reservation,
    ReservationStatus,
)

SYNCED_AT = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


def _external(
    uid: str,
    source: FeedSource,
    summary: str,
    check_in: date = date(2024, 5, 10),
    check_out: date = date(2024, 5, 12),
) -> Reservation:
    return project_external_booking(
        CachedExternalBooking(
            uid=uid,
            source=source,
            summary=summary,
            reservation_number=f"EXT-{source.value}-{uid[:8]}",
            check_in=check_in,
            check_out=check_out,
            synced_at=SYNCED_AT,
        )
    )


def _internal(check_in: date, check_out: date) -> Reservation:
    return Reservation(
        id=7,
        reservation_number="ADM-20240501-abcdef",
        status=ReservationStatus.APPROVED,
        check_in_date=check_in,
        check_out_date=check_out,
        adults=2,
        primary_guest=Guest(full_name="Ravi Kumar", phone="555-0000"),
        room_id=1,
        booking_source=BookingSource.MANUAL,
    )


@pytest.mark.unit
def test_real_booking_wins_over_mirror_block() -> None:
    """Test that the Airbnb reservation is kept and the Booking.com mirror is dropped."""
    airbnb = _external("airbnb-1", FeedSource.AIRBNB, "Reserved")
    mirror = _external("bcom-1", FeedSource.BOOKING_COM, "CLOSED - Not available")

    result = deduplicate_external([mirror, airbnb])

    assert [r.reservation_number for r in result] == [airbnb.reservation_number]


@pytest.mark.unit
def test_named_guest_scores_above_placeholder() -> None:
    named = _external("bcom-2", FeedSource.BOOKING_COM, "Priya Sharma")
    placeholder = _external("airbnb-2", FeedSource.AIRBNB, "Reserved")

    assert booking_score(named) > booking_score(placeholder)
    assert deduplicate_external([placeholder, named]) == [named]


@pytest.mark.unit
def test_block_phrases_score_negative() -> None:
    blocked = _external("x", FeedSource.AIRBNB, "Airbnb (Not available)")

    assert booking_score(blocked) < 0


@pytest.mark.unit
def test_non_overlapping_external_stays_are_all_kept() -> None:
    may = _external("a", FeedSource.AIRBNB, "Reserved", date(2024, 5, 10), date(2024, 5, 12))
    # Starts on the other's check-out day: adjacent, not overlapping
    next_stay = _external(
        "b", FeedSource.BOOKING_COM, "Reserved", date(2024, 5, 12), date(2024, 5, 14)
    )

    assert len(deduplicate_external([may, next_stay])) == 2


@pytest.mark.unit
def test_internal_reservations_pass_through() -> None:
    internal = _internal(date(2024, 5, 10), date(2024, 5, 12))
    airbnb = _external("airbnb-3", FeedSource.AIRBNB, "Reserved")
    mirror = _external("bcom-3", FeedSource.BOOKING_COM, "CLOSED - Not available")

    result = deduplicate_external([internal, airbnb, mirror])

    assert internal in result
    assert airbnb in result
    assert mirror not in result


@pytest.mark.unit
def test_overlaps_are_not_chained_through_a_middle_stay() -> None:
    """A overlaps B, B overlaps C, A and C are disjoint: C is kept on its own."""
    first = _external("a", FeedSource.AIRBNB, "Reserved", date(2024, 5, 1), date(2024, 5, 5))
    second = _external(
        "b", FeedSource.BOOKING_COM, "Not available", date(2024, 5, 4), date(2024, 5, 8)
    )
    third = _external("c", FeedSource.OTHER, "Blocked", date(2024, 5, 7), date(2024, 5, 9))

    assert deduplicate_external([third, second, first]) == [first, third]
