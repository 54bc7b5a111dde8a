"""
Collapse mirrored external bookings.

When a guest books on Airbnb, the property's Booking.com calendar imports the
Airbnb feed and publishes the same nights as "CLOSED - Not available" (and vice
versa). Listing both would double count the stay, so overlapping external
reservations are grouped and only the most booking-like entry is kept.
"""

from __future__ import annotations

import structlog

from stay_sync.schemas.reservations import BookingSource, Reservation

logger = structlog.get_logger(__name__)

BLOCK_PHRASES = ("not available", "blocked", "unavailable", "closed")
GENERIC_PLACEHOLDERS = ("busy", "reserved")
PLACEHOLDER_NAMES = ("", "guest", "unknown")

SOURCE_PREFERENCE = {
    BookingSource.AIRBNB: 5,
    BookingSource.BOOKING_COM: 3,
}


def _summary(reservation: Reservation) -> str:
    return (reservation.primary_guest.full_name if reservation.primary_guest else "").strip()


def _has_guest_name(summary: str) -> bool:
    lowered = summary.lower()
    if lowered in PLACEHOLDER_NAMES or lowered in GENERIC_PLACEHOLDERS:
        return False
    if lowered.startswith(("booking from", "booking on")):
        return False
    return not any(phrase in lowered for phrase in BLOCK_PHRASES)


def booking_score(reservation: Reservation) -> int:
    """
    Score how likely an external entry is the real booking rather than a mirror block.

    Higher is more likely real.
    """
    summary = _summary(reservation)
    lowered = summary.lower()
    score = 0

    if any(phrase in lowered for phrase in BLOCK_PHRASES):
        score -= 100
    elif lowered in GENERIC_PLACEHOLDERS:
        score -= 50

    if "reservation" in lowered:
        score += 50
    elif "confirmed" in lowered:
        score += 40
    elif "booking" in lowered and "not available" not in lowered:
        score += 30
    elif len(summary) > 20:
        score += 20

    if _has_guest_name(summary):
        score += 100

    score += SOURCE_PREFERENCE.get(reservation.booking_source, 0)
    return score


def _overlapping_groups(reservations: list[Reservation]) -> list[list[Reservation]]:
    """
    Group each stay with the later stays that overlap it.

    Groups are seeded in check-in order and never chained: if A overlaps B and
    B overlaps C but A and C are disjoint, C starts its own group.
    """
    ordered = sorted(reservations, key=lambda r: (r.check_in_date, r.check_out_date))
    grouped: set[int] = set()
    groups: list[list[Reservation]] = []
    for i, seed in enumerate(ordered):
        if i in grouped:
            continue
        group = [seed]
        for j in range(i + 1, len(ordered)):
            other = ordered[j]
            if j not in grouped and other.check_in_date < seed.check_out_date:
                group.append(other)
                grouped.add(j)
        groups.append(group)
    return groups


def deduplicate_external(reservations: list[Reservation]) -> list[Reservation]:
    """
    Keep one external reservation per group of overlapping external stays.

    Internal reservations pass through untouched. Within a group the highest
    booking_score wins; ties keep the earliest entry.

    Args:
        reservations (list[Reservation]): Mixed internal and external reservations.

    Returns:
        list[Reservation]: Deduplicated external reservations followed by the others.
    """
    external = [r for r in reservations if r.booking_source.is_external()]
    others = [r for r in reservations if not r.booking_source.is_external()]

    if len(external) < 2:
        return reservations

    kept: list[Reservation] = []
    removed = 0
    for group in _overlapping_groups(external):
        if len(group) == 1:
            kept.append(group[0])
            continue
        best = max(group, key=booking_score)
        kept.append(best)
        removed += len(group) - 1
        logger.debug(
            "duplicate_group_collapsed",
            kept=best.reservation_number,
            dropped=[r.reservation_number for r in group if r is not best],
        )

    if removed:
        logger.info("external_duplicates_removed", removed=removed, kept=len(kept))

    return kept + others
