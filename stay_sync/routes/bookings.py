from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.engine import Engine

from stay_sync.dependencies import get_db_engine, require_user
from stay_sync.errors import StoreError, ValidationError
from stay_sync.routes._helpers import raise_http_error, reservation_or_404
from stay_sync.schemas.reservations import BookingRequest, ReservationStatusUpdate
from stay_sync.schemas.results import Failure
from stay_sync.services.admission import admit_booking, set_reservation_status
from stay_sync.services.auth import User
from stay_sync.services.availability import check_conflicts

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/bookings", status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingRequest,
    check_availability: bool = Query(
        True, description="Reject the booking if any night is not available"
    ),
    engine: Engine = Depends(get_db_engine),
    user: User = Depends(require_user),
) -> dict[str, Any]:
    """
    Admit an admin booking.

    By default the requested nights are checked against the reconciled
    availability first; pass ``check_availability=false`` to force the booking.
    """
    if check_availability and payload.check_out > payload.check_in:
        try:
            conflicts = check_conflicts(
                engine, payload.room_id, payload.check_in, payload.check_out
            )
        except (ValidationError, StoreError) as e:
            raise_http_error(e)
        if conflicts:
            dates = ", ".join(str(day.date) for day in conflicts)
            raise_http_error(
                ValidationError(f"Room is not available on: {dates}", field="check_in")
            )

    result = admit_booking(engine, payload)
    if isinstance(result, Failure):
        raise_http_error(result.error)

    logger.info("booking_created", user=user.email, reservation_id=result.value.id)
    return result.value.model_dump(mode="json")


@router.patch("/bookings/{reservation_id}/status")
def update_booking_status(
    reservation_id: int,
    payload: ReservationStatusUpdate,
    engine: Engine = Depends(get_db_engine),
    user: User = Depends(require_user),
) -> dict[str, Any]:
    """Accept, decline or complete an internal reservation."""
    try:
        reservation = set_reservation_status(engine, reservation_id, payload.status)
    except StoreError as e:
        raise_http_error(e)

    reservation_or_404(reservation, reservation_id)
    logger.info(
        "booking_status_changed",
        user=user.email,
        reservation_id=reservation_id,
        status=payload.status.value,
    )
    return reservation.model_dump(mode="json")  # type: ignore[union-attr]
