from datetime import date
from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.engine import Engine

from stay_sync.dependencies import get_db_engine, require_user
from stay_sync.errors import StoreError, ValidationError
from stay_sync.routes._helpers import raise_http_error
from stay_sync.schemas.availability import AvailabilityUpdatePayload
from stay_sync.services.auth import User
from stay_sync.services.availability import (
    compute_availability,
    compute_month_availability,
    update_availability,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/availability")
def get_availability(
    room_id: int = Query(..., description="Room to compute"),
    year: Optional[int] = Query(None, description="Calendar year (with month)"),
    month: Optional[int] = Query(None, description="Calendar month 1-12 (with year)"),
    start: Optional[date] = Query(None, description="First date (with end)"),
    end: Optional[date] = Query(None, description="Day after the last date (with start)"),
    engine: Engine = Depends(get_db_engine),
    user: User = Depends(require_user),
) -> list[dict[str, Any]]:
    """
    Reconciled availability for a room.

    Query either a calendar month (``year`` + ``month``) or a half-open
    range (``start`` + ``end``).
    """
    try:
        if year is not None and month is not None:
            days = compute_month_availability(engine, room_id, year, month)
        elif start is not None and end is not None:
            days = compute_availability(engine, room_id, start, end)
        else:
            raise ValidationError("Provide year and month, or start and end", field="month")
    except (ValidationError, StoreError) as e:
        raise_http_error(e)

    return [day.model_dump(mode="json") for day in days]


@router.put("/availability")
def put_availability(
    payload: AvailabilityUpdatePayload,
    engine: Engine = Depends(get_db_engine),
    user: User = Depends(require_user),
) -> dict[str, Any]:
    """Block or free dates for a room (inclusive range). Existing bookings are not checked."""
    try:
        affected = update_availability(
            engine,
            payload.room_id,
            payload.start,
            payload.end,
            payload.status,
            note=payload.note,
        )
    except (ValidationError, StoreError) as e:
        raise_http_error(e)

    logger.info(
        "availability_updated",
        user=user.email,
        room_id=payload.room_id,
        status=payload.status.value,
        affected=affected,
    )
    return {"room_id": payload.room_id, "status": payload.status.value, "affected": affected}
