from datetime import date
from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.engine import Engine

from stay_sync.db.readers.reservations import get_reservation
from stay_sync.dependencies import get_db_engine, require_user
from stay_sync.errors import StoreError, ValidationError
from stay_sync.routes._helpers import raise_http_error, reservation_or_404
from stay_sync.schemas.reservations import ReservationStatus
from stay_sync.services.auth import User
from stay_sync.services.reservations import (
    get_dashboard,
    list_reservations,
    search_reservations,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/reservations")
def get_reservations(
    status: Optional[ReservationStatus] = Query(None, description="Only this status"),
    page: int = Query(1, description="1-based page number"),
    per_page: int = Query(10, description="Page size, at most 100"),
    include_external: bool = Query(True, description="Merge cached channel stays"),
    engine: Engine = Depends(get_db_engine),
    user: User = Depends(require_user),
) -> list[dict[str, Any]]:
    """
    Internal and external reservations, latest check-in first.

    Use ``status=PENDING`` to find bookings waiting to be accepted or declined.
    """
    try:
        reservations = list_reservations(
            engine,
            status=status,
            page=page,
            per_page=per_page,
            include_external=include_external,
        )
    except (ValidationError, StoreError) as e:
        raise_http_error(e)
    return [r.model_dump(mode="json") for r in reservations]


@router.get("/reservations/search")
def search(
    q: str = Query(..., description="Guest name, phone, reservation number or date fragment"),
    engine: Engine = Depends(get_db_engine),
    user: User = Depends(require_user),
) -> list[dict[str, Any]]:
    try:
        reservations = search_reservations(engine, q)
    except (ValidationError, StoreError) as e:
        raise_http_error(e)
    return [r.model_dump(mode="json") for r in reservations]


@router.get("/reservations/{reservation_id}")
def get_one(
    reservation_id: int,
    engine: Engine = Depends(get_db_engine),
    user: User = Depends(require_user),
) -> dict[str, Any]:
    try:
        reservation = get_reservation(engine, reservation_id)
    except StoreError as e:
        raise_http_error(e)
    reservation_or_404(reservation, reservation_id)
    return reservation.model_dump(mode="json")  # type: ignore[union-attr]


@router.get("/dashboard")
def dashboard(
    day: Optional[date] = Query(None, description="Day to summarize, default today"),
    engine: Engine = Depends(get_db_engine),
    user: User = Depends(require_user),
) -> dict[str, Any]:
    """Today's arrivals and departures, this week's arrivals and pending bookings."""
    try:
        summary = get_dashboard(engine, day)
    except StoreError as e:
        raise_http_error(e)
    return summary.model_dump(mode="json")
