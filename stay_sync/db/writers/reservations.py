from typing import Any

import structlog
from sqlalchemy import insert, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from stay_sync.config import DEBUG
from stay_sync.errors import StoreError
from stay_sync.metrics import db_operations
from stay_sync.models.reservations import Reservation
from stay_sync.schemas.reservations import ReservationStatus
from stay_sync.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def insert_reservation(engine: Engine, row: dict[str, Any]) -> int:
    """
    Insert one internal reservation.

    Args:
        engine: SQLAlchemy Engine
        row: Column values for the reservations table (without id)

    Returns:
        int: The generated reservation id

    Raises:
        StoreError: If the insert fails; nothing is persisted in that case
    """
    now = utc_now()
    values = {"created_at": now, "updated_at": now, **row}

    if DEBUG:
        logger.debug("reservation_to_insert", row=values)

    try:
        with engine.begin() as conn:
            result = conn.execute(insert(Reservation).values(**values))
            reservation_id = result.inserted_primary_key[0]
    except SQLAlchemyError as e:
        logger.error("reservation_insert_failed", error=str(e))
        raise StoreError(f"Failed to store reservation: {e}") from e

    db_operations.labels(operation="insert", table="reservations").inc()
    return int(reservation_id)


def update_reservation_status(
    engine: Engine, reservation_id: int, status: ReservationStatus
) -> bool:
    """
    Set the status of an existing reservation (accept, decline, complete).

    Args:
        engine: SQLAlchemy Engine
        reservation_id: Internal reservation id
        status: New status

    Returns:
        bool: True if a reservation was updated, False if the id is unknown
    """
    try:
        with engine.begin() as conn:
            result = conn.execute(
                update(Reservation)
                .where(Reservation.id == reservation_id)
                .values(status=status.value, updated_at=utc_now())
            )
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to update reservation {reservation_id}: {e}") from e

    db_operations.labels(operation="update", table="reservations").inc()
    return bool(result.rowcount)
