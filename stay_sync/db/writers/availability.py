from datetime import date

import structlog
from sqlalchemy import delete
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from stay_sync.db.writers._upsert import upsert_with_distinct_check
from stay_sync.errors import StoreError
from stay_sync.metrics import db_operations
from stay_sync.models.availability_overrides import AvailabilityOverride
from stay_sync.schemas.availability import AvailabilityStatus
from stay_sync.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def upsert_overrides(
    engine: Engine,
    room_id: int,
    dates: list[date],
    status: AvailabilityStatus = AvailabilityStatus.BLOCKED_MANUAL,
    note: str | None = None,
) -> None:
    """
    Upsert one override row per date for a room.

    No check is made against existing bookings; a block written over a booked
    date simply wins when availability is next computed.

    Args:
        engine: SQLAlchemy Engine
        room_id: Room to block
        dates: Dates to block
        status: Override status to store
        note: Optional reason shown to operators
    """
    if not dates:
        return

    now = utc_now()
    rows = [
        {
            "room_id": room_id,
            "override_date": day,
            "status": status.value,
            "note": note,
            "updated_at": now,
        }
        for day in dates
    ]

    try:
        with engine.begin() as conn:
            upsert_with_distinct_check(
                conn=conn,
                table=AvailabilityOverride,
                rows=rows,
                conflict_columns=["room_id", "override_date"],
                distinct_columns=["status", "note"],
            )
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to write availability overrides: {e}") from e

    db_operations.labels(operation="upsert", table="availability_overrides").inc()
    logger.info("overrides_upserted", room_id=room_id, count=len(rows), status=status.value)


def delete_overrides(engine: Engine, room_id: int, dates: list[date]) -> int:
    """
    Remove overrides for a room on the given dates.

    Returns:
        int: Number of override rows removed
    """
    if not dates:
        return 0

    try:
        with engine.begin() as conn:
            result = conn.execute(
                delete(AvailabilityOverride)
                .where(AvailabilityOverride.room_id == room_id)
                .where(AvailabilityOverride.override_date.in_(dates))
            )
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to delete availability overrides: {e}") from e

    db_operations.labels(operation="delete", table="availability_overrides").inc()
    logger.info("overrides_deleted", room_id=room_id, count=result.rowcount)
    return int(result.rowcount)
