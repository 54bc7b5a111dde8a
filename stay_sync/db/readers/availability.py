from datetime import date

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from stay_sync.errors import StoreError
from stay_sync.models.availability_overrides import AvailabilityOverride


def list_overrides(engine: Engine, room_id: int, start: date, end: date) -> dict[date, str]:
    """
    Fetch manual overrides for a room within [start, end).

    Args:
        engine (Engine): SQLAlchemy engine.
        room_id (int): Room to check.
        start (date): First date of the window.
        end (date): Day after the last date of the window.

    Returns:
        dict[date, str]: Override status keyed by date.
    """
    try:
        with engine.connect() as conn:
            rows = conn.execute(
                select(AvailabilityOverride.override_date, AvailabilityOverride.status)
                .where(AvailabilityOverride.room_id == room_id)
                .where(AvailabilityOverride.override_date >= start)
                .where(AvailabilityOverride.override_date < end)
            ).fetchall()
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to read availability overrides: {e}") from e
    return {row[0]: row[1] for row in rows}
