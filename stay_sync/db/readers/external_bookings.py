from datetime import date
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from stay_sync.errors import StoreError
from stay_sync.models.external_bookings import ExternalBooking
from stay_sync.schemas.feeds import CachedExternalBooking, FeedSource
from stay_sync.utils.datetime import ensure_utc


def _to_cached(row: Any) -> CachedExternalBooking:
    return CachedExternalBooking(
        uid=row.uid,
        source=FeedSource(row.source),
        summary=row.summary or "",
        reservation_number=row.reservation_number,
        check_in=row.check_in,
        check_out=row.check_out,
        synced_at=ensure_utc(row.synced_at),
    )


def list_all(engine: Engine) -> list[CachedExternalBooking]:
    """
    Fetch every cached external booking, latest check-in first.

    Args:
        engine (Engine): SQLAlchemy engine.

    Returns:
        list[CachedExternalBooking]: All cached rows ordered by check_in descending.

    Raises:
        StoreError: If the store cannot be read.
    """
    try:
        with engine.connect() as conn:
            rows = conn.execute(
                select(ExternalBooking).order_by(
                    ExternalBooking.check_in.desc(), ExternalBooking.uid
                )
            ).fetchall()
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to read external bookings: {e}") from e
    return [_to_cached(row) for row in rows]


def find_by_uid(engine: Engine, uid: str) -> Optional[CachedExternalBooking]:
    """
    Look up a cached external booking by its VEVENT UID.

    Args:
        engine (Engine): SQLAlchemy engine.
        uid (str): External UID.

    Returns:
        Optional[CachedExternalBooking]: The row, or None if not cached.
    """
    try:
        with engine.connect() as conn:
            row = conn.execute(
                select(ExternalBooking).where(ExternalBooking.uid == uid)
            ).fetchone()
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to read external booking {uid}: {e}") from e
    return _to_cached(row) if row else None


def list_overlapping(engine: Engine, start: date, end: date) -> list[CachedExternalBooking]:
    """
    Fetch cached bookings whose stay intersects [start, end).

    Args:
        engine (Engine): SQLAlchemy engine.
        start (date): First date of the window.
        end (date): Day after the last date of the window.

    Returns:
        list[CachedExternalBooking]: Overlapping rows ordered by check_in.
    """
    try:
        with engine.connect() as conn:
            rows = conn.execute(
                select(ExternalBooking)
                .where(ExternalBooking.check_in < end)
                .where(ExternalBooking.check_out > start)
                .order_by(ExternalBooking.check_in, ExternalBooking.uid)
            ).fetchall()
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to read external bookings: {e}") from e
    return [_to_cached(row) for row in rows]
