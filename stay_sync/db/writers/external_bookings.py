from datetime import datetime
from typing import Any, Iterable, Optional

import structlog
from sqlalchemy import delete, func, insert, select, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from stay_sync.config import DEBUG
from stay_sync.errors import StoreError
from stay_sync.metrics import db_operations
from stay_sync.models.external_bookings import ExternalBooking
from stay_sync.schemas.feeds import ExternalEvent, FeedSource
from stay_sync.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def _lock_source(conn: Connection, source: FeedSource) -> None:
    """
    Serialize replaces of the same source without blocking other sources.

    PostgreSQL only; the lock is released when the transaction ends. SQLite
    serializes writers on its database lock already.
    """
    if conn.dialect.name == "postgresql":
        conn.execute(
            text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
            {"key": f"external_bookings:{source.value}"},
        )


def build_rows(events: Iterable[ExternalEvent], synced_at: datetime) -> list[dict[str, Any]]:
    """
    Turn parsed events into cache rows keyed by uid.

    A uid seen more than once keeps its last occurrence.
    """
    rows: dict[str, dict[str, Any]] = {}
    for event in events:
        if event.uid in rows:
            logger.warning("duplicate_uid_in_batch", uid=event.uid, source=event.source.value)
        rows[event.uid] = {
            "uid": event.uid,
            "source": event.source.value,
            "summary": event.summary or "",
            "reservation_number": event.reservation_number,
            "check_in": event.check_in,
            "check_out": event.check_out,
            "synced_at": synced_at,
        }
    return list(rows.values())


def replace_source(
    engine: Engine,
    source: FeedSource,
    events: Iterable[ExternalEvent],
    dry_run: bool = False,
    synced_at: Optional[datetime] = None,
) -> int:
    """
    Atomically replace every cached booking of one source.

    Deletes the source's rows and inserts the new ones in a single transaction.
    If anything fails the transaction rolls back and the previous rows stay
    visible; readers never observe an emptied or half-written partition.

    Args:
        engine: SQLAlchemy Engine
        source: Feed source whose partition is replaced
        events: Parsed events for that source (may be empty)
        dry_run: If True, skip DB writes and log only
        synced_at: Timestamp to stamp on the rows (default: now, UTC)

    Returns:
        int: Number of rows now cached for the source

    Raises:
        StoreError: If the transaction could not be committed
    """
    rows = build_rows(events, synced_at or utc_now())

    if dry_run:
        logger.info(f"[DRY RUN] Would replace {source.value} with {len(rows)} external bookings")
        return len(rows)

    if DEBUG and rows:
        logger.debug("sample_external_booking", row=rows[0])

    try:
        with engine.begin() as conn:
            _lock_source(conn, source)

            result = conn.execute(
                delete(ExternalBooking).where(ExternalBooking.source == source.value)
            )
            deleted = result.rowcount

            if rows:
                # uid is the global key; a stay that moved channel leaves its old row
                conn.execute(
                    delete(ExternalBooking).where(
                        ExternalBooking.uid.in_([row["uid"] for row in rows])
                    )
                )
                conn.execute(insert(ExternalBooking), rows)
    except SQLAlchemyError as e:
        logger.error("replace_source_failed", source=source.value, error=str(e))
        raise StoreError(f"Failed to replace cached bookings for {source.value}: {e}") from e

    db_operations.labels(operation="replace", table="external_bookings").inc()
    logger.info(
        "external_bookings_replaced",
        source=source.value,
        deleted=deleted,
        inserted=len(rows),
    )
    return len(rows)


def clear_all(engine: Engine) -> int:
    """
    Delete every cached external booking. Destructive; admin reset only.

    Returns:
        int: Number of rows removed
    """
    try:
        with engine.begin() as conn:
            count = conn.execute(select(func.count()).select_from(ExternalBooking)).scalar_one()
            conn.execute(delete(ExternalBooking))
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to clear external bookings: {e}") from e

    db_operations.labels(operation="delete", table="external_bookings").inc()
    logger.warning("external_bookings_cleared", count=count)
    return int(count)
