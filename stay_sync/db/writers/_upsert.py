"""
Generic upsert helper with IS DISTINCT FROM optimization.

PostgreSQL and SQLite both support INSERT ... ON CONFLICT DO UPDATE; this
module picks the matching dialect construct for the connection so writers
stay dialect-agnostic.
"""

from typing import Any

from sqlalchemy import and_, or_
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection


def _dialect_insert(conn: Connection, table: type) -> Any:
    if conn.dialect.name == "postgresql":
        return postgresql.insert(table)
    if conn.dialect.name == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"Upsert not supported for dialect {conn.dialect.name!r}")


def upsert_with_distinct_check(
    conn: Connection,
    table: type,
    rows: list[dict[str, Any]],
    conflict_columns: list[str],
    distinct_columns: list[str],
    update_columns: list[str] | None = None,
) -> None:
    """
    Perform upsert with IS DISTINCT FROM optimization.

    Only updates rows where one of the distinct_columns actually changed,
    so no-op writes do not bump updated_at.

    Args:
        conn: Active database connection (within transaction)
        table: SQLAlchemy ORM table class (e.g., AvailabilityOverride)
        rows: List of row dicts to upsert
        conflict_columns: Columns of the ON CONFLICT target (primary key)
        distinct_columns: Columns to check for changes
        update_columns: Columns to update on conflict (default: distinct_columns + "updated_at")

    Example:
        >>> with engine.begin() as conn:
        ...     upsert_with_distinct_check(
        ...         conn=conn,
        ...         table=AvailabilityOverride,
        ...         rows=[{"room_id": 1, "override_date": date(2024, 5, 1), ...}],
        ...         conflict_columns=["room_id", "override_date"],
        ...         distinct_columns=["status", "note"],
        ...     )
    """
    if not rows:
        return

    if update_columns is None:
        update_columns = [*distinct_columns, "updated_at"]

    stmt = _dialect_insert(conn, table).values(rows)

    set_dict = {col: getattr(stmt.excluded, col) for col in update_columns}

    changed = [
        getattr(table, col).is_distinct_from(getattr(stmt.excluded, col))
        for col in distinct_columns
    ]
    where = or_(*changed) if len(changed) > 1 else and_(*changed)

    stmt = stmt.on_conflict_do_update(
        index_elements=conflict_columns,
        set_=set_dict,
        where=where,
    )

    conn.execute(stmt)
