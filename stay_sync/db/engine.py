"""
SQLAlchemy engine singleton with production-ready connection pooling.

PostgreSQL is the production store. SQLite URLs are accepted for local runs
and tests; SQLite has no schemas, so the `stays` schema is translated away.
"""

from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from stay_sync.config import DATABASE_URL, SCHEMA

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set.")


def build_engine(url: str) -> Engine:
    """
    Create an engine for the given URL.

    Args:
        url: SQLAlchemy database URL

    Returns:
        Engine: Pooled engine for PostgreSQL, schema-translated engine for SQLite
    """
    if url.startswith("sqlite"):
        return create_engine(
            url,
            future=True,
            connect_args={"check_same_thread": False, "timeout": 30},
            execution_options={"schema_translate_map": {SCHEMA: None}},
        )

    options: dict[str, Any] = {
        # Connection pool settings
        "pool_size": 10,  # Number of connections to maintain in the pool
        "max_overflow": 20,  # Additional connections when pool is exhausted
        "pool_pre_ping": True,  # Verify connections before using (detect stale connections)
        "pool_recycle": 3600,  # Recycle connections after 1 hour
    }
    return create_engine(url, future=True, echo=False, **options)


engine: Engine = build_engine(DATABASE_URL)


def check_engine_health(target: Engine = engine) -> bool:
    """
    Check if database engine is healthy and connections are working.

    This function is used by the /ready endpoint to verify database
    connectivity before allowing traffic to the service.

    Returns:
        bool: True if database is reachable and healthy, False otherwise
    """
    try:
        with target.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
