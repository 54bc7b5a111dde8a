"""
Liveness and readiness checks.

/health only reports that the process is serving. /ready also checks the
database and that the FEEDS setting parses, since a sync against a broken
feed list would fail every time.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from stay_sync.config import FEEDS_RAW
from stay_sync.db.engine import check_engine_health
from stay_sync.dependencies import get_db_engine
from stay_sync.services.sync import parse_feed_configs

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check() -> JSONResponse:
    """Liveness check. Always 200 while the app is up."""
    return JSONResponse(content={"status": "ok"})


@router.get("/ready")
def readiness_check(engine: Engine = Depends(get_db_engine)) -> JSONResponse:
    """
    Readiness check.

    Example:
        >>> GET /ready
        {"status": "ready", "checks": {"database": "ok", "feeds": "2 configured"}}
    """
    checks: dict[str, str] = {}
    ready = True

    if check_engine_health(engine):
        checks["database"] = "ok"
    else:
        logger.error("readiness_check_failed", reason="database_not_accessible")
        checks["database"] = "failed"
        ready = False

    try:
        checks["feeds"] = f"{len(parse_feed_configs(FEEDS_RAW))} configured"
    except ValueError as e:
        logger.error("readiness_check_failed", reason="feed_config_invalid", error=str(e))
        checks["feeds"] = "invalid"
        ready = False

    if not ready:
        return JSONResponse(status_code=503, content={"status": "not ready", "checks": checks})
    return JSONResponse(content={"status": "ready", "checks": checks})
