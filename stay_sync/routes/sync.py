from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.engine import Engine

from stay_sync.config import DRY_RUN, FEEDS_RAW
from stay_sync.db.writers.external_bookings import clear_all
from stay_sync.dependencies import get_db_engine, require_user
from stay_sync.errors import StoreError, ValidationError
from stay_sync.routes._helpers import raise_http_error
from stay_sync.schemas.results import Failure
from stay_sync.services.auth import User
from stay_sync.services.sync import get_external_bookings, parse_feed_configs, sync_all_feeds

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/sync")
def trigger_sync(
    dry_run: Optional[bool] = Query(None, description="Override DRY_RUN setting"),
    engine: Engine = Depends(get_db_engine),
    user: User = Depends(require_user),
) -> dict[str, Any]:
    """
    Sync every configured feed and return the per-source outcomes.

    Runs synchronously so the caller sees which channels succeeded. A failed
    channel keeps its previously cached bookings.

    Returns:
        dict: ``outcomes`` keyed by source and the merged external ``reservations``.
    """
    try:
        configs = parse_feed_configs(FEEDS_RAW)
    except ValueError as e:
        logger.error("feed_config_invalid", error=str(e))
        raise_http_error(ValidationError(f"Invalid FEEDS configuration: {e}", field="FEEDS"))

    use_dry_run = DRY_RUN if dry_run is None else dry_run
    logger.info("sync_triggered", user=user.email, feeds=len(configs), dry_run=use_dry_run)

    result = sync_all_feeds(configs, engine, dry_run=use_dry_run)
    if isinstance(result, Failure):
        raise_http_error(result.error)

    return result.value.model_dump(mode="json")


@router.get("/external-bookings")
def list_external_bookings(
    deduplicate: bool = Query(True, description="Collapse mirrored channel entries"),
    engine: Engine = Depends(get_db_engine),
    user: User = Depends(require_user),
) -> list[dict[str, Any]]:
    """List cached external stays as reservations, without syncing."""
    try:
        reservations = get_external_bookings(engine, deduplicate=deduplicate)
    except StoreError as e:
        raise_http_error(e)
    return [r.model_dump(mode="json") for r in reservations]


@router.delete("/external-bookings")
def reset_external_bookings(
    engine: Engine = Depends(get_db_engine),
    user: User = Depends(require_user),
) -> dict[str, Any]:
    """Delete every cached external booking. The next sync repopulates the cache."""
    try:
        removed = clear_all(engine)
    except StoreError as e:
        raise_http_error(e)
    logger.warning("external_cache_cleared", user=user.email, removed=removed)
    return {"removed": removed}
