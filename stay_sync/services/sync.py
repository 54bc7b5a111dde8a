"""Feed sync orchestrator: fetch, parse and cache every configured channel feed."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional, Sequence

import structlog
from pydantic import BaseModel
from sqlalchemy.engine import Engine

from stay_sync.config import FEED_TIMEOUT_SECONDS, SYNC_MAX_WORKERS
from stay_sync.db.readers.external_bookings import list_all
from stay_sync.db.writers.external_bookings import replace_source
from stay_sync.errors import FetchError, ParseError, StoreError
from stay_sync.metrics import feed_sync_duration, feed_sync_total, records_synced
from stay_sync.network.client import fetch_feed
from stay_sync.normalizers.dedup import deduplicate_external
from stay_sync.normalizers.ical import parse_feed
from stay_sync.normalizers.reservations import project_all
from stay_sync.schemas.feeds import FeedConfig, FeedOutcome, FeedSource
from stay_sync.schemas.reservations import Reservation
from stay_sync.schemas.results import Failure, Result, Success

logger = structlog.get_logger(__name__)

Fetcher = Callable[[str, float], bytes]


def parse_feed_configs(raw: str) -> list[FeedConfig]:
    """
    Parse the FEEDS setting into feed configs.

    Format is comma-separated ``SOURCE=url`` pairs. Order is preserved.

    Raises:
        ValueError: On a malformed pair, an unknown source, or a repeated source.
    """
    configs: list[FeedConfig] = []
    seen: set[FeedSource] = set()
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        name, sep, url = pair.partition("=")
        if not sep or not url.strip():
            raise ValueError(f"Invalid feed entry {pair!r}, expected SOURCE=url")
        source = FeedSource.from_string(name)
        if source in seen:
            raise ValueError(f"Feed source {source.value} configured more than once")
        seen.add(source)
        configs.append(FeedConfig(source=source, url=url.strip()))
    return configs


class SyncReport(BaseModel):
    """Per-source outcomes plus every cached external stay after the sync."""

    outcomes: dict[FeedSource, FeedOutcome]
    reservations: list[Reservation]

    @property
    def succeeded(self) -> list[FeedSource]:
        return [source for source, outcome in self.outcomes.items() if outcome.ok]

    @property
    def failed(self) -> list[FeedSource]:
        return [source for source, outcome in self.outcomes.items() if not outcome.ok]


def sync_feed(
    config: FeedConfig,
    engine: Engine,
    fetcher: Fetcher = fetch_feed,
    timeout: float = FEED_TIMEOUT_SECONDS,
    dry_run: bool = False,
) -> FeedOutcome:
    """
    Sync one feed into its cache partition.

    A fetch or parse failure is returned as a failed outcome and the source's
    previously cached bookings are left exactly as they were. A StoreError is
    raised to the caller; the replace has rolled back by then.

    Args:
        config (FeedConfig): Source tag and URL.
        engine (Engine): SQLAlchemy engine.
        fetcher (Fetcher): Download function, (url, timeout) -> bytes.
        timeout (float): Per-feed download timeout in seconds.
        dry_run (bool): If True, skip cache writes.

    Returns:
        FeedOutcome: Success with the number of cached rows, or failure with a reason.

    Raises:
        StoreError: If the cache could not be written.
    """
    source = config.source
    log = logger.bind(source=source.value)
    log.info("feed_sync_started")

    with feed_sync_duration.labels(source=source.value).time():
        try:
            raw = fetcher(config.url, timeout)
            events = parse_feed(source, raw)
            count = replace_source(engine, source, events, dry_run=dry_run)
        except (FetchError, ParseError) as e:
            feed_sync_total.labels(source=source.value, status="failure").inc()
            log.warning("feed_sync_failed", error_type=type(e).__name__, error=str(e))
            return FeedOutcome.failure(source, str(e))
        except StoreError as e:
            feed_sync_total.labels(source=source.value, status="failure").inc()
            log.error("feed_sync_store_failed", error=str(e))
            raise
        except Exception as e:
            feed_sync_total.labels(source=source.value, status="failure").inc()
            log.exception("feed_sync_failed", error_type=type(e).__name__, error=str(e))
            return FeedOutcome.failure(source, f"Unexpected error: {e}")

    records_synced.labels(source=source.value).inc(count)
    feed_sync_total.labels(source=source.value, status="success").inc()
    log.info("feed_sync_succeeded", count=count)
    return FeedOutcome.success(source, count)


def sync_all_feeds(
    configs: Sequence[FeedConfig],
    engine: Engine,
    fetcher: Fetcher = fetch_feed,
    timeout: float = FEED_TIMEOUT_SECONDS,
    max_workers: int = SYNC_MAX_WORKERS,
    dry_run: bool = False,
) -> Result[SyncReport]:
    """
    Sync every configured feed and return the merged external reservations.

    Feeds run concurrently; each one touches only its own source's partition.
    Fetch and parse failures are reported in the outcome map and never fail
    the overall sync. A store failure, whether while replacing a partition or
    reading the cache back, produces a Failure result.

    Args:
        configs (Sequence[FeedConfig]): Feeds to sync, one per source.
        engine (Engine): SQLAlchemy engine.
        fetcher (Fetcher): Download function, (url, timeout) -> bytes.
        timeout (float): Per-feed download timeout in seconds.
        max_workers (int): Maximum number of feeds synced at once.
        dry_run (bool): If True, do not write to the cache.

    Returns:
        Result[SyncReport]: Success(report) or Failure(StoreError).
    """
    logger.info("sync_all_feeds_started", feeds=len(configs), dry_run=dry_run)

    outcomes: dict[FeedSource, FeedOutcome] = {}
    store_error: Optional[StoreError] = None
    if configs:
        with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(configs)))) as pool:
            futures = {
                pool.submit(
                    sync_feed,
                    config,
                    engine,
                    fetcher=fetcher,
                    timeout=timeout,
                    dry_run=dry_run,
                ): config.source
                for config in configs
            }
            for future in as_completed(futures):
                try:
                    outcome = future.result()
                except StoreError as e:
                    store_error = store_error or e
                    continue
                outcomes[outcome.source] = outcome

    if store_error is not None:
        logger.error("sync_all_feeds_failed", error=str(store_error))
        return Failure(store_error)

    # Report in configuration order
    ordered = {config.source: outcomes[config.source] for config in configs}

    try:
        reservations = project_all(list_all(engine))
    except StoreError as e:
        logger.error("sync_all_feeds_failed", error=str(e))
        return Failure(e)

    report = SyncReport(outcomes=ordered, reservations=reservations)
    logger.info(
        "sync_all_feeds_completed",
        succeeded=[s.value for s in report.succeeded],
        failed=[s.value for s in report.failed],
        total_reservations=len(reservations),
    )
    return Success(report)


def get_external_bookings(engine: Engine, deduplicate: bool = True) -> list[Reservation]:
    """
    Read cached external stays as Reservations without syncing.

    Args:
        engine (Engine): SQLAlchemy engine.
        deduplicate (bool): Collapse mirrored Airbnb/Booking.com entries.

    Returns:
        list[Reservation]: Projected external reservations, latest check-in first.
    """
    reservations = project_all(list_all(engine))
    if deduplicate:
        reservations = deduplicate_external(reservations)
        reservations.sort(key=lambda r: r.check_in_date, reverse=True)
    return reservations
