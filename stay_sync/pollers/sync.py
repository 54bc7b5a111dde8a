import argparse
import sys
from typing import Optional, Sequence

import structlog

from stay_sync.config import DRY_RUN, FEEDS_RAW
from stay_sync.db.engine import engine
from stay_sync.logging_config import setup_logging
from stay_sync.schemas.results import Failure
from stay_sync.services.sync import parse_feed_configs, sync_all_feeds

# Setup logging
setup_logging()
logger = structlog.get_logger(__name__)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run one full sync of the configured feeds.

    Meant to be invoked by an external scheduler (cron, k8s CronJob). Exits 0
    when every feed synced, 1 when at least one feed failed, 2 when the sync
    could not run at all.
    """
    parser = argparse.ArgumentParser(description="Sync channel calendar feeds into the cache.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=DRY_RUN,
        help="Fetch and parse feeds without writing to the cache",
    )
    args = parser.parse_args(argv)

    try:
        configs = parse_feed_configs(FEEDS_RAW)
    except ValueError as e:
        logger.error("feed_config_invalid", error=str(e))
        return 2

    if not configs:
        logger.warning("no_feeds_configured")
        return 0

    result = sync_all_feeds(configs, engine, dry_run=args.dry_run)
    if isinstance(result, Failure):
        logger.error("sync_failed", error=result.reason)
        return 2

    for source, outcome in result.value.outcomes.items():
        if outcome.ok:
            logger.info("feed_result", source=source.value, count=outcome.count)
        else:
            logger.warning("feed_result", source=source.value, reason=outcome.reason)

    return 1 if result.value.failed else 0


if __name__ == "__main__":
    sys.exit(main())
