import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse

import structlog

from stay_sync.db.engine import engine
from stay_sync.errors import StoreError
from stay_sync.logging_config import setup_logging
from stay_sync.schemas.feeds import FeedConfig, FeedSource
from stay_sync.services.sync import sync_feed

setup_logging()
logger = structlog.get_logger(__name__)


def main() -> None:
    """
    Sync a single feed given on the command line, e.g.

        python scripts/sync_one_feed.py AIRBNB https://www.airbnb.com/calendar/ical/123.ics
    """
    parser = argparse.ArgumentParser(description="Sync one channel feed.")
    parser.add_argument("source", help="Feed source tag (AIRBNB, BOOKING_COM, OTHER)")
    parser.add_argument("url", help="Feed export URL")
    parser.add_argument("--dry-run", action="store_true", help="Skip cache writes")
    args = parser.parse_args()

    config = FeedConfig(source=FeedSource.from_string(args.source), url=args.url)
    try:
        outcome = sync_feed(config, engine, dry_run=args.dry_run)
    except StoreError as e:
        logger.error("feed_cache_write_failed", source=config.source.value, error=str(e))
        sys.exit(2)
    if outcome.ok:
        logger.info("feed_synced", source=config.source.value, count=outcome.count)
    else:
        logger.error("feed_sync_failed", source=config.source.value, reason=outcome.reason)
        sys.exit(1)


if __name__ == "__main__":
    main()
