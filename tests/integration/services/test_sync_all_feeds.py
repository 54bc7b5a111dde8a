"""
Integration tests for the full sync: fetch (stubbed), parse, cache, read back.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable
from unittest.mock import patch

import pytest
from sqlalchemy.engine import Engine

from stay_sync.db.engine import build_engine
from stay_sync.db.readers.external_bookings import list_all
from stay_sync.errors import FetchError, StoreError
from stay_sync.schemas.feeds import FeedConfig, FeedSource
from stay_sync.schemas.reservations import BookingSource
from stay_sync.schemas.results import Failure, Success
from stay_sync.services.sync import get_external_bookings, sync_all_feeds

AIRBNB_URL = "https://airbnb.test/calendar.ics"
BOOKING_URL = "https://booking.test/calendar.ics"

CONFIGS = [
    FeedConfig(source=FeedSource.AIRBNB, url=AIRBNB_URL),
    FeedConfig(source=FeedSource.BOOKING_COM, url=BOOKING_URL),
]


def _fetcher(responses: dict[str, object]) -> Callable[[str, float], bytes]:
    """Return a fetcher that serves bytes or raises the configured exception per URL."""

    def fetch(url: str, timeout: float) -> bytes:
        response = responses[url]
        if isinstance(response, Exception):
            raise response
        assert isinstance(response, bytes)
        return response

    return fetch


@pytest.mark.integration
def test_all_feeds_succeed(db_engine: Engine, load_feed: Callable[[str], bytes]) -> None:
    result = sync_all_feeds(
        CONFIGS,
        db_engine,
        fetcher=_fetcher(
            {
                AIRBNB_URL: load_feed("airbnb_feed.ics"),
                BOOKING_URL: load_feed("booking_com_feed.ics"),
            }
        ),
    )

    assert isinstance(result, Success)
    report = result.value
    assert list(report.outcomes) == [FeedSource.AIRBNB, FeedSource.BOOKING_COM]
    assert report.outcomes[FeedSource.AIRBNB].count == 2
    assert report.outcomes[FeedSource.BOOKING_COM].count == 2
    assert report.failed == []
    assert len(report.reservations) == 4
    # list_all order: latest check-in first
    assert report.reservations[0].check_in_date.isoformat() == "2024-07-20"


@pytest.mark.integration
def test_one_failing_feed_keeps_its_previous_rows(
    db_engine: Engine, load_feed: Callable[[str], bytes]
) -> None:
    """Test one failing and one succeeding feed: Failure + Success, old rows kept."""
    good = {
        AIRBNB_URL: load_feed("airbnb_feed.ics"),
        BOOKING_URL: load_feed("booking_com_feed.ics"),
    }
    assert sync_all_feeds(CONFIGS, db_engine, fetcher=_fetcher(good)).ok
    booking_uids = {b.uid for b in list_all(db_engine) if b.source == FeedSource.BOOKING_COM}

    # Next run: Airbnb drops one event, Booking.com is unreachable
    single_airbnb = load_feed("mixed_feed.ics")
    result = sync_all_feeds(
        CONFIGS,
        db_engine,
        fetcher=_fetcher(
            {
                AIRBNB_URL: single_airbnb,
                BOOKING_URL: FetchError(BOOKING_URL, "HTTP error code: 503", status_code=503),
            }
        ),
    )

    assert isinstance(result, Success)
    report = result.value
    assert report.outcomes[FeedSource.AIRBNB].ok
    assert report.outcomes[FeedSource.AIRBNB].count == 1
    assert not report.outcomes[FeedSource.BOOKING_COM].ok
    assert "503" in (report.outcomes[FeedSource.BOOKING_COM].reason or "")

    by_source: dict[BookingSource, set[str]] = {}
    for reservation in report.reservations:
        by_source.setdefault(reservation.booking_source, set()).add(
            reservation.reservation_number
        )
    assert by_source[BookingSource.AIRBNB] == {"EXT-AIRBNB-good-eve"}
    cached_booking = {b.uid for b in list_all(db_engine) if b.source == FeedSource.BOOKING_COM}
    assert cached_booking == booking_uids


@pytest.mark.integration
def test_feeds_are_fetched_concurrently(
    db_engine: Engine, load_feed: Callable[[str], bytes]
) -> None:
    """Test that both downloads are in flight at once; a serial run would break the barrier."""
    both_fetching = threading.Barrier(2, timeout=5)
    feeds = {
        AIRBNB_URL: load_feed("airbnb_feed.ics"),
        BOOKING_URL: load_feed("booking_com_feed.ics"),
    }

    def fetch(url: str, timeout: float) -> bytes:
        both_fetching.wait()
        return feeds[url]

    result = sync_all_feeds(CONFIGS, db_engine, fetcher=fetch, max_workers=2)

    assert isinstance(result, Success)
    assert result.value.succeeded == [FeedSource.AIRBNB, FeedSource.BOOKING_COM]

@pytest.mark.integration
def test_malformed_feed_is_a_feed_failure(
    db_engine: Engine, load_feed: Callable[[str], bytes]
) -> None:
    result = sync_all_feeds(
        CONFIGS,
        db_engine,
        fetcher=_fetcher(
            {
                AIRBNB_URL: b"<html>maintenance</html>",
                BOOKING_URL: load_feed("booking_com_feed.ics"),
            }
        ),
    )

    assert isinstance(result, Success)
    assert result.value.failed == [FeedSource.AIRBNB]
    assert result.value.succeeded == [FeedSource.BOOKING_COM]


@pytest.mark.integration
def test_no_feeds_returns_cached_rows(db_engine: Engine) -> None:
    result = sync_all_feeds([], db_engine)

    assert isinstance(result, Success)
    assert result.value.outcomes == {}
    assert result.value.reservations == []


@pytest.mark.integration
def test_unreachable_store_fails_the_sync(tmp_path: Path) -> None:
    """Test that a store failure while reading back fails the whole sync."""
    # No tables created
    engine = build_engine(f"sqlite:///{tmp_path / 'empty.db'}")

    result = sync_all_feeds([], engine)

    assert isinstance(result, Failure)


@pytest.mark.integration
def test_store_failure_while_replacing_fails_the_sync(
    db_engine: Engine, load_feed: Callable[[str], bytes]
) -> None:
    fetcher = _fetcher(
        {
            AIRBNB_URL: load_feed("airbnb_feed.ics"),
            BOOKING_URL: load_feed("booking_com_feed.ics"),
        }
    )

    with patch(
        "stay_sync.services.sync.replace_source", side_effect=StoreError("db down")
    ):
        result = sync_all_feeds(CONFIGS[:1], db_engine, fetcher=fetcher)

    assert isinstance(result, Failure)
    assert isinstance(result.error, StoreError)
    assert result.reason == "db down"
    assert list_all(db_engine) == []

@pytest.mark.integration
def test_get_external_bookings_deduplicates_mirrors(
    db_engine: Engine, load_feed: Callable[[str], bytes]
) -> None:
    sync_all_feeds(
        CONFIGS,
        db_engine,
        fetcher=_fetcher(
            {
                AIRBNB_URL: load_feed("airbnb_feed.ics"),
                BOOKING_URL: load_feed("booking_com_feed.ics"),
            }
        ),
    )

    raw = get_external_bookings(db_engine, deduplicate=False)
    deduped = get_external_bookings(db_engine)

    assert len(raw) == 4
    # The Booking.com "CLOSED - Not available" mirror of the May Airbnb stay is dropped
    assert len(deduped) == 3
    may = [r for r in deduped if r.check_in_date.isoformat() == "2024-05-10"]
    assert [r.booking_source for r in may] == [BookingSource.AIRBNB]
