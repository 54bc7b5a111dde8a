"""
Unit tests for the sync orchestrator with the cache writer mocked out.
"""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest

from stay_sync.errors import FetchError, StoreError
from stay_sync.schemas.feeds import FeedConfig, FeedSource
from stay_sync.services.sync import parse_feed_configs, sync_feed

CALENDAR = (
    b"BEGIN:VCALENDAR\nVERSION:2.0\nBEGIN:VEVENT\nUID:a1\n"
    b"DTSTART;VALUE=DATE:20240510\nDTEND;VALUE=DATE:20240512\nEND:VEVENT\nEND:VCALENDAR\n"
)
AIRBNB = FeedConfig(source=FeedSource.AIRBNB, url="https://airbnb.test/a.ics")


@pytest.mark.unit
def test_parse_feed_configs_preserves_order() -> None:
    configs = parse_feed_configs(
        "BOOKING_COM=https://booking.test/b.ics?t=x, AIRBNB=https://airbnb.test/a.ics"
    )

    assert [c.source for c in configs] == [FeedSource.BOOKING_COM, FeedSource.AIRBNB]
    assert configs[0].url == "https://booking.test/b.ics?t=x"


@pytest.mark.unit
def test_parse_feed_configs_accepts_dotted_source_and_blank() -> None:
    assert parse_feed_configs("") == []
    assert parse_feed_configs("booking.com=https://b.test")[0].source == FeedSource.BOOKING_COM


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw",
    [
        "AIRBNB",
        "AIRBNB=",
        "VRBO=https://vrbo.test/c.ics",
        "AIRBNB=https://a.test,AIRBNB=https://b.test",
    ],
)
def test_parse_feed_configs_rejects_bad_entries(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_feed_configs(raw)


@pytest.mark.unit
@patch("stay_sync.services.sync.replace_source")
def test_sync_feed_success(mock_replace: Mock) -> None:
    mock_replace.return_value = 1
    fetcher = Mock(return_value=CALENDAR)

    outcome = sync_feed(AIRBNB, Mock(), fetcher=fetcher, timeout=3)

    assert outcome.ok and outcome.count == 1
    fetcher.assert_called_once_with("https://airbnb.test/a.ics", 3)
    events = mock_replace.call_args.args[2]
    assert [e.uid for e in events] == ["a1"]


@pytest.mark.unit
@patch("stay_sync.services.sync.replace_source")
def test_fetch_failure_does_not_touch_cache(mock_replace: Mock) -> None:
    """Test that a FetchError is recorded and replace_source is never called."""
    fetcher = Mock(side_effect=FetchError("https://airbnb.test/a.ics", "timed out after 30s"))

    outcome = sync_feed(AIRBNB, Mock(), fetcher=fetcher)

    assert not outcome.ok
    assert "timed out" in (outcome.reason or "")
    mock_replace.assert_not_called()


@pytest.mark.unit
@patch("stay_sync.services.sync.replace_source")
def test_parse_failure_does_not_touch_cache(mock_replace: Mock) -> None:
    outcome = sync_feed(AIRBNB, Mock(), fetcher=Mock(return_value=b"<html>oops</html>"))

    assert not outcome.ok
    mock_replace.assert_not_called()


@pytest.mark.unit
@patch("stay_sync.services.sync.parse_feed")
@patch("stay_sync.services.sync.replace_source")
def test_store_failure_is_raised(mock_replace: Mock, mock_parse: Mock) -> None:
    """Test that a StoreError is not downgraded to a feed outcome."""
    mock_parse.return_value = []
    mock_replace.side_effect = StoreError("database is locked")

    with pytest.raises(StoreError, match="database is locked"):
        sync_feed(AIRBNB, Mock(), fetcher=Mock(return_value=CALENDAR))


@pytest.mark.unit
@patch("stay_sync.services.sync.parse_feed")
def test_unexpected_error_is_contained(mock_parse: Mock) -> None:
    mock_parse.side_effect = RuntimeError("bug")

    outcome = sync_feed(AIRBNB, Mock(), fetcher=Mock(return_value=CALENDAR))

    assert not outcome.ok
    assert "Unexpected error" in (outcome.reason or "")
