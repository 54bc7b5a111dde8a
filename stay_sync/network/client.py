"""
Client module for downloading external iCal feeds.

Each download carries its own timeout. Retrying is left to the next scheduled
sync; a failed download is reported as a FetchError for that feed only.
"""

import time

import requests
import structlog

from stay_sync.config import FEED_TIMEOUT_SECONDS
from stay_sync.errors import FetchError
from stay_sync.metrics import feed_latency, feed_requests

logger = structlog.get_logger(__name__)

HEADERS = {
    "User-Agent": "stay-sync/1.0",
    "Accept": "text/calendar, text/plain;q=0.9, */*;q=0.5",
}


def _redact(url: str) -> str:
    """Feed URLs embed secret export tokens; log only scheme, host and path."""
    return url.split("?", 1)[0]


def fetch_feed(url: str, timeout: float = FEED_TIMEOUT_SECONDS) -> bytes:
    """
    Download a calendar feed.

    Args:
        url (str): Feed export URL.
        timeout (float): Connect/read timeout in seconds.

    Returns:
        bytes: Raw response body.

    Raises:
        FetchError: On network errors, timeouts, or non-2xx responses.
    """
    logger.debug("Requesting feed %s", _redact(url))

    start_time = time.time()
    try:
        res = requests.get(url, headers=HEADERS, timeout=timeout)
    except requests.Timeout as err:
        feed_requests.labels(status_code="error").inc()
        logger.warning("feed_fetch_timeout", url=_redact(url), timeout=timeout)
        raise FetchError(_redact(url), f"timed out after {timeout}s") from err
    except requests.RequestException as err:
        feed_requests.labels(status_code="error").inc()
        logger.warning("feed_fetch_error", url=_redact(url), error=str(err))
        raise FetchError(_redact(url), str(err)) from err

    feed_latency.observe(time.time() - start_time)
    feed_requests.labels(status_code=str(res.status_code)).inc()

    try:
        res.raise_for_status()
    except requests.HTTPError as err:
        logger.warning("feed_fetch_http_error", url=_redact(url), status_code=res.status_code)
        raise FetchError(
            _redact(url), f"HTTP error code: {res.status_code}", status_code=res.status_code
        ) from err

    return res.content
