"""
Prometheus metrics for monitoring feed syncs, feed downloads, and database operations.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Example:
    >>> from stay_sync.metrics import feed_sync_duration, records_synced
    >>> with feed_sync_duration.labels(source="AIRBNB").time():
    ...     events = parse_feed(FeedSource.AIRBNB, raw)
    ...     records_synced.labels(source="AIRBNB").inc(len(events))
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Feed Sync Metrics
# =============================================================================

feed_sync_total = Counter(
    "stays_feed_syncs_total",
    "Total number of feed sync operations (success and failure)",
    ["source", "status"],
)
"""
Counter for feed sync operations.

Labels:
    source: Feed source tag (AIRBNB, BOOKING_COM, ...)
    status: success or failure
"""

feed_sync_duration = Histogram(
    "stays_feed_sync_duration_seconds",
    "Duration of a single feed sync (fetch, parse, cache replace) in seconds",
    ["source"],
    buckets=(0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, float("inf")),
)

records_synced = Counter(
    "stays_records_synced_total",
    "Total number of external bookings written to the cache",
    ["source"],
)

events_dropped = Counter(
    "stays_feed_events_dropped_total",
    "VEVENTs skipped by the parser (missing UID/dates or empty date range)",
    ["source"],
)

# =============================================================================
# Feed Download Metrics
# =============================================================================

feed_requests = Counter(
    "stays_feed_requests_total",
    "Total feed download requests made",
    ["status_code"],
)
"""
Counter for feed downloads.

Labels:
    status_code: HTTP status code, or "error" when no response was received
"""

feed_latency = Histogram(
    "stays_feed_latency_seconds",
    "Feed download latency in seconds",
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, float("inf")),
)

# =============================================================================
# Database Metrics
# =============================================================================

db_operations = Counter(
    "stays_db_operations_total",
    "Total database operations performed",
    ["operation", "table"],
)
"""
Counter for database operations.

Labels:
    operation: Type of operation (replace, insert, upsert, delete, select)
    table: Database table name (external_bookings, reservations, availability_overrides)
"""

# =============================================================================
# Use-case Metrics
# =============================================================================

bookings_admitted = Counter(
    "stays_bookings_admitted_total",
    "Admin booking admission attempts",
    ["status"],
)
"""
Counter for admission attempts.

Labels:
    status: admitted, rejected, or error
"""

availability_queries = Counter(
    "stays_availability_queries_total",
    "Availability grid computations",
)
