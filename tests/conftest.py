"""
Shared test fixtures.

stay_sync.config fails fast on missing settings, so the environment is set
here before any stay_sync module is imported by a test module.
"""

from __future__ import annotations

import os
import tempfile
from datetime import date
from pathlib import Path
from typing import Callable, Generator

import pytest

os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{Path(tempfile.gettempdir()) / 'stay_sync_test.db'}"
)
os.environ.setdefault("ALLOWED_ORIGINS", "*")
os.environ.setdefault("LOG_LEVEL", "INFO")

from sqlalchemy.engine import Engine  # noqa: E402

from stay_sync.db.engine import build_engine  # noqa: E402
from stay_sync.models.availability_overrides import AvailabilityOverride  # noqa: E402,F401
from stay_sync.models.base import Base  # noqa: E402
from stay_sync.models.external_bookings import ExternalBooking  # noqa: E402,F401
from stay_sync.models.reservations import Reservation  # noqa: E402,F401
from stay_sync.schemas.feeds import ExternalEvent, FeedSource  # noqa: E402
from stay_sync.schemas.reservations import BookingRequest  # noqa: E402

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def db_engine(tmp_path: Path) -> Generator[Engine, None, None]:
    """
    Fresh SQLite database with all tables created.

    A file (not :memory:) so worker threads each get their own connection to
    the same database.
    """
    engine = build_engine(f"sqlite:///{tmp_path / 'stays.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def load_feed() -> Callable[[str], bytes]:
    """Read an .ics fixture from tests/fixtures."""

    def _load(name: str) -> bytes:
        return (FIXTURES_DIR / name).read_bytes()

    return _load


@pytest.fixture
def make_event() -> Callable[..., ExternalEvent]:
    """Build an ExternalEvent with sensible defaults."""

    def _make(
        uid: str,
        source: FeedSource = FeedSource.AIRBNB,
        check_in: date = date(2024, 5, 10),
        check_out: date = date(2024, 5, 12),
        summary: str = "Reserved",
    ) -> ExternalEvent:
        return ExternalEvent(
            uid=uid, source=source, summary=summary, check_in=check_in, check_out=check_out
        )

    return _make


@pytest.fixture
def booking_request() -> Callable[..., BookingRequest]:
    """Build a valid BookingRequest, overriding any field by keyword."""

    def _make(**overrides: object) -> BookingRequest:
        values: dict[str, object] = {
            "guest_name": "Asha Menon",
            "contact_number": "555-1234",
            "guest_email": "asha@example.com",
            "check_in": date(2024, 5, 10),
            "check_out": date(2024, 5, 12),
            "guests_count": 2,
            "room_id": 1,
        }
        values.update(overrides)
        return BookingRequest(**values)

    return _make
