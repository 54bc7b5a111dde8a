from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class FeedSource(str, Enum):
    """Distribution channel an external calendar feed belongs to."""

    AIRBNB = "AIRBNB"
    BOOKING_COM = "BOOKING_COM"
    OTHER = "OTHER"

    @classmethod
    def from_string(cls, value: str) -> "FeedSource":
        normalized = value.strip().upper().replace(".", "_")
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown feed source: {value!r}") from None

    def display_name(self) -> str:
        return {
            FeedSource.AIRBNB: "Booking from Airbnb",
            FeedSource.BOOKING_COM: "Booking from Booking.com",
            FeedSource.OTHER: "External booking",
        }[self]


class FeedConfig(BaseModel):
    """One configured feed: which channel and where to download its calendar."""

    source: FeedSource
    url: str = Field(..., min_length=1)


class ExternalEvent(BaseModel):
    """A VEVENT normalized to a date-only stay. check_out is exclusive."""

    uid: str = Field(..., min_length=1)
    source: FeedSource
    summary: str = ""
    check_in: date
    check_out: date

    @model_validator(mode="after")
    def _check_range(self) -> "ExternalEvent":
        if self.check_in >= self.check_out:
            raise ValueError(
                f"check_in {self.check_in} must be before check_out {self.check_out}"
            )
        return self

    @property
    def reservation_number(self) -> str:
        return f"EXT-{self.source.value}-{self.uid[:8]}"


class CachedExternalBooking(BaseModel):
    """A row of the external booking cache."""

    uid: str
    source: FeedSource
    summary: str = ""
    reservation_number: str
    check_in: date
    check_out: date
    synced_at: datetime


class FeedOutcome(BaseModel):
    """Result of syncing one feed. Failures leave that source's cached rows in place."""

    source: FeedSource
    ok: bool
    count: int = 0
    reason: Optional[str] = None

    @classmethod
    def success(cls, source: FeedSource, count: int) -> "FeedOutcome":
        return cls(source=source, ok=True, count=count)

    @classmethod
    def failure(cls, source: FeedSource, reason: str) -> "FeedOutcome":
        return cls(source=source, ok=False, reason=reason)
