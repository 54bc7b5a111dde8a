from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ReservationStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"

    def occupies_room(self) -> bool:
        """Only approved and completed stays hold the room."""
        return self in (ReservationStatus.APPROVED, ReservationStatus.COMPLETED)


class BookingSource(str, Enum):
    MANUAL = "MANUAL"
    WEBSITE = "WEBSITE"
    AIRBNB = "AIRBNB"
    BOOKING_COM = "BOOKING_COM"
    OTHER = "OTHER"

    @classmethod
    def from_string(cls, value: str) -> "BookingSource":
        lookup = {
            "manual": cls.MANUAL,
            "direct": cls.MANUAL,
            "admin": cls.MANUAL,
            "website": cls.WEBSITE,
            "airbnb": cls.AIRBNB,
            "booking.com": cls.BOOKING_COM,
            "booking_com": cls.BOOKING_COM,
        }
        return lookup.get(value.strip().lower(), cls.OTHER)

    def is_external(self) -> bool:
        return self in (BookingSource.AIRBNB, BookingSource.BOOKING_COM, BookingSource.OTHER)


class Guest(BaseModel):
    full_name: str
    phone: str = ""
    email: str = ""


class Reservation(BaseModel):
    """
    Domain reservation shared by admin bookings and externally-synced stays.

    External stays only carry what the feed exposes (dates, a summary line);
    see stay_sync.normalizers.reservations for the defaults filled in for them.
    """

    id: int
    reservation_number: str
    status: ReservationStatus
    check_in_date: date
    check_out_date: date
    adults: int
    kids: int = 0
    has_pet: bool = False
    total_amount: float = 0.0
    primary_guest: Optional[Guest] = None
    room_id: Optional[int] = None
    booking_source: BookingSource
    arrival_time: Optional[str] = None
    transaction_id: Optional[str] = None
    payment_status: Optional[str] = None
    created_at: Optional[datetime] = None


class BookingRequest(BaseModel):
    """
    Admin booking input. Field-level rules (blank names, guest counts) are
    enforced by admission so that rejections carry operator-facing messages.
    """

    guest_name: str = Field("", description="Primary guest full name")
    contact_number: str = Field("", description="Guest phone number")
    guest_email: Optional[str] = Field(None, description="Guest email (optional)")
    check_in: date = Field(..., description="Check-in date")
    check_out: date = Field(..., description="Check-out date (exclusive)")
    guests_count: int = Field(1, description="Number of guests")
    room_id: int = Field(..., description="Room to book")
    has_pet: bool = Field(False, description="Guest travels with a pet")
    arrival_time: Optional[str] = Field(None, description="Expected arrival time, HH:MM")
    amount_paid: Optional[float] = Field(None, description="Amount already paid")
    transaction_id: Optional[str] = Field(None, description="Payment transaction reference")
    booking_source: BookingSource = Field(BookingSource.MANUAL, description="Booking channel")


class ReservationStatusUpdate(BaseModel):
    status: ReservationStatus


class Dashboard(BaseModel):
    """Front-desk summary for one day."""

    day: date
    check_ins: list[Reservation]
    check_outs: list[Reservation]
    week_arrivals: list[Reservation]
    pending: list[Reservation]
