# models/reservations.py

from sqlalchemy import Boolean, Column, Date, DateTime, Float, Integer, String
from sqlalchemy.sql import func

from stay_sync.config import SCHEMA
from stay_sync.models.base import Base


class Reservation(Base):
    """
    ORM model for internally managed reservations (admin bookings).

    Externally-synced stays live in `external_bookings` and are never written
    here. check_out_date is exclusive, so a room is free again on that day.
    """

    __tablename__ = "reservations"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, autoincrement=True)
    reservation_number = Column(String(64), nullable=False, unique=True)
    status = Column(String(16), nullable=False, index=True)
    check_in_date = Column(Date, nullable=False)
    check_out_date = Column(Date, nullable=False)
    adults = Column(Integer, nullable=False, default=1)
    kids = Column(Integer, nullable=False, default=0)
    has_pet = Column(Boolean, nullable=False, default=False)
    total_amount = Column(Float, nullable=False, default=0.0)
    guest_name = Column(String, nullable=False)
    guest_phone = Column(String, nullable=False)
    guest_email = Column(String, nullable=True)
    room_id = Column(Integer, nullable=True, index=True)
    booking_source = Column(String(32), nullable=False)
    arrival_time = Column(String(8), nullable=True)
    transaction_id = Column(String, nullable=True)
    payment_status = Column(String(32), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
