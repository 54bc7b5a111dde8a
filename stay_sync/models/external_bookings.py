"""SQLAlchemy model for the external booking cache."""

from sqlalchemy import Column, Date, DateTime, Index, String
from sqlalchemy.sql import func

from stay_sync.config import SCHEMA
from stay_sync.models.base import Base


class ExternalBooking(Base):
    """
    ORM model for stays synchronized from external iCal feeds.

    Rows are partitioned by `source` (one partition per channel). A partition is
    only ever rewritten as a whole, inside one transaction, when that channel's
    feed was fetched and parsed successfully. check_out is exclusive.
    """

    __tablename__ = "external_bookings"
    __table_args__ = (
        Index("ix_external_bookings_source_check_in", "source", "check_in"),
        {"schema": SCHEMA},
    )

    uid = Column(String, primary_key=True)  # VEVENT UID
    source = Column(String(32), nullable=False, index=True)
    summary = Column(String, nullable=False, default="", server_default="")
    reservation_number = Column(String(64), nullable=False)
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    synced_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
