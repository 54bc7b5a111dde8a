from sqlalchemy import Column, Date, DateTime, Integer, String
from sqlalchemy.sql import func

from stay_sync.config import SCHEMA
from stay_sync.models.base import Base


class AvailabilityOverride(Base):
    """
    ORM model for operator-set calendar blocks (maintenance, owner stays).

    One row per (room, date). Writes are plain upserts with no conflict check
    against bookings; the reconciler gives these rows the highest precedence.
    """

    __tablename__ = "availability_overrides"
    __table_args__ = {"schema": SCHEMA}

    room_id = Column(Integer, primary_key=True, autoincrement=False)
    override_date = Column(Date, primary_key=True)
    status = Column(String(32), nullable=False)
    note = Column(String, nullable=True)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
