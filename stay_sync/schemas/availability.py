from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from stay_sync.schemas.feeds import FeedSource


class AvailabilityStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    BOOKED = "BOOKED"
    BLOCKED_MANUAL = "BLOCKED_MANUAL"
    BLOCKED_EXTERNAL = "BLOCKED_EXTERNAL"


class AvailabilityDay(BaseModel):
    """Reconciled status of one room on one date. Never stored."""

    date: dt.date
    status: AvailabilityStatus
    room_id: int
    reservation_number: Optional[str] = None
    source: Optional[FeedSource] = None


class AvailabilityUpdatePayload(BaseModel):
    """
    Manual override request. start..end is inclusive, like the admin calendar's
    "<date> - <date>" range. AVAILABLE clears overrides, BLOCKED_MANUAL sets them.
    """

    room_id: int = Field(..., description="Room to update")
    start: dt.date = Field(..., description="First date (inclusive)")
    end: Optional[dt.date] = Field(None, description="Last date (inclusive); defaults to start")
    status: AvailabilityStatus = Field(..., description="AVAILABLE or BLOCKED_MANUAL")
    note: Optional[str] = Field(None, description="Reason for the block, e.g. maintenance")
