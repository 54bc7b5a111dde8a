import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()

# Runtime
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

# Fetch and parse feeds but leave the cache untouched
DRY_RUN = os.getenv("DRY_RUN", "false").lower() == "true"

# Storage
DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

SCHEMA = "stays"

# HTTP
ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS")
if not ALLOWED_ORIGINS_RAW:
    raise ValueError("ALLOWED_ORIGINS must be set in the environment")

ALLOWED_ORIGINS: list[str] = [origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",")]

# Feeds: ordered "SOURCE=url" pairs, e.g. "AIRBNB=https://...,BOOKING_COM=https://..."
FEEDS_RAW = os.getenv("FEEDS", "")
FEED_TIMEOUT_SECONDS = float(os.getenv("FEED_TIMEOUT_SECONDS", "30"))
SYNC_MAX_WORKERS = int(os.getenv("SYNC_MAX_WORKERS", "4"))

# Property
# External feeds are not room-scoped; their blocks land on this room.
DEFAULT_ROOM_ID = int(os.getenv("DEFAULT_ROOM_ID", "1"))
PROPERTY_TIMEZONE = os.getenv("PROPERTY_TIMEZONE", "Asia/Kolkata")


def load_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise ValueError(f"PROPERTY_TIMEZONE {name!r} is not a known IANA time zone") from e


PROPERTY_TZ = load_timezone(PROPERTY_TIMEZONE)


# Admin access
ALLOWED_EMAILS: list[str] = [
    email.strip().lower() for email in os.getenv("ALLOWED_EMAILS", "").split(",") if email.strip()
]
# "email:password" pairs separated by commas
ADMIN_CREDENTIALS_RAW = os.getenv("ADMIN_CREDENTIALS", "")
