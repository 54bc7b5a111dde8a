# stay_sync/main.py

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stay_sync.config import ALLOWED_ORIGINS
from stay_sync.logging_config import setup_logging
from stay_sync.middleware import RequestIDMiddleware
from stay_sync.routes.availability import router as availability_router
from stay_sync.routes.bookings import router as bookings_router
from stay_sync.routes.health import router as health_router
from stay_sync.routes.metrics import router as metrics_router
from stay_sync.routes.reservations import router as reservations_router
from stay_sync.routes.sync import router as sync_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Stay Sync API",
    description="Channel calendar sync, availability reconciliation and admin bookings",
    version="1.0.0",
)

app.add_middleware(RequestIDMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(sync_router, prefix="/stays", tags=["Sync"])
app.include_router(availability_router, prefix="/stays", tags=["Availability"])
app.include_router(bookings_router, prefix="/stays", tags=["Bookings"])
app.include_router(reservations_router, prefix="/stays", tags=["Reservations"])
