"""
Internal helpers shared by the stays route handlers.

Maps domain errors onto HTTP status codes so each handler only has to deal
with its own success path.
"""

from __future__ import annotations

from typing import NoReturn

import structlog
from fastapi import HTTPException, status

from stay_sync.errors import AuthError, StoreError, ValidationError

logger = structlog.get_logger(__name__)


def raise_http_error(error: Exception) -> NoReturn:
    """
    Translate a domain error into an HTTPException.

    ValidationError -> 422, AuthError -> 401, StoreError -> 503, anything else -> 500.

    Raises:
        HTTPException: Always.
    """
    if isinstance(error, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": error.message, "field": error.field},
        )
    if isinstance(error, AuthError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(error),
            headers={"WWW-Authenticate": "Basic"},
        )
    if isinstance(error, StoreError):
        logger.error("store_unavailable", error=str(error))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage is unavailable, try again later",
        )
    logger.error("unexpected_error", error_type=type(error).__name__, error=str(error))
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )


def reservation_or_404(reservation: object, reservation_id: int) -> None:
    """
    Raise 404 if a reservation lookup came back empty.

    Raises:
        HTTPException: 404 if reservation is None
    """
    if reservation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Reservation {reservation_id} not found",
        )
