"""
FastAPI dependency injection providers.

Routes receive the engine and the identity provider through these functions,
so tests can swap either one with app.dependency_overrides.
"""

from __future__ import annotations

from typing import Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.engine import Engine

from stay_sync.db.engine import engine
from stay_sync.errors import AuthError
from stay_sync.schemas.results import Failure
from stay_sync.services.auth import (
    IdentityProvider,
    StaticCredentialProvider,
    User,
    authenticate,
)

security = HTTPBasic()


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Testing Example:
        >>> app.dependency_overrides[get_db_engine] = lambda: sqlite_engine
    """
    yield engine


def get_identity_provider() -> IdentityProvider:
    """Identity provider built from ADMIN_CREDENTIALS and ALLOWED_EMAILS."""
    return StaticCredentialProvider.from_env()


def require_user(
    credentials: HTTPBasicCredentials = Depends(security),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> User:
    """
    Authenticate the caller with HTTP Basic credentials.

    Raises:
        HTTPException: 401 if the credentials are malformed or refused.
    """
    result = authenticate(provider, credentials.username, credentials.password)
    if isinstance(result, Failure):
        detail = result.reason if isinstance(result.error, AuthError) else "Invalid credentials"
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Basic"},
        )
    return result.value
