"""Unit tests for HTTP Basic auth on the /stays routes."""

import base64
from typing import Generator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.engine import Engine

from stay_sync.dependencies import get_db_engine, get_identity_provider
from stay_sync.main import app
from stay_sync.services.auth import AllowListPolicy, StaticCredentialProvider


def make_basic_auth_header(username: str, password: str) -> str:
    """Create HTTP Basic Auth header."""
    encoded = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("utf-8")
    return f"Basic {encoded}"


@pytest.fixture
def override_auth(db_engine: Engine) -> Generator[None, None, None]:
    provider = StaticCredentialProvider(
        {"owner@example.com": "s3cret", "former@example.com": "s3cret"},
        AllowListPolicy(["owner@example.com"]),
    )
    app.dependency_overrides[get_identity_provider] = lambda: provider
    app.dependency_overrides[get_db_engine] = lambda: db_engine
    yield
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_missing_credentials_are_rejected(override_auth: None) -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/stays/external-bookings")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Basic"


@pytest.mark.asyncio
async def test_wrong_password_is_rejected(override_auth: None) -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get(
            "/stays/external-bookings",
            headers={"Authorization": make_basic_auth_header("owner@example.com", "nope")},
        )

    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid email or password"}


@pytest.mark.asyncio
async def test_account_outside_allow_list_is_rejected(override_auth: None) -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get(
            "/stays/external-bookings",
            headers={"Authorization": make_basic_auth_header("former@example.com", "s3cret")},
        )

    assert response.status_code == 401
    assert response.json() == {"detail": "Access denied. This account is not authorized."}


@pytest.mark.asyncio
async def test_malformed_email_gets_generic_message(override_auth: None) -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get(
            "/stays/external-bookings",
            headers={"Authorization": make_basic_auth_header("owner", "s3cret")},
        )

    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid credentials"}


@pytest.mark.asyncio
async def test_allowed_account_reaches_the_route(override_auth: None) -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get(
            "/stays/external-bookings",
            headers={"Authorization": make_basic_auth_header("owner@example.com", "s3cret")},
        )

    assert response.status_code == 200
    assert response.json() == []
