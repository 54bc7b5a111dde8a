"""
Unit tests for FastAPI dependency injection and HTTP Basic authentication.
"""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from stay_sync.dependencies import get_db_engine, get_identity_provider, require_user
from stay_sync.services.auth import AllowListPolicy, StaticCredentialProvider, User


@pytest.fixture
def app_with_auth() -> FastAPI:
    """Create FastAPI app with a protected endpoint and a fixture identity provider."""
    app = FastAPI()

    @app.get("/whoami")
    def whoami(user: User = Depends(require_user)) -> dict[str, str]:
        return {"email": user.email}

    app.dependency_overrides[get_identity_provider] = lambda: StaticCredentialProvider(
        {"owner@example.com": "s3cret"}, AllowListPolicy(["owner@example.com"])
    )
    return app


@pytest.fixture
def client(app_with_auth: FastAPI) -> TestClient:
    return TestClient(app_with_auth)


@pytest.mark.unit
def test_get_db_engine_dependency() -> None:
    """Test that get_db_engine returns the engine instance."""
    engine = next(get_db_engine())

    assert isinstance(engine, Engine)


@pytest.mark.unit
def test_dependency_injection_can_be_overridden() -> None:
    app = FastAPI()

    mock_engine = Mock(spec=Engine)

    @app.get("/test")
    def test_endpoint(engine: Engine = Depends(get_db_engine)) -> dict[str, bool]:
        return {"overridden": engine is mock_engine}

    app.dependency_overrides[get_db_engine] = lambda: mock_engine

    response = TestClient(app).get("/test")

    assert response.status_code == 200
    assert response.json() == {"overridden": True}


@pytest.mark.unit
def test_require_user_accepts_valid_credentials(client: TestClient) -> None:
    response = client.get("/whoami", auth=("owner@example.com", "s3cret"))

    assert response.status_code == 200
    assert response.json() == {"email": "owner@example.com"}


@pytest.mark.unit
def test_require_user_rejects_wrong_password(client: TestClient) -> None:
    response = client.get("/whoami", auth=("owner@example.com", "wrong"))

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Basic"


@pytest.mark.unit
def test_require_user_rejects_missing_credentials(client: TestClient) -> None:
    assert client.get("/whoami").status_code == 401


@pytest.mark.unit
def test_require_user_hides_validation_detail(client: TestClient) -> None:
    response = client.get("/whoami", auth=("not-an-email", "x"))

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"
