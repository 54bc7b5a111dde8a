"""
Integration tests for the liveness and readiness checks.
"""

from __future__ import annotations

from typing import Generator
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from stay_sync.dependencies import get_db_engine
from stay_sync.main import app


@pytest.fixture
def client(db_engine: Engine) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_db_engine] = lambda: db_engine
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.mark.integration
def test_health_is_ok_without_touching_the_database(client: TestClient) -> None:
    with patch("stay_sync.routes.health.check_engine_health", return_value=False):
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.integration
def test_ready_reports_database_and_feed_count(client: TestClient) -> None:
    feeds = "AIRBNB=https://a.example/cal.ics,BOOKING.COM=https://b.example/cal.ics"
    with patch("stay_sync.routes.health.FEEDS_RAW", feeds):
        response = client.get("/ready")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ready",
        "checks": {"database": "ok", "feeds": "2 configured"},
    }


@pytest.mark.integration
def test_ready_is_503_when_database_unreachable(client: TestClient) -> None:
    with patch("stay_sync.routes.health.check_engine_health", return_value=False):
        response = client.get("/ready")

    assert response.status_code == 503
    body = response.json()
    assert body["status"] == "not ready"
    assert body["checks"]["database"] == "failed"


@pytest.mark.integration
def test_ready_is_503_when_feed_setting_is_malformed(client: TestClient) -> None:
    with patch("stay_sync.routes.health.FEEDS_RAW", "AIRBNB"):
        response = client.get("/ready")

    assert response.status_code == 503
    assert response.json()["checks"] == {"database": "ok", "feeds": "invalid"}
