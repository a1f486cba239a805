"""Tests for health check endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient

from storefront.core.database import get_db


pytestmark = pytest.mark.integration


@pytest.fixture
def db_session(app):
    """Stand-in session answering the readiness probe's query."""
    session = MagicMock()
    session.execute = AsyncMock()

    async def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    return session


async def test_liveness_endpoint(client: AsyncClient):
    """Test that liveness endpoint returns 200."""
    response = await client.get("/health/live")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "alive"


async def test_readiness_endpoint(client: AsyncClient, db_session):
    """Test that readiness endpoint returns 200 with healthy checks."""
    response = await client.get("/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"] == {"database": "ok"}


async def test_readiness_degraded(client: AsyncClient, db_session):
    """Test that a failing database reports 503."""
    db_session.execute.side_effect = ConnectionRefusedError("db down")

    response = await client.get("/health/ready")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"


async def test_info_endpoint(client: AsyncClient):
    """Test that info endpoint returns application metadata."""
    response = await client.get("/info")

    assert response.status_code == 200
    data = response.json()
    assert "app" in data
    assert "environment" in data
