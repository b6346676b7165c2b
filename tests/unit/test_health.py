"""Unit tests for health endpoints."""

import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient


def test_health_check(client: TestClient) -> None:
    """Test basic health check returns healthy status."""
    response = client.get("/api/v1/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data
    assert "environment" in data
    assert "timestamp" in data
    assert set(data["dependencies"]) == {"postgres", "redis", "shopify"}


def test_liveness_check(client: TestClient) -> None:
    """Test liveness check returns alive status."""
    response = client.get("/api/v1/health/live")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "alive"


@pytest.mark.asyncio
async def test_readiness_check(async_client: AsyncClient) -> None:
    """Database answers; Redis is absent from the test cache."""
    response = await async_client.get("/api/v1/health/ready")
    assert response.status_code == 200

    data = response.json()
    assert data["ready"] is True
    assert data["checks"] == {"postgres": True, "redis": False}
