"""
Tests for health endpoints
"""

import pytest
from httpx import AsyncClient

from venue_api.core.database import get_session


class FakeResult:
    def scalar(self):
        return 1


class FakeSession:
    async def execute(self, statement):
        return FakeResult()


class BrokenSession:
    async def execute(self, statement):
        raise ConnectionError("database is down")


@pytest.mark.asyncio
async def test_liveness(client: AsyncClient):
    response = await client.get("/api/v1/health/live")

    assert response.status_code == 200
    assert response.json()["status"] == "alive"


@pytest.mark.asyncio
async def test_readiness(client: AsyncClient, city_configs):
    from venue_api.main import app

    app.state.city_configs = city_configs
    app.dependency_overrides[get_session] = lambda: FakeSession()

    response = await client.get("/api/v1/health/ready")

    assert response.json()["status"] == "ready"


@pytest.mark.asyncio
async def test_readiness_without_database(client: AsyncClient, city_configs):
    from venue_api.main import app

    app.state.city_configs = city_configs
    app.dependency_overrides[get_session] = lambda: BrokenSession()

    response = await client.get("/api/v1/health/ready")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "not ready"
    assert body["checks"]["database"] is False
