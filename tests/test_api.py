"""Tests for the main API endpoints."""
import time

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_read_root(async_client: AsyncClient):
    """Test if the root endpoint returns the correct message."""
    response = await async_client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to the QuizRank API"}


@pytest.mark.asyncio
async def test_health_check(async_client: AsyncClient):
    before = int(time.time() * 1000)
    response = await async_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert before <= data["timestamp"] <= int(time.time() * 1000)


@pytest.mark.asyncio
async def test_request_id_is_echoed(async_client: AsyncClient):
    response = await async_client.get("/health", headers={"X-Request-ID": "abc123"})

    assert response.headers["X-Request-ID"] == "abc123"
