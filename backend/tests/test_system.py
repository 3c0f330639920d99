import httpx
import pytest
from httpx import AsyncClient
from app.main import app


@pytest.mark.asyncio
async def test_health_ok():
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.get("/health", headers={"X-Request-ID": "req-123"})
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["request_id"] == "req-123"
    assert r.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_version_ok():
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.get("/version")
    assert r.status_code == 200
    data = r.json()
    assert "version" in data and "git_sha" in data
    assert data["limits"]["daily_attempt_cap"] >= 1
