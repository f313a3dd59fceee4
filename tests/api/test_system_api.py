"""
系统接口与统一错误处理测试
"""
import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from houseofhire.services.lifecycle import LifecycleOrchestrator

from tests.support import ADMIN_HEADERS


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["status"] == "healthy"
    assert "pending_notifications" in body["data"]
    assert "failed_notifications" in body["data"]


@pytest.mark.asyncio
async def test_error_envelope(client: AsyncClient):
    response = await client.get("/api/v1/applications/missing", headers=ADMIN_HEADERS)
    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["code"] == 404
    assert body["message"]
    assert body["data"]["error"] == "NotFound"


@pytest.mark.asyncio
async def test_database_unavailable_maps_to_503(client: AsyncClient, monkeypatch):
    async def broken(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))
    
    monkeypatch.setattr(LifecycleOrchestrator, "transition_application", broken)
    response = await client.post(
        "/api/v1/applications/any/transition", json={"status": "HOLD"}, headers=ADMIN_HEADERS
    )
    assert response.status_code == 503
    assert response.json()["data"]["error"] == "CollaboratorUnavailable"
