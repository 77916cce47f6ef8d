#!/usr/bin/env python3
"""
Tests for the asset endpoint wrappers.
"""

import json

import httpx
import pytest
import pytest_asyncio

from attack_sdk import assets
from attack_sdk.api import APIClient, InvalidCredentialError, NotFoundError
from attack_sdk.models import Asset, ListWithCount, SuccessIDResponse

ASSETS = [
    {"id": "a1", "connected": True, "available": True, "version": "1.2",
     "tags": {"env": "prod"}, "users": [{"name": "root", "type": "admin"}]},
    {"id": "a2", "connected": True, "available": False, "version": "1.2", "tags": None},
    {"id": "a3", "connected": False, "available": True, "version": "1.1",
     "systeminfo": {"hostname": "db-01", "os": "linux"}},
]


def routes(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/api/v2/assets" and request.method == "GET":
        return httpx.Response(200, json=ASSETS)
    if path == "/api/v2/assets/a1" and request.method == "GET":
        return httpx.Response(200, json=ASSETS[0])
    if path == "/api/v2/assets/a1" and request.method == "DELETE":
        return httpx.Response(200, json={"success": True, "id": "a1"})
    if path.endswith("/enable") or path.endswith("/disable"):
        return httpx.Response(200, json={"success": True, "id": path.split("/")[-2]})
    if path == "/api/v2/assets/a1/tags":
        body = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "tags": body["tags"]})
    if path == "/api/v2/assets/a1/analytics":
        return httpx.Response(200, json={"days": int(request.url.params["d"]), "runs": 4})
    if path == "/api/v2/assets/a1/executions":
        return httpx.Response(
            200, json={"count": 1, "data": [dict(request.url.params)]}
        )
    return httpx.Response(404, content=b"404 page not found")


@pytest_asyncio.fixture
async def client():
    async with APIClient(
        "https://api.example.com", "test-key", transport=httpx.MockTransport(routes)
    ) as api_client:
        yield api_client


class TestAssets:
    """Test asset wrappers against a mocked API."""

    @pytest.mark.asyncio
    async def test_get_assets(self, client):
        """Test listing assets into typed models."""
        result = await assets.get_assets(client)

        assert [a.id for a in result] == ["a1", "a2", "a3"]
        assert all(isinstance(a, Asset) for a in result)
        assert result[0].users[0].name == "root"
        assert result[2].systeminfo["hostname"] == "db-01"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("connected", "available", "expected"),
        [
            (False, False, ["a1", "a2", "a3"]),
            (True, False, ["a1", "a2"]),
            (False, True, ["a1", "a3"]),
            (True, True, ["a1"]),
        ],
    )
    async def test_get_filtered_assets(self, client, connected, available, expected):
        """Test connected/available filtering."""
        result = await assets.get_filtered_assets(
            client, connected=connected, available=available
        )
        assert [a.id for a in result] == expected

    @pytest.mark.asyncio
    async def test_get_asset(self, client):
        """Test fetching one asset."""
        result = await assets.get_asset(client, "a1")
        assert result.id == "a1"
        assert result.tags == {"env": "prod"}

    @pytest.mark.asyncio
    async def test_get_missing_asset_keeps_sentinel(self, client):
        """Test that a missing asset raises NotFoundError with context attached."""
        with pytest.raises(NotFoundError) as exc_info:
            await assets.get_asset(client, "missing-id")

        assert "operation: get asset, resource_id: missing-id" in exc_info.value.__notes__

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", ["enable_asset", "disable_asset", "delete_asset"])
    async def test_state_changes(self, client, operation):
        """Test enable, disable and delete responses."""
        result = await getattr(assets, operation)(client, "a1")
        assert result == SuccessIDResponse(success=True, id="a1")

    @pytest.mark.asyncio
    async def test_set_asset_tags(self, client):
        """Test that tags are posted and echoed back."""
        result = await assets.set_asset_tags(client, "a1", {"owner": "blue"})
        assert result.success is True
        assert result.tags == {"owner": "blue"}

    @pytest.mark.asyncio
    async def test_get_asset_analytics(self, client):
        """Test the day window query parameter."""
        result = await assets.get_asset_analytics(client, "a1", 30)
        assert result == {"days": 30, "runs": 4}

    @pytest.mark.asyncio
    async def test_get_asset_executions_params(self, client):
        """Test pagination parameters and the optional name filter."""
        result = await assets.get_asset_executions(client, "a1", size=5, offset=10)
        assert isinstance(result, ListWithCount)
        assert result.data[0] == {"size": "5", "offset": "10", "order": "desc"}

        named = await assets.get_asset_executions(client, "a1", name="mimikatz")
        assert named.data[0]["name"] == "mimikatz"


@pytest.mark.asyncio
async def test_invalid_key_surfaces_sentinel():
    """Test that wrappers surface the canonical credential error."""
    transport = httpx.MockTransport(lambda request: httpx.Response(401, content=b"denied"))
    async with APIClient("https://api.example.com", "bad-key", transport=transport) as client:
        with pytest.raises(InvalidCredentialError):
            await assets.get_assets(client)
