"""Asset endpoints of the FourCore API."""

from __future__ import annotations

from typing import Any

from attack_sdk.api.client import APIClient
from attack_sdk.api.models import ReqOptions
from attack_sdk.logging_utils import log_api_operation
from attack_sdk.models import (
    Asset,
    AssetSetTagsResponse,
    AssetTags,
    ListWithCount,
    SuccessIDResponse,
)

ASSETS_V2_URI = "/api/v2/assets"


@log_api_operation("list assets")
async def get_assets(client: APIClient) -> list[Asset]:
    return await client.get_json(ASSETS_V2_URI, list[Asset])


@log_api_operation("get asset", resource_arg="asset_id")
async def get_asset(client: APIClient, asset_id: str) -> Asset:
    return await client.get_json(f"{ASSETS_V2_URI}/{asset_id}", Asset)


async def get_filtered_assets(
    client: APIClient,
    *,
    connected: bool = False,
    available: bool = False,
) -> list[Asset]:
    """List assets, keeping only connected and/or available ones when asked."""
    assets = await get_assets(client)
    if not connected and not available:
        return assets

    return [
        asset for asset in assets
        if (not connected or asset.connected) and (not available or asset.available)
    ]


@log_api_operation("enable asset", resource_arg="asset_id")
async def enable_asset(client: APIClient, asset_id: str) -> SuccessIDResponse:
    return await client.post_json(
        f"{ASSETS_V2_URI}/{asset_id}/enable", None, SuccessIDResponse
    )


@log_api_operation("disable asset", resource_arg="asset_id")
async def disable_asset(client: APIClient, asset_id: str) -> SuccessIDResponse:
    return await client.post_json(
        f"{ASSETS_V2_URI}/{asset_id}/disable", None, SuccessIDResponse
    )


@log_api_operation("delete asset", resource_arg="asset_id")
async def delete_asset(client: APIClient, asset_id: str) -> SuccessIDResponse:
    return await client.delete_json(
        f"{ASSETS_V2_URI}/{asset_id}", None, SuccessIDResponse
    )


@log_api_operation("set asset tags", resource_arg="asset_id")
async def set_asset_tags(
    client: APIClient, asset_id: str, tags: dict[str, str]
) -> AssetSetTagsResponse:
    return await client.post_json(
        f"{ASSETS_V2_URI}/{asset_id}/tags", AssetTags(tags=tags), AssetSetTagsResponse
    )


@log_api_operation("get asset analytics", resource_arg="asset_id")
async def get_asset_analytics(
    client: APIClient, asset_id: str, days: int
) -> dict[str, Any]:
    return await client.get_json(
        f"{ASSETS_V2_URI}/{asset_id}/analytics",
        dict[str, Any],
        ReqOptions(params={"d": str(days)}),
    )


@log_api_operation("list asset executions", resource_arg="asset_id")
async def get_asset_executions(
    client: APIClient,
    asset_id: str,
    *,
    size: int = 10,
    offset: int = 0,
    order: str = "desc",
    name: str = "",
) -> ListWithCount:
    """List execution reports for one asset, newest first by default."""
    params = {
        "size": str(size),
        "offset": str(offset),
        "order": order,
    }
    if name:
        params["name"] = name

    return await client.get_json(
        f"{ASSETS_V2_URI}/{asset_id}/executions",
        ListWithCount,
        ReqOptions(params=params),
    )
