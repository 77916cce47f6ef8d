# attack_sdk/models.py
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SDKModel(BaseModel):
    """Base for API resources; unknown fields are kept, not rejected."""
    model_config = ConfigDict(extra="allow")


class SuccessIDResponse(SDKModel):
    success: bool = False
    id: Any = None


class ListWithCount(SDKModel):
    """Paginated list response."""
    count: int = 0
    data: list[Any] = Field(default_factory=list)


class AssetUser(SDKModel):
    name: str = ""
    type: str = ""


class AssetEDR(SDKModel):
    edr_type: str = ""


class Asset(SDKModel):
    """Endpoint asset registered with the platform."""
    id: str
    org_id: int | None = None
    org_name: str | None = None
    available: bool = False
    connected: bool = False
    disabled: bool = False
    elevated: bool = False
    version: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    tags: dict[str, str] | None = None
    users: list[AssetUser] | None = None
    edr: list[AssetEDR] | None = None
    systeminfo: dict[str, Any] | None = None


class AssetTags(SDKModel):
    tags: dict[str, str] = Field(default_factory=dict)


class AssetSetTagsResponse(SDKModel):
    success: bool = False
    tags: dict[str, str] | None = None
