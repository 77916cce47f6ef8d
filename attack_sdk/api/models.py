"""
Core API models: error bodies, per-call options and raw responses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field

from .rate_limiting.models import RateInfo


class ErrorItem(BaseModel):
    """Field-level error reported by the server."""
    name: str = ""
    reason: str = ""
    more: dict[str, Any] | None = None


class APIError(BaseModel):
    """Decoded shape of a non-success JSON error body."""
    code: int = 0
    detail: str = ""
    title: str = ""
    status: int = 0
    errors: list[ErrorItem] = Field(default_factory=list)

    def first_error(self) -> ErrorItem:
        """Canonical summary: the first error item, or an ``Unknown`` placeholder."""
        if self.errors:
            return self.errors[0]
        return ErrorItem(name="Unknown")

    def summary(self) -> str:
        item = self.first_error()
        return f"{item.name}: {item.reason}"


@dataclass(frozen=True)
class ReqOptions:
    """Per-call query parameters and extra headers."""
    params: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RawResponse:
    """Undecoded result of one HTTP round trip."""
    content: bytes
    status_code: int
    content_type: str
    rate_info: RateInfo = field(default_factory=RateInfo)
