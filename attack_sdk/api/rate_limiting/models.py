"""
Rate limiting models and dataclasses.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

# Constants
WINDOW_SECONDS = 60.0
DEFAULT_REQUESTS_PER_MINUTE = 100

RATE_LIMIT_HEADER = "x-ratelimit-limit"
RATE_REMAINING_HEADER = "x-ratelimit-remaining"
RATE_USED_HEADER = "x-ratelimit-used"
RATE_RESET_HEADER = "x-ratelimit-reset"
RATE_RETRY_AFTER_HEADER = "x-ratelimit-retry-after"
RATE_RESOURCE_HEADER = "x-ratelimit-resource"


@dataclass(frozen=True)
class RateLimitResult:
    """Result of an admission check."""
    allowed: bool
    wait_time: float  # seconds until one token is available


@dataclass
class TokenBucket:
    """
    Refilling token bucket.

    Not synchronized on its own; RateLimiter guards every access with its lock
    and replaces the whole bucket when the capacity changes.
    """
    capacity: int
    refill_rate: float  # tokens per second
    tokens: float
    last_refill: float

    @classmethod
    def full(cls, requests_per_minute: int, now: float) -> TokenBucket:
        """Create a bucket allowing a full burst of requests_per_minute."""
        return cls(
            capacity=requests_per_minute,
            refill_rate=requests_per_minute / WINDOW_SECONDS,
            tokens=float(requests_per_minute),
            last_refill=now,
        )

    def refill(self, now: float) -> None:
        """Add the tokens accrued since the last refill, capped at capacity."""
        elapsed = max(0.0, now - self.last_refill)
        self.tokens = min(float(self.capacity), self.tokens + elapsed * self.refill_rate)
        self.last_refill = now

    def time_until_available(self) -> float:
        """Linear projection of the time until one whole token is available."""
        if self.tokens >= 1.0:
            return 0.0
        return (1.0 - self.tokens) / self.refill_rate


def _parse_int(value: str | None) -> int:
    if not value:
        return 0
    try:
        return int(value.strip())
    except ValueError:
        return 0


@dataclass(frozen=True)
class RateInfo:
    """Server-advertised quota state parsed from one response's headers."""
    limit: int = 0
    remaining: int = 0
    used: int = 0
    reset: int = 0
    retry_after: int = 0
    resource: str = ""

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> RateInfo:
        """
        Parse x-ratelimit-* headers.

        Missing or malformed values default to zero; parsing never fails.
        Header lookup is case-insensitive when given httpx.Headers.
        """
        return cls(
            limit=_parse_int(headers.get(RATE_LIMIT_HEADER)),
            remaining=_parse_int(headers.get(RATE_REMAINING_HEADER)),
            used=_parse_int(headers.get(RATE_USED_HEADER)),
            reset=_parse_int(headers.get(RATE_RESET_HEADER)),
            retry_after=_parse_int(headers.get(RATE_RETRY_AFTER_HEADER)),
            resource=headers.get(RATE_RESOURCE_HEADER) or "",
        )
