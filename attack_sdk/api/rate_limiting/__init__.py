"""
Client-side rate limiting.

This package contains:
- Token bucket admission control
- Parsing of server-advertised quota headers
"""

from .limiter import RateLimiter
from .models import DEFAULT_REQUESTS_PER_MINUTE, RateInfo, RateLimitResult, TokenBucket

__all__ = [
    "DEFAULT_REQUESTS_PER_MINUTE",
    "RateInfo",
    "RateLimitResult",
    "RateLimiter",
    "TokenBucket",
]
