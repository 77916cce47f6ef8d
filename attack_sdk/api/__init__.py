"""
Rate limited REST client core.

This package provides:
- Authenticated request execution over httpx
- Token bucket rate limiting adjusted from server feedback
- Status-code based response decoding into pydantic types
- A small exception taxonomy with canonical sentinel errors
"""

from __future__ import annotations

from .client import APIClient
from .decoding import decode_response
from .exceptions import (
    APIClientError,
    APIRequestError,
    InvalidCredentialError,
    InvalidResponseError,
    MalformedResponseError,
    NotFoundError,
    RateLimitedError,
    RequestEncodingError,
)
from .models import APIError, ErrorItem, RawResponse, ReqOptions
from .rate_limiting import RateInfo, RateLimiter, RateLimitResult

__all__ = [
    # Client
    "APIClient",
    # Exceptions
    "APIClientError",
    # Models
    "APIError",
    "APIRequestError",
    "ErrorItem",
    "InvalidCredentialError",
    "InvalidResponseError",
    "MalformedResponseError",
    "NotFoundError",
    "RateInfo",
    "RateLimitResult",
    "RateLimitedError",
    "RateLimiter",
    "RawResponse",
    "ReqOptions",
    "RequestEncodingError",
    "decode_response",
]
