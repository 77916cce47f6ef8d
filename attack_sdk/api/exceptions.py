"""
Error taxonomy for API operations.

This module provides the exceptions raised by the API client:
- Canonical errors for invalid credentials, missing resources and rate limits
- Structured server errors summarised from the JSON error body
- Decode and encode failures

Transport failures are not wrapped: httpx.HTTPError subclasses propagate as-is.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import APIError
    from .rate_limiting.models import RateInfo


class APIClientError(Exception):
    """Base API client error with HTTP context."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidCredentialError(APIClientError):
    """The server rejected the API key."""

    def __init__(self, message: str = "invalid api key", status_code: int | None = 401):
        super().__init__(message, status_code)


class NotFoundError(APIClientError):
    """The requested resource does not exist."""

    def __init__(self, message: str = "resource not found", status_code: int | None = 404):
        super().__init__(message, status_code)


class RateLimitedError(APIClientError):
    """Rate limit error with retry information.

    ``local`` is True when the request was never sent because the client-side
    limiter could not admit it in time.
    """

    def __init__(
        self,
        message: str = "rate limit exceeded",
        retry_after: float | None = None,
        rate_info: RateInfo | None = None,
        local: bool = False,
        status_code: int | None = 429,
    ):
        super().__init__(message, status_code)
        self.retry_after = retry_after
        self.rate_info = rate_info
        self.local = local


class APIRequestError(APIClientError):
    """Server error summarised as ``"<field>: <reason>"``."""

    def __init__(self, message: str, status_code: int, api_error: APIError | None = None):
        super().__init__(message, status_code)
        self.api_error = api_error


class InvalidResponseError(APIClientError):
    """Non-success response whose body could not be interpreted."""

    def __init__(
        self,
        message: str = "resource not found: invalid response content",
        status_code: int | None = None,
    ):
        super().__init__(message, status_code)


class MalformedResponseError(APIClientError):
    """Response body could not be decoded into the expected type."""
    pass


class RequestEncodingError(APIClientError):
    """Request payload could not be serialized to JSON."""
    pass
