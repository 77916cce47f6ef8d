"""
Rate limited HTTP client for the FourCore REST API.

Every request passes through the shared token bucket before it is sent, and
the server's x-ratelimit-* headers are folded back into the limiter when the
server rejects a request with HTTP 429.
"""

from __future__ import annotations

import time
from http import HTTPStatus
from typing import TYPE_CHECKING, Any, TypeVar, overload

import httpx
from pydantic_core import PydanticSerializationError, to_json

from attack_sdk.logging_utils import ContextualLogger

from .decoding import decode_response
from .exceptions import RateLimitedError, RequestEncodingError
from .models import RawResponse, ReqOptions
from .rate_limiting.limiter import RateLimiter
from .rate_limiting.models import DEFAULT_REQUESTS_PER_MINUTE, RateInfo

if TYPE_CHECKING:
    from attack_sdk.config import Configuration

T = TypeVar("T")

DEFAULT_TIMEOUT = 60.0
DEFAULT_MAX_ADMISSION_WAIT = 5.0


class APIClient:
    """
    HTTP client for API requests with local rate governance.

    One instance is meant to be shared by all concurrent operations of a
    session; the rate limiter it owns is the only mutable shared state.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        requests_per_minute: int = DEFAULT_REQUESTS_PER_MINUTE,
        timeout: float = DEFAULT_TIMEOUT,
        max_admission_wait: float = DEFAULT_MAX_ADMISSION_WAIT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        try:
            parsed_url = httpx.URL(base_url)
        except httpx.InvalidURL as e:
            raise ValueError(f"Invalid base URL '{base_url}': {e}") from e

        self.base_url: str = base_url
        self._base_url: httpx.URL = parsed_url
        self.api_key: str = api_key
        self.max_admission_wait: float = max_admission_wait
        self.rate_limiter: RateLimiter = RateLimiter(requests_per_minute)
        self.last_rate_info: RateInfo | None = None
        self.client: httpx.AsyncClient = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
        )
        self._log = ContextualLogger({"base_url": base_url})

    @classmethod
    def from_config(
        cls,
        config: Configuration,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> APIClient:
        """Create a client from the configured credentials and tuning knobs."""
        client_config = config.get_client_config()
        return cls(
            config.base_url,
            config.api_key,
            requests_per_minute=client_config["requests_per_minute"],
            timeout=client_config["timeout"],
            max_admission_wait=client_config["max_admission_wait"],
            transport=transport,
        )

    def resolve(self, path: str) -> httpx.URL:
        """Resolve a path against the base URL (RFC 3986 reference resolution)."""
        return self._base_url.join(path)

    async def request(
        self,
        method: str,
        path: str,
        content: bytes | None = None,
        *,
        expect_json: bool = True,
        options: ReqOptions | None = None,
    ) -> RawResponse:
        """
        Perform one rate-governed HTTP round trip.

        Args:
            method: HTTP method
            path: Path resolved against the base URL
            content: Request body, sent as JSON when present
            expect_json: Whether to ask the server for JSON
            options: Extra query parameters and headers

        Returns:
            The undecoded response

        Raises:
            RateLimitedError: Local admission timed out or the server returned 429
            httpx.HTTPError: Transport failure, propagated unchanged
        """
        await self._admit()

        headers = {"Authorization": f"Bearer {self.api_key}"}
        if expect_json:
            headers["Accept"] = "application/json"
        if content is not None:
            headers["Content-Type"] = "application/json"

        params: dict[str, str] = {}
        if options is not None:
            headers.update(options.headers)
            params.update(options.params)

        url = self.resolve(path)
        start_time = time.perf_counter()
        response = await self.client.request(
            method,
            url,
            content=content,
            headers=headers,
            params=params or None,
        )
        duration = round((time.perf_counter() - start_time) * 1000, 2)

        rate_info = RateInfo.from_headers(response.headers)
        self.last_rate_info = rate_info

        self._log.debug(
            "Request completed",
            method=method,
            url=str(response.request.url),
            status_code=response.status_code,
            duration_ms=duration,
        )

        if response.status_code == HTTPStatus.TOO_MANY_REQUESTS:
            self._handle_rate_limited(rate_info)

        return RawResponse(
            content=response.content,
            status_code=response.status_code,
            content_type=response.headers.get("content-type", ""),
            rate_info=rate_info,
        )

    async def _admit(self) -> None:
        """Obtain local admission or fail with RateLimitedError."""
        result = self.rate_limiter.try_admit()
        if result.allowed:
            return

        self._log.debug(
            "Waiting for rate limiter",
            wait_time=round(result.wait_time, 3),
            max_wait=self.max_admission_wait,
        )
        try:
            await self.rate_limiter.wait_for_capacity(self.max_admission_wait)
        except TimeoutError as e:
            self._log.warning(
                "Local rate limit exceeded",
                wait_time=round(result.wait_time, 3),
                limit=self.rate_limiter.limit,
            )
            raise RateLimitedError(
                f"rate limit exceeded: retry in {result.wait_time:.2f}s",
                retry_after=result.wait_time,
                local=True,
                status_code=None,
            ) from e

    def _handle_rate_limited(self, rate_info: RateInfo) -> None:
        """Adopt the server's advertised limit and raise RateLimitedError."""
        if rate_info.limit > 0:
            self.rate_limiter.reconfigure(rate_info.limit)

        retry_after = float(rate_info.retry_after) if rate_info.retry_after > 0 else None
        self._log.warning(
            "Server rate limit exceeded",
            limit=rate_info.limit,
            remaining=rate_info.remaining,
            retry_after=retry_after,
            resource=rate_info.resource or None,
        )

        message = "rate limit exceeded"
        if retry_after is not None:
            message += f": retry in {rate_info.retry_after}s"
        raise RateLimitedError(message, retry_after=retry_after, rate_info=rate_info)

    @overload
    async def request_json(
        self, method: str, path: str, payload: Any = None, *,
        response_model: type[T], options: ReqOptions | None = None,
    ) -> T: ...
    @overload
    async def request_json(
        self, method: str, path: str, payload: Any = None, *,
        response_model: None = None, options: ReqOptions | None = None,
    ) -> Any: ...

    async def request_json(
        self,
        method: str,
        path: str,
        payload: Any = None,
        *,
        response_model: Any = None,
        options: ReqOptions | None = None,
    ) -> Any:
        """Send an optional JSON payload and decode the JSON response."""
        content = None
        if payload is not None:
            try:
                content = to_json(payload)
            except (PydanticSerializationError, ValueError) as e:
                raise RequestEncodingError(f"Cannot encode request payload: {e}") from e

        raw = await self.request(method, path, content, expect_json=True, options=options)
        return decode_response(raw.content, raw.status_code, response_model)

    async def get_json(
        self,
        path: str,
        response_model: Any = None,
        options: ReqOptions | None = None,
    ) -> Any:
        """GET a resource and decode it into response_model."""
        return await self.request_json(
            "GET", path, response_model=response_model, options=options
        )

    async def post_json(
        self,
        path: str,
        payload: Any = None,
        response_model: Any = None,
        options: ReqOptions | None = None,
    ) -> Any:
        """POST an optional payload and decode the response into response_model."""
        return await self.request_json(
            "POST", path, payload, response_model=response_model, options=options
        )

    async def put_json(
        self,
        path: str,
        payload: Any = None,
        response_model: Any = None,
        options: ReqOptions | None = None,
    ) -> Any:
        """PUT an optional payload and decode the response into response_model."""
        return await self.request_json(
            "PUT", path, payload, response_model=response_model, options=options
        )

    async def delete_json(
        self,
        path: str,
        payload: Any = None,
        response_model: Any = None,
        options: ReqOptions | None = None,
    ) -> Any:
        """DELETE a resource and decode the response into response_model."""
        return await self.request_json(
            "DELETE", path, payload, response_model=response_model, options=options
        )

    def get_statistics(self) -> dict[str, Any]:
        """Get rate limiting statistics and the last advertised server quota."""
        stats: dict[str, Any] = {"base_url": self.base_url}
        stats.update(self.rate_limiter.get_statistics())
        if self.last_rate_info is not None:
            stats["server_limit"] = self.last_rate_info.limit
            stats["server_remaining"] = self.last_rate_info.remaining
        return stats

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> APIClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
