"""
Token bucket rate limiting with runtime reconfiguration from server feedback.
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Callable

import structlog

from .models import WINDOW_SECONDS, RateLimitResult, TokenBucket

logger = structlog.get_logger(__name__)


class RateLimiter:
    """
    Requests-per-minute admission controller backed by a token bucket.

    Features:
    - O(1) admission checks with a linear "time until available" estimate
    - Bounded asynchronous waiting that honours task cancellation
    - Whole-bucket replacement when the server advertises a new limit
    - Safe to share between coroutines and threads

    The bucket starts full, so a fresh limiter allows a burst of
    ``requests_per_minute`` requests before throttling to the steady rate.
    """

    def __init__(
        self,
        requests_per_minute: int,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        if requests_per_minute <= 0:
            raise ValueError(
                f"requests_per_minute must be positive, got {requests_per_minute}"
            )

        self._clock = clock
        self._lock = threading.Lock()
        self._bucket = TokenBucket.full(requests_per_minute, clock())

        # Statistics
        self._admitted = 0
        self._denied = 0
        self._reconfigurations = 0

    @property
    def limit(self) -> int:
        """Current capacity in requests per minute."""
        with self._lock:
            return self._bucket.capacity

    def try_admit(self) -> RateLimitResult:
        """
        Non-blocking admission check.

        Consumes one token and returns ``allowed=True`` when capacity is
        available. Otherwise returns ``allowed=False`` with the estimated
        seconds until a token frees up, leaving the bucket untouched.
        """
        with self._lock:
            bucket = self._bucket
            bucket.refill(self._clock())

            if bucket.tokens >= 1.0:
                bucket.tokens -= 1.0
                self._admitted += 1
                return RateLimitResult(allowed=True, wait_time=0.0)

            self._denied += 1
            return RateLimitResult(allowed=False, wait_time=bucket.time_until_available())

    async def wait_for_capacity(self, max_wait: float) -> None:
        """
        Wait until a token has been consumed for the caller.

        Args:
            max_wait: Maximum time to wait in seconds

        Raises:
            TimeoutError: If capacity cannot be obtained within max_wait
            asyncio.CancelledError: If the waiting task is cancelled
        """
        deadline = self._clock() + max_wait

        while True:
            result = self.try_admit()
            if result.allowed:
                return

            remaining = deadline - self._clock()
            if result.wait_time > remaining:
                raise TimeoutError(
                    f"Rate limit wait time ({result.wait_time:.2f}s) "
                    f"exceeds remaining budget ({max(remaining, 0.0):.2f}s)"
                )

            # Sleep outside the lock so other callers keep probing
            await asyncio.sleep(result.wait_time)

    def reconfigure(self, requests_per_minute: int) -> bool:
        """
        Replace the bucket with a fresh one of the given capacity.

        Ignored for non-positive values or when the capacity is unchanged.

        Returns:
            True if the limiter was replaced
        """
        if requests_per_minute <= 0:
            return False

        with self._lock:
            previous = self._bucket.capacity
            if requests_per_minute == previous:
                return False
            self._bucket = TokenBucket.full(requests_per_minute, self._clock())
            self._reconfigurations += 1

        logger.info(
            "Rate limiter reconfigured",
            previous_limit=previous,
            new_limit=requests_per_minute,
        )
        return True

    def remaining(self) -> int:
        """Whole requests that could be admitted right now."""
        with self._lock:
            self._bucket.refill(self._clock())
            return int(self._bucket.tokens)

    def get_statistics(self) -> dict[str, int | float]:
        """Get current rate limiting statistics."""
        with self._lock:
            bucket = self._bucket
            bucket.refill(self._clock())
            return {
                'limit': bucket.capacity,
                'window_seconds': WINDOW_SECONDS,
                'refill_rate': bucket.refill_rate,
                'available_tokens': bucket.tokens,
                'admitted': self._admitted,
                'denied': self._denied,
                'reconfigurations': self._reconfigurations,
                'utilization': 1.0 - bucket.tokens / bucket.capacity,
            }
