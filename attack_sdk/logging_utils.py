"""
Centralized logging and error handling utilities for the attack SDK.

This module provides decorators and helper functions to standardize logging
and error reporting across API operations.

Features:
- Structured logging with contextual information
- Error classification for the API client exception taxonomy
- One-line user-facing descriptions of sentinel errors
- Performance timing for async operations
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, ParamSpec, TypeVar

import httpx
import structlog

from attack_sdk.api.exceptions import (
    APIClientError,
    APIRequestError,
    InvalidCredentialError,
    MalformedResponseError,
    NotFoundError,
    RateLimitedError,
)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

# Type variables for generic decorators
P = ParamSpec("P")
T = TypeVar("T")
AsyncCallable = Callable[P, Awaitable[T]]

logger = structlog.get_logger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Route structured log output through the root logger at the given level."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
    )


class ErrorHandler:
    """Centralized API error classification and description."""

    @staticmethod
    def classify_error(error: BaseException) -> str:
        """
        Classify an error into a category used for logging and reporting.

        Args:
            error: The exception to classify

        Returns:
            Error category name
        """
        if isinstance(error, InvalidCredentialError):
            return "invalid_credential"
        if isinstance(error, NotFoundError):
            return "not_found"
        if isinstance(error, RateLimitedError):
            return "rate_limited"
        if isinstance(error, MalformedResponseError):
            return "malformed_response"
        if isinstance(error, APIClientError):
            return "api_error"
        if isinstance(error, asyncio.CancelledError):
            return "cancelled"
        if isinstance(error, TimeoutError | httpx.TimeoutException):
            return "timeout_error"
        if isinstance(error, httpx.TransportError | ConnectionError | OSError):
            return "connection_error"
        return "unknown_error"

    @staticmethod
    def describe_error(
        error: BaseException,
        operation: str,
        resource_id: str | None = None,
    ) -> str:
        """
        Build the one-line diagnostic shown to a user.

        Args:
            error: The exception raised by an API operation
            operation: Description of the operation that failed
            resource_id: Identifier of the resource involved, if any

        Returns:
            Human readable message
        """
        if isinstance(error, InvalidCredentialError):
            return "API request failed: Invalid API Key"
        if isinstance(error, NotFoundError):
            return f"Resource not found: {resource_id}" if resource_id else "Resource not found"
        if isinstance(error, RateLimitedError):
            if error.retry_after:
                return (
                    "API request failed: Rate limit exceeded "
                    f"(retry after {error.retry_after:g}s)"
                )
            return "API request failed: Rate limit exceeded"
        return f"{operation} failed: {error!s}"


def log_operation(
    operation: str,
    *,
    log_args: bool = False,
    log_result: bool = False,
    log_timing: bool = True,
    context: dict[str, Any] | None = None,
) -> Callable[[AsyncCallable[P, T]], AsyncCallable[P, T]]:
    """
    Decorator for logging async operations with structured context.

    Args:
        operation: Description of the operation being performed
        log_args: Whether to log function arguments
        log_result: Whether to log function result
        log_timing: Whether to log execution timing
        context: Additional context to include in logs

    Returns:
        Decorated function with logging
    """
    def decorator(func: AsyncCallable[P, T]) -> AsyncCallable[P, T]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            operation_logger = logger.bind(
                operation=operation,
                function=func.__name__,
                **(context or {}),
            )

            log_data = {}
            if log_args:
                log_data.update({
                    # First positional argument is the client
                    "args": args[1:] if args else [],
                    "kwargs": kwargs,
                })

            operation_logger.debug("Operation started", **log_data)

            start_time = time.perf_counter() if log_timing else None

            try:
                result = await func(*args, **kwargs)

                end_log_data: dict[str, Any] = {}
                if log_timing and start_time is not None:
                    duration = round((time.perf_counter() - start_time) * 1000, 2)
                    end_log_data["duration_ms"] = duration
                if log_result:
                    end_log_data["result"] = result

                operation_logger.debug(
                    "Operation completed successfully", **end_log_data
                )
                return result

            except Exception as e:
                error_log_data: dict[str, Any] = {
                    "error_type": type(e).__name__,
                    "error_category": ErrorHandler.classify_error(e),
                    "error_message": str(e),
                }
                if log_timing and start_time is not None:
                    duration = round((time.perf_counter() - start_time) * 1000, 2)
                    error_log_data["duration_ms"] = duration

                operation_logger.error("Operation failed", **error_log_data)
                raise

        return wrapper
    return decorator


def handle_api_errors(
    operation: str,
    *,
    resource_arg: str | None = None,
) -> Callable[[AsyncCallable[P, T]], AsyncCallable[P, T]]:
    """
    Decorator that attaches operation context to errors without changing them.

    The exception type is preserved so callers can still tell sentinel errors
    apart; the context travels as an exception note.

    Args:
        operation: Description of the operation for error context
        resource_arg: Name of the keyword or second positional argument that
            holds the resource identifier

    Returns:
        Decorated function
    """
    def decorator(func: AsyncCallable[P, T]) -> AsyncCallable[P, T]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                resource_id = _resource_id(resource_arg, args, kwargs)
                note = f"operation: {operation}"
                if resource_id is not None:
                    note += f", resource_id: {resource_id}"
                e.add_note(note)
                logger.warning(
                    "API operation error",
                    operation=operation,
                    resource_id=resource_id,
                    error_type=type(e).__name__,
                    error_category=ErrorHandler.classify_error(e),
                    status_code=getattr(e, "status_code", None),
                )
                raise

        return wrapper
    return decorator


def _resource_id(
    resource_arg: str | None, args: tuple[Any, ...], kwargs: dict[str, Any]
) -> str | None:
    if resource_arg is None:
        return None
    if resource_arg in kwargs:
        return str(kwargs[resource_arg])
    # Wrappers take the client first and the resource id second
    if len(args) > 1:
        return str(args[1])
    return None


@asynccontextmanager
async def operation_context(
    operation: str,
    *,
    context: dict[str, Any] | None = None,
    log_timing: bool = True,
):
    """
    Async context manager for operation logging.

    Args:
        operation: Description of the operation
        context: Additional context for logging
        log_timing: Whether to log operation timing

    Yields:
        Bound logger for the operation
    """
    operation_logger = logger.bind(
        operation=operation,
        **(context or {}),
    )

    operation_logger.debug("Operation started")
    start_time = time.perf_counter() if log_timing else None

    try:
        yield operation_logger

        log_data: dict[str, Any] = {}
        if log_timing and start_time is not None:
            duration = round((time.perf_counter() - start_time) * 1000, 2)
            log_data["duration_ms"] = duration

        operation_logger.debug("Operation completed successfully", **log_data)

    except Exception as e:
        error_log_data: dict[str, Any] = {
            "error_type": type(e).__name__,
            "error_message": str(e),
        }
        if log_timing and start_time is not None:
            duration = round((time.perf_counter() - start_time) * 1000, 2)
            error_log_data["duration_ms"] = duration

        operation_logger.error("Operation failed", **error_log_data)
        raise


class ContextualLogger:
    """Logger that maintains context across related operations."""

    def __init__(self, base_context: dict[str, Any] | None = None):
        self.base_context = base_context or {}
        self._logger = logger.bind(**self.base_context)

    def bind(self, **context: Any) -> ContextualLogger:
        """Create a new logger with additional context."""
        merged_context = {**self.base_context, **context}
        return ContextualLogger(merged_context)

    def info(self, message: str, **context: Any) -> None:
        """Log info message with context."""
        self._logger.info(message, **context)

    def warning(self, message: str, **context: Any) -> None:
        """Log warning message with context."""
        self._logger.warning(message, **context)

    def error(self, message: str, **context: Any) -> None:
        """Log error message with context."""
        self._logger.error(message, **context)

    def debug(self, message: str, **context: Any) -> None:
        """Log debug message with context."""
        self._logger.debug(message, **context)


def log_api_operation(operation: str, **kwargs) -> Callable:
    """Combined logging and error context decorator."""
    log_kwargs = {
        k: v for k, v in kwargs.items()
        if k in ["log_args", "log_result", "log_timing", "context"]
    }
    error_kwargs = {
        k: v for k, v in kwargs.items()
        if k in ["resource_arg"]
    }

    def decorator(func):
        return handle_api_errors(operation, **error_kwargs)(
            log_operation(operation, **log_kwargs)(func)
        )
    return decorator
