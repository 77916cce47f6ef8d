"""
Python SDK for the FourCore attack simulation API.
"""

from __future__ import annotations

from .api import (
    APIClient,
    APIClientError,
    InvalidCredentialError,
    NotFoundError,
    RateLimitedError,
    ReqOptions,
)
from .config import Configuration, Credentials

__all__ = [
    "APIClient",
    "APIClientError",
    "Configuration",
    "Credentials",
    "InvalidCredentialError",
    "NotFoundError",
    "RateLimitedError",
    "ReqOptions",
]
