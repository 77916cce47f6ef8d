"""
Response decoding: status-code dispatch, JSON validation and error classification.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, TypeVar, overload

from pydantic import TypeAdapter, ValidationError

from .exceptions import (
    APIClientError,
    APIRequestError,
    InvalidCredentialError,
    InvalidResponseError,
    MalformedResponseError,
    NotFoundError,
    RateLimitedError,
)
from .models import APIError

T = TypeVar("T")

SUCCESS_CODES = frozenset({HTTPStatus.OK, HTTPStatus.CREATED})

# Error raised when the error body itself cannot be decoded
_UNDECODABLE_ERRORS: dict[int, type[APIClientError]] = {
    HTTPStatus.UNAUTHORIZED: InvalidCredentialError,
    HTTPStatus.NOT_FOUND: NotFoundError,
    HTTPStatus.TOO_MANY_REQUESTS: RateLimitedError,
}


@overload
def decode_response(content: bytes, status_code: int, response_model: type[T]) -> T: ...
@overload
def decode_response(content: bytes, status_code: int, response_model: None = None) -> Any: ...


def decode_response(content: bytes, status_code: int, response_model: Any = None) -> Any:
    """
    Turn a raw response into a decoded value or raise a classified error.

    Args:
        content: Raw response body
        status_code: HTTP status code
        response_model: Type to validate a success body into (pydantic model,
            builtin generic such as ``list[Asset]``); None returns plain JSON

    Returns:
        The decoded value for HTTP 200/201

    Raises:
        MalformedResponseError: Success body that does not match response_model
        InvalidCredentialError: 401 with an undecodable body
        NotFoundError: 404 with an undecodable body
        RateLimitedError: 429 with an undecodable body
        APIRequestError: Any decodable error body, as ``"<field>: <reason>"``
        InvalidResponseError: Other statuses with an undecodable body
    """
    if status_code in SUCCESS_CODES:
        return _decode_success(content, status_code, response_model)

    try:
        api_error = APIError.model_validate_json(content)
    except ValidationError as e:
        raise _undecodable_error(status_code, e) from e

    raise APIRequestError(api_error.summary(), status_code, api_error)


def _decode_success(content: bytes, status_code: int, response_model: Any) -> Any:
    adapter: TypeAdapter[Any] = TypeAdapter(Any if response_model is None else response_model)
    try:
        return adapter.validate_json(content)
    except ValidationError as e:
        raise MalformedResponseError(
            f"Unexpected response format: {e.error_count()} validation error(s)",
            status_code=status_code,
        ) from e


def _undecodable_error(status_code: int, cause: ValidationError) -> APIClientError:
    error_cls = _UNDECODABLE_ERRORS.get(status_code)
    if error_cls is not None:
        return error_cls(status_code=status_code)
    if status_code == HTTPStatus.BAD_REQUEST:
        return MalformedResponseError(
            f"Undecodable error body: {cause.errors()[0]['msg']}",
            status_code=status_code,
        )
    return InvalidResponseError(status_code=status_code)
