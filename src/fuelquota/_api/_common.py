"""Shared helpers for backend endpoint modules.

This module centralizes:
- attaching the caller's bearer token
- mapping ``{code, message}`` error bodies onto the exception hierarchy
- validating list/object response shapes

It is internal to fuelquota and may change at any time.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fuelquota._transport import Transport
from fuelquota.context import CallerContext
from fuelquota.exceptions import (
    ApiError,
    AuthorizationError,
    DuplicateError,
    FuelQuotaError,
    FuelTypeMismatchError,
    InsufficientStockError,
    InvalidAmountError,
    InvalidQrPayloadError,
    InvalidTransitionError,
    NotFoundError,
    PartialFailureError,
    QuotaExceededError,
    SessionExpiredError,
    TransportError,
    ValidationError,
)

_ERRORS_BY_CODE: dict[str, type[FuelQuotaError]] = {
    cls.code: cls
    for cls in (
        ValidationError,
        InvalidAmountError,
        FuelTypeMismatchError,
        InvalidQrPayloadError,
        QuotaExceededError,
        NotFoundError,
        DuplicateError,
        InvalidTransitionError,
        InsufficientStockError,
        AuthorizationError,
        SessionExpiredError,
        PartialFailureError,
    )
}

_ERRORS_BY_STATUS: dict[int, type[FuelQuotaError]] = {
    400: ValidationError,
    401: SessionExpiredError,
    403: AuthorizationError,
    404: NotFoundError,
    409: InvalidTransitionError,
}


def _error_fields(body: Any) -> tuple[str, str]:
    if isinstance(body, Mapping):
        code = str(body.get("code") or "")
        message = str(body.get("message") or body.get("error") or "")
        return code, message
    return "", ""


def raise_for_status(*, endpoint: str, status: int, body: Any) -> None:
    """Raise the exception matching a non-2xx response."""
    if 200 <= status < 300:
        return
    code, message = _error_fields(body)
    text = message or f"HTTP {status} from {endpoint}"

    error_cls = _ERRORS_BY_CODE.get(code) or _ERRORS_BY_STATUS.get(status)
    if error_cls is not None:
        raise error_cls(text)
    if status >= 500 and not code:
        raise TransportError(text, status_code=status, endpoint=endpoint)
    raise ApiError(text, code=code or "api_error", endpoint=endpoint, status_code=status)


async def request_json(
    transport: Transport,
    method: str,
    endpoint: str,
    *,
    caller: CallerContext | None = None,
    payload: Mapping[str, Any] | None = None,
    params: Mapping[str, str] | None = None,
) -> Any:
    headers = caller.auth_headers() if caller is not None else None
    status, body = await transport.request(method, endpoint, payload=payload, params=params, headers=headers)
    raise_for_status(endpoint=endpoint, status=status, body=body)
    return body


def expect_object(endpoint: str, body: Any) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise ApiError(f"{endpoint} returned {type(body).__name__}, expected an object", code="invalid_response")
    return body


def expect_list(endpoint: str, body: Any) -> list[Any]:
    # Spring pages wrap items in "content".
    if isinstance(body, dict) and isinstance(body.get("content"), list):
        return list(body["content"])
    if not isinstance(body, list):
        raise ApiError(f"{endpoint} returned {type(body).__name__}, expected a list", code="invalid_response")
    return body
