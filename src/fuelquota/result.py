"""Tagged results for the service facade.

Handlers return ``Ok(value)`` or ``Err(error)`` instead of raising, so a
UI layer can render either outcome without a generic ``except``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

from fuelquota.exceptions import (
    ApiError,
    AuthorizationError,
    DuplicateError,
    FuelQuotaError,
    InsufficientStockError,
    InvalidTransitionError,
    NotFoundError,
    PartialFailureError,
    QuotaExceededError,
    SessionExpiredError,
    TransportError,
    ValidationError,
)
from fuelquota.models.requests import ErrorBody

T = TypeVar("T")

# Ordered most specific first.
_STATUS_BY_ERROR: tuple[tuple[type[FuelQuotaError], int], ...] = (
    (SessionExpiredError, 401),
    (AuthorizationError, 403),
    (ValidationError, 400),
    (NotFoundError, 404),
    (QuotaExceededError, 409),
    (InvalidTransitionError, 409),
    (DuplicateError, 409),
    (InsufficientStockError, 409),
    (PartialFailureError, 502),
    (TransportError, 502),
    (ApiError, 502),
)


def http_status_for(error: FuelQuotaError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 500


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: FuelQuotaError

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def code(self) -> str:
        return self.error.code

    @property
    def status(self) -> int:
        return http_status_for(self.error)

    @property
    def body(self) -> ErrorBody:
        return ErrorBody(code=self.error.code, message=str(self.error))


Result: TypeAlias = Ok[T] | Err
