"""Custom exception hierarchy for fuelquota."""

from __future__ import annotations


class FuelQuotaError(Exception):
    """Base exception for all fuelquota errors."""

    code: str = "error"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        if code is not None:
            self.code = code
        super().__init__(message)


class ConfigError(FuelQuotaError):
    """Invalid or missing configuration."""

    code = "config_error"


class ValidationError(FuelQuotaError):
    """Input rejected before any ledger mutation."""

    code = "validation_error"


class InvalidAmountError(ValidationError):
    """Amount is non-numeric, non-finite or not strictly positive."""

    code = "invalid_amount"


class FuelTypeMismatchError(ValidationError):
    """Requested fuel type differs from the vehicle's registered fuel type."""

    code = "fuel_type_mismatch"


class InvalidQrPayloadError(ValidationError):
    """Scanned QR payload is not a ``FUELQUOTA:<id>:<nic>`` string."""

    code = "invalid_qr"


class QuotaExceededError(FuelQuotaError):
    """Requested amount is larger than the remaining quota."""

    code = "quota_exceeded"

    def __init__(self, message: str, *, vehicle_id: str = "", requested: float = 0.0, remaining: float = 0.0) -> None:
        self.vehicle_id = vehicle_id
        self.requested = requested
        self.remaining = remaining
        super().__init__(message)


class NotFoundError(FuelQuotaError):
    """Unknown vehicle, quota record, distribution or station."""

    code = "not_found"


class DuplicateError(FuelQuotaError):
    """Entity already exists (registration number, record, transaction id)."""

    code = "duplicate"


class InvalidTransitionError(FuelQuotaError):
    """Illegal distribution status change."""

    code = "invalid_transition"

    def __init__(self, message: str, *, current: str = "", target: str = "") -> None:
        self.current = current
        self.target = target
        super().__init__(message)


class InsufficientStockError(FuelQuotaError):
    """Station inventory cannot cover the requested consumption."""

    code = "insufficient_stock"


class AuthorizationError(FuelQuotaError):
    """Caller is not allowed to perform the operation."""

    code = "forbidden"


class SessionExpiredError(AuthorizationError):
    """Caller context has exceeded its TTL."""

    code = "session_expired"


class PartialFailureError(FuelQuotaError):
    """A committed mutation whose follow-up step failed.

    Either quota was deducted but the transaction record was not stored
    (``transaction`` is attached), or a distribution was marked DELIVERED
    but the station inventory was not credited (``distribution`` is
    attached).  Nothing is rolled back; callers must reconcile.
    """

    code = "partial_failure"

    def __init__(
        self,
        message: str,
        *,
        vehicle_id: str = "",
        amount: float = 0.0,
        remaining: float = 0.0,
        transaction: object | None = None,
        distribution: object | None = None,
    ) -> None:
        self.vehicle_id = vehicle_id
        self.amount = amount
        self.remaining = remaining
        self.transaction = transaction
        self.distribution = distribution
        super().__init__(message)


class TransportError(FuelQuotaError):
    """HTTP-level failure (network, timeout, invalid JSON)."""

    code = "transport_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class ApiError(FuelQuotaError):
    """Backend returned an error body that maps to no specific error."""

    code = "api_error"

    def __init__(
        self,
        message: str,
        *,
        code: str = "api_error",
        endpoint: str = "",
        status_code: int | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(message, code=code)
