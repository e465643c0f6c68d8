"""fuelquota - Fuel rationing ledger and async backend client."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fuelquota")
except PackageNotFoundError:
    __version__ = "0+local"

from fuelquota.client import FuelQuotaClient, HttpTransactionStore
from fuelquota.config import FuelQuotaConfig
from fuelquota.context import CallerContext, Role
from fuelquota.events import EventKind, LedgerEvent
from fuelquota.exceptions import (
    ApiError,
    AuthorizationError,
    ConfigError,
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
from fuelquota.ledger import (
    DistributionWorkflow,
    InMemoryDistributionStore,
    InMemoryTransactionStore,
    QuotaLedger,
    QuotaPolicy,
    StationInventory,
    TransactionRecorder,
    VehicleRegistry,
)
from fuelquota.models import (
    Distribution,
    DistributionFuelType,
    DistributionStatus,
    DispenseRequest,
    DispenseResponse,
    FuelType,
    QrPayload,
    QuotaRecord,
    Transaction,
    Vehicle,
    VehicleClass,
    VehicleQuota,
)
from fuelquota.result import Err, Ok, Result
from fuelquota.service import FuelQuotaService

__all__ = [
    "__version__",
    "ApiError",
    "AuthorizationError",
    "CallerContext",
    "ConfigError",
    "DispenseRequest",
    "DispenseResponse",
    "Distribution",
    "DistributionFuelType",
    "DistributionStatus",
    "DistributionWorkflow",
    "DuplicateError",
    "Err",
    "EventKind",
    "FuelQuotaClient",
    "FuelQuotaConfig",
    "FuelQuotaError",
    "FuelQuotaService",
    "FuelType",
    "FuelTypeMismatchError",
    "HttpTransactionStore",
    "InMemoryDistributionStore",
    "InMemoryTransactionStore",
    "InsufficientStockError",
    "InvalidAmountError",
    "InvalidQrPayloadError",
    "InvalidTransitionError",
    "LedgerEvent",
    "NotFoundError",
    "Ok",
    "PartialFailureError",
    "QrPayload",
    "QuotaExceededError",
    "QuotaLedger",
    "QuotaPolicy",
    "QuotaRecord",
    "Result",
    "Role",
    "SessionExpiredError",
    "StationInventory",
    "Transaction",
    "TransactionRecorder",
    "TransportError",
    "ValidationError",
    "Vehicle",
    "VehicleClass",
    "VehicleQuota",
    "VehicleRegistry",
]
