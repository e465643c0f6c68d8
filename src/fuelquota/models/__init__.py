"""Data models for vehicles, quota, transactions and distributions."""

from fuelquota.models._base import FuelQuotaModel, UtcDatetime
from fuelquota.models.distribution import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    Distribution,
    DistributionStatus,
    can_transition,
)
from fuelquota.models.inventory import InventoryLevel
from fuelquota.models.qr import QrPayload, build_qr_payload, new_qr_identifier
from fuelquota.models.requests import (
    CreateDistributionRequest,
    DispenseRequest,
    DispenseResponse,
    ErrorBody,
    StatusUpdateRequest,
    VehicleQuota,
)
from fuelquota.models.transaction import Transaction
from fuelquota.models.vehicle import DistributionFuelType, FuelType, QuotaRecord, Vehicle, VehicleClass

__all__ = [
    "ALLOWED_TRANSITIONS",
    "CreateDistributionRequest",
    "DispenseRequest",
    "DispenseResponse",
    "Distribution",
    "DistributionFuelType",
    "DistributionStatus",
    "ErrorBody",
    "FuelQuotaModel",
    "FuelType",
    "InventoryLevel",
    "QrPayload",
    "QuotaRecord",
    "StatusUpdateRequest",
    "TERMINAL_STATUSES",
    "Transaction",
    "UtcDatetime",
    "Vehicle",
    "VehicleClass",
    "VehicleQuota",
    "build_qr_payload",
    "can_transition",
    "new_qr_identifier",
]
