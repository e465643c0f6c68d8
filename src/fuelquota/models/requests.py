"""Request/response payloads of the dispense and distribution endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import Field, model_validator

from fuelquota.models._base import FuelQuotaModel
from fuelquota.models.distribution import DistributionStatus
from fuelquota.models.vehicle import DistributionFuelType, FuelType


class DispenseRequest(FuelQuotaModel):
    """``{vehicleId | qrData, fuelType, amount}``.

    ``amount`` is kept as received; the recorder validates it so that a
    non-numeric amount surfaces as ``invalid_amount`` instead of a
    schema error.
    """

    vehicle_id: str | None = None
    qr_data: str | None = None
    fuel_type: FuelType
    amount: Any
    station_id: str | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _one_vehicle_reference(self) -> DispenseRequest:
        if not self.vehicle_id and not self.qr_data:
            raise ValueError("either vehicleId or qrData is required")
        return self


class DispenseResponse(FuelQuotaModel):
    transaction_id: str
    remaining_quota: float


class CreateDistributionRequest(FuelQuotaModel):
    fuel_station_id: str
    fuel_amount: Any
    fuel_type: DistributionFuelType
    notes: str | None = None


class StatusUpdateRequest(FuelQuotaModel):
    status: DistributionStatus


class VehicleQuota(FuelQuotaModel):
    """Quota view returned by the scan and quota endpoints."""

    vehicle_id: str
    vehicle_number: str = ""
    fuel_type: FuelType
    period_quota: float
    remaining_quota: float


class ErrorBody(FuelQuotaModel):
    code: str
    message: str = Field(default="")
