"""Vehicle, fuel type and quota record models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field, field_validator, model_validator

from fuelquota._normalize import normalize_nic, normalize_vehicle_number
from fuelquota.models._base import FuelQuotaModel, UtcDatetime, utcnow


class DistributionFuelType(StrEnum):
    """Bulk fuel grades moved from the central authority to stations."""

    PETROL = "PETROL"
    DIESEL = "DIESEL"
    KEROSENE = "KEROSENE"


class FuelType(StrEnum):
    """Fuel grade a vehicle is registered for."""

    PETROL_92 = "PETROL_92"
    PETROL_95 = "PETROL_95"
    DIESEL = "DIESEL"
    SUPER_DIESEL = "SUPER_DIESEL"
    KEROSENE = "KEROSENE"

    @property
    def bulk_type(self) -> DistributionFuelType:
        """Bulk grade the vehicle fuel is drawn from."""
        return _BULK_TYPES[self]

    @classmethod
    def _missing_(cls, value: object) -> FuelType | None:
        # The web portal sends "SUPER DIESEL" with a space.
        if isinstance(value, str):
            normalized = value.strip().upper().replace(" ", "_").replace("-", "_")
            for member in cls:
                if member.value == normalized:
                    return member
        return None


_BULK_TYPES: dict[FuelType, DistributionFuelType] = {
    FuelType.PETROL_92: DistributionFuelType.PETROL,
    FuelType.PETROL_95: DistributionFuelType.PETROL,
    FuelType.DIESEL: DistributionFuelType.DIESEL,
    FuelType.SUPER_DIESEL: DistributionFuelType.DIESEL,
    FuelType.KEROSENE: DistributionFuelType.KEROSENE,
}


class VehicleClass(StrEnum):
    MOTORCYCLE = "MOTORCYCLE"
    THREE_WHEELER = "THREE_WHEELER"
    CAR = "CAR"
    VAN = "VAN"
    BUS = "BUS"
    LORRY = "LORRY"
    TRUCK = "TRUCK"
    HEAVY_VEHICLE = "HEAVY_VEHICLE"


class Vehicle(FuelQuotaModel):
    """A registered vehicle.  Immutable once registered."""

    id: str
    vehicle_number: str
    """Normalized registration number (e.g. ``"CAB1234"``)."""
    vehicle_class: VehicleClass
    fuel_type: FuelType
    owner_nic: str
    qr_identifier: str
    chassis_number: str | None = None
    registered_at: UtcDatetime = Field(default_factory=utcnow)

    @field_validator("vehicle_number")
    @classmethod
    def _normalize_number(cls, value: str) -> str:
        return normalize_vehicle_number(value)

    @field_validator("owner_nic")
    @classmethod
    def _normalize_nic(cls, value: str) -> str:
        return normalize_nic(value)


class QuotaRecord(FuelQuotaModel):
    """Per-vehicle quota for the current cycle.

    ``version`` increases with every mutation so callers holding a stale
    snapshot can detect that the balance moved underneath them.
    """

    vehicle_id: str
    period_quota: float = Field(gt=0)
    remaining_quota: float = Field(ge=0)
    version: int = 0
    period_started_at: UtcDatetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def _check_bounds(self) -> QuotaRecord:
        if self.remaining_quota > self.period_quota:
            raise ValueError("remaining_quota cannot exceed period_quota")
        return self

    @property
    def used_quota(self) -> float:
        return self.period_quota - self.remaining_quota
