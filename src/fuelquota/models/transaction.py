"""Dispense transaction model."""

from __future__ import annotations

import uuid
from typing import Any

from pydantic import Field, field_validator

from fuelquota.models._base import FuelQuotaModel, UtcDatetime, utcnow
from fuelquota.models.vehicle import FuelType


def new_transaction_id() -> str:
    return uuid.uuid4().hex


class Transaction(FuelQuotaModel):
    """Immutable record of one successful dispense."""

    id: str = Field(default_factory=new_transaction_id)
    vehicle_id: str
    vehicle_number: str = ""
    amount: float = Field(gt=0)
    """Dispensed liters."""
    fuel_type: FuelType
    station_id: str
    operator_id: str
    timestamp: UtcDatetime = Field(default_factory=utcnow)
    remaining_quota: float = Field(ge=0)
    """Vehicle's remaining quota right after this dispense."""
    notes: str | None = None

    @field_validator("id", "vehicle_id", "station_id", "operator_id", mode="before")
    @classmethod
    def _numeric_id_to_str(cls, value: Any) -> Any:
        # Station and operator ids are numeric on the backend.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value
