"""Station fuel inventory model."""

from __future__ import annotations

from pydantic import Field

from fuelquota.models._base import FuelQuotaModel, UtcDatetime, utcnow
from fuelquota.models.vehicle import DistributionFuelType


class InventoryLevel(FuelQuotaModel):
    """Liters of one bulk fuel grade held by a station."""

    fuel_station_id: str
    fuel_type: DistributionFuelType
    amount: float = Field(ge=0)
    updated_at: UtcDatetime = Field(default_factory=utcnow)
