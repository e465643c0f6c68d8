"""Bulk fuel distribution model and its status state machine."""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import Field, model_validator

from fuelquota._constants import DISTRIBUTION_REFERENCE_PREFIX
from fuelquota.models._base import FuelQuotaModel, UtcDatetime, utcnow
from fuelquota.models.vehicle import DistributionFuelType


class DistributionStatus(StrEnum):
    PENDING = "PENDING"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES: frozenset[DistributionStatus] = frozenset(
    {DistributionStatus.DELIVERED, DistributionStatus.CANCELLED}
)

ALLOWED_TRANSITIONS: dict[DistributionStatus, frozenset[DistributionStatus]] = {
    DistributionStatus.PENDING: frozenset(
        {DistributionStatus.IN_TRANSIT, DistributionStatus.DELIVERED, DistributionStatus.CANCELLED}
    ),
    DistributionStatus.IN_TRANSIT: frozenset({DistributionStatus.DELIVERED, DistributionStatus.CANCELLED}),
    DistributionStatus.DELIVERED: frozenset(),
    DistributionStatus.CANCELLED: frozenset(),
}


def can_transition(current: DistributionStatus, target: DistributionStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def generate_reference(now: datetime) -> str:
    """Reference code like ``DIST-20260105-0042``."""
    return f"{DISTRIBUTION_REFERENCE_PREFIX}-{now:%Y%m%d}-{secrets.randbelow(10000):04d}"


def new_distribution_id() -> str:
    return uuid.uuid4().hex


class Distribution(FuelQuotaModel):
    """A bulk delivery of fuel to one station."""

    id: str = Field(default_factory=new_distribution_id)
    fuel_station_id: str
    fuel_amount: float = Field(gt=0)
    fuel_type: DistributionFuelType
    status: DistributionStatus = DistributionStatus.PENDING
    distribution_reference: str
    notes: str | None = None
    distribution_date: UtcDatetime = Field(default_factory=utcnow)
    completed_date: UtcDatetime | None = None
    version: int = 0

    @model_validator(mode="before")
    @classmethod
    def _flatten_station(cls, values: Any) -> Any:
        # The backend nests the station object and uses numeric ids.
        if not isinstance(values, dict):
            return values
        merged = dict(values)
        station = merged.get("fuelStation")
        if isinstance(station, dict) and "fuelStationId" not in merged and "fuel_station_id" not in merged:
            merged["fuelStationId"] = station.get("id")
        for key in ("id", "fuelStationId"):
            if isinstance(merged.get(key), int):
                merged[key] = str(merged[key])
        return merged
