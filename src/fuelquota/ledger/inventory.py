"""Station fuel inventory."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any, Protocol

from fuelquota._normalize import safe_float
from fuelquota.exceptions import InsufficientStockError, InvalidAmountError, NotFoundError
from fuelquota.models._base import utcnow
from fuelquota.models.inventory import InventoryLevel
from fuelquota.models.vehicle import DistributionFuelType

_logger = logging.getLogger(__name__)


class InventoryCollaborator(Protocol):
    """Receives delivered bulk fuel."""

    async def credit(self, station_id: str, fuel_type: DistributionFuelType, amount: float) -> InventoryLevel:
        ...


def _non_negative(value: Any, what: str) -> float:
    parsed = safe_float(value)
    if parsed is None or parsed < 0:
        raise InvalidAmountError(f"{what} must be a non-negative number, got {value!r}")
    return parsed


class StationInventory:
    """Per-station, per-grade stock levels.

    ``stations`` optionally restricts operations to known station ids;
    when omitted any station id is accepted.
    """

    def __init__(
        self,
        *,
        stations: set[str] | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._stations = set(stations) if stations is not None else None
        self._clock = clock
        self._levels: dict[tuple[str, DistributionFuelType], InventoryLevel] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock(self, station_id: str) -> asyncio.Lock:
        lock = self._locks.get(station_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[station_id] = lock
        return lock

    def has_station(self, station_id: str) -> bool:
        return self._stations is None or station_id in self._stations

    def add_station(self, station_id: str) -> None:
        if self._stations is not None:
            self._stations.add(station_id)

    def _check_station(self, station_id: str) -> None:
        if not self.has_station(station_id):
            raise NotFoundError(f"fuel station {station_id} not found")

    def _store(self, station_id: str, fuel_type: DistributionFuelType, amount: float) -> InventoryLevel:
        level = InventoryLevel(
            fuel_station_id=station_id,
            fuel_type=fuel_type,
            amount=round(amount, 6),
            updated_at=self._clock(),
        )
        self._levels[(station_id, fuel_type)] = level
        return level

    def level(self, station_id: str, fuel_type: DistributionFuelType) -> float:
        self._check_station(station_id)
        current = self._levels.get((station_id, DistributionFuelType(fuel_type)))
        return current.amount if current is not None else 0.0

    def levels(self, station_id: str) -> list[InventoryLevel]:
        self._check_station(station_id)
        return [level for (sid, _), level in self._levels.items() if sid == station_id]

    async def set_level(self, station_id: str, fuel_type: DistributionFuelType, amount: Any) -> InventoryLevel:
        liters = _non_negative(amount, "fuel amount")
        self._check_station(station_id)
        async with self._lock(station_id):
            return self._store(station_id, DistributionFuelType(fuel_type), liters)

    async def restock(self, station_id: str, fuel_type: DistributionFuelType, amount: Any) -> InventoryLevel:
        liters = _non_negative(amount, "restock amount")
        self._check_station(station_id)
        grade = DistributionFuelType(fuel_type)
        async with self._lock(station_id):
            current = self._levels.get((station_id, grade))
            base = current.amount if current is not None else 0.0
            level = self._store(station_id, grade, base + liters)
        _logger.info("Station %s restocked with %.2f L %s (now %.2f L)", station_id, liters, grade, level.amount)
        return level

    async def credit(self, station_id: str, fuel_type: DistributionFuelType, amount: float) -> InventoryLevel:
        return await self.restock(station_id, fuel_type, amount)

    async def consume(self, station_id: str, fuel_type: DistributionFuelType, amount: Any) -> InventoryLevel:
        liters = _non_negative(amount, "consumed amount")
        self._check_station(station_id)
        grade = DistributionFuelType(fuel_type)
        async with self._lock(station_id):
            current = self._levels.get((station_id, grade))
            if current is None:
                raise NotFoundError(f"no {grade} inventory for fuel station {station_id}")
            if liters > current.amount:
                raise InsufficientStockError(
                    f"insufficient {grade} at station {station_id}: current {current.amount} L, consumed {liters} L"
                )
            return self._store(station_id, grade, current.amount - liters)
