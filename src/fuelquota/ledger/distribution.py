"""Bulk fuel distribution workflow.

Moves a distribution through PENDING -> IN_TRANSIT -> DELIVERED, or to
CANCELLED.  DELIVERED and CANCELLED are terminal.  Transitions for one
distribution are serialized; different distributions never contend.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from fuelquota._normalize import parse_amount
from fuelquota.context import CallerContext, Role
from fuelquota.events import EventKind, EventListener, LedgerEvent, notify
from fuelquota.exceptions import InvalidTransitionError, NotFoundError, PartialFailureError, ValidationError
from fuelquota.ledger.inventory import InventoryCollaborator, StationInventory
from fuelquota.ledger.store import DistributionStore, call_store
from fuelquota.models._base import utcnow
from fuelquota.models.distribution import (
    Distribution,
    DistributionStatus,
    can_transition,
    generate_reference,
)
from fuelquota.models.vehicle import DistributionFuelType

_logger = logging.getLogger(__name__)

CREATE_ROLES: frozenset[Role] = frozenset({Role.ADMIN})
TRANSITION_ROLES: frozenset[Role] = frozenset({Role.ADMIN, Role.STATION_MANAGER})


class DistributionWorkflow:
    def __init__(
        self,
        store: DistributionStore,
        *,
        inventory: InventoryCollaborator | None = None,
        store_timeout: float = 5.0,
        clock: Callable[[], datetime] = utcnow,
        listeners: Iterable[EventListener] = (),
    ) -> None:
        self._store = store
        self._inventory = inventory
        self._store_timeout = store_timeout
        self._clock = clock
        self._listeners = list(listeners)
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock(self, distribution_id: str) -> asyncio.Lock:
        lock = self._locks.get(distribution_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[distribution_id] = lock
        return lock

    def _discard_lock(self, distribution_id: str) -> None:
        lock = self._locks.get(distribution_id)
        if lock is not None and not lock.locked():
            del self._locks[distribution_id]

    def add_listener(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    async def _save(self, distribution: Distribution) -> None:
        await call_store(self._store.save(distribution), self._store_timeout, "distribution save")

    async def _load(self, distribution_id: str) -> Distribution:
        return await call_store(self._store.get(distribution_id), self._store_timeout, "distribution lookup")

    async def _load_all(self) -> list[Distribution]:
        return await call_store(self._store.list_all(), self._store_timeout, "distribution listing")

    async def create(
        self,
        caller: CallerContext,
        station_id: str,
        fuel_type: DistributionFuelType | str,
        amount: Any,
        notes: str | None = None,
    ) -> Distribution:
        """Create a PENDING distribution for *station_id*."""
        caller.require(CREATE_ROLES, "create distributions")
        liters = parse_amount(amount)
        try:
            grade = DistributionFuelType(fuel_type)
        except ValueError as exc:
            raise ValidationError(f"unknown bulk fuel type {fuel_type!r}") from exc
        if isinstance(self._inventory, StationInventory) and not self._inventory.has_station(station_id):
            raise NotFoundError(f"fuel station {station_id} not found")

        now = self._clock()
        distribution = Distribution(
            fuel_station_id=station_id,
            fuel_amount=liters,
            fuel_type=grade,
            status=DistributionStatus.PENDING,
            distribution_reference=generate_reference(now),
            notes=notes,
            distribution_date=now,
        )
        await self._save(distribution)
        _logger.info(
            "Created distribution %s: %.2f L %s for station %s",
            distribution.distribution_reference,
            liters,
            distribution.fuel_type,
            station_id,
        )
        notify(
            self._listeners,
            LedgerEvent(
                kind=EventKind.DISTRIBUTION_CREATED,
                subject_id=distribution.id,
                occurred_at=now,
                data={
                    "station_id": station_id,
                    "fuel_type": distribution.fuel_type.value,
                    "amount": liters,
                    "reference": distribution.distribution_reference,
                },
            ),
        )
        return distribution

    async def transition(
        self,
        caller: CallerContext,
        distribution_id: str,
        target_status: DistributionStatus | str,
    ) -> Distribution:
        """Move a distribution to *target_status*.

        Raises :class:`InvalidTransitionError` for any move not allowed
        by the state machine, including any move out of a terminal state.
        A DELIVERED distribution whose inventory credit fails is still
        DELIVERED; :class:`PartialFailureError` carries it for reconciliation.
        """
        caller.require(TRANSITION_ROLES, "update distribution status")
        try:
            target = DistributionStatus(target_status)
        except ValueError as exc:
            raise InvalidTransitionError(f"unknown status {target_status!r}", target=str(target_status)) from exc

        try:
            current, updated = await self._apply_transition(distribution_id, target)
        except NotFoundError:
            self._discard_lock(distribution_id)
            raise

        _logger.info(
            "Distribution %s moved %s -> %s by %s",
            updated.distribution_reference,
            current.status,
            target,
            caller.user_id,
        )
        notify(
            self._listeners,
            LedgerEvent(
                kind=EventKind.DISTRIBUTION_STATUS_CHANGED,
                subject_id=updated.id,
                data={"from": current.status.value, "to": target.value},
            ),
        )
        if target is DistributionStatus.DELIVERED and self._inventory is not None:
            await self._credit_inventory(self._inventory, updated)
        return updated

    async def _apply_transition(
        self,
        distribution_id: str,
        target: DistributionStatus,
    ) -> tuple[Distribution, Distribution]:
        async with self._lock(distribution_id):
            current = await self._load(distribution_id)
            if not can_transition(current.status, target):
                raise InvalidTransitionError(
                    f"distribution {current.distribution_reference} cannot move from {current.status} to {target}",
                    current=current.status.value,
                    target=target.value,
                )
            update: dict[str, Any] = {"status": target, "version": current.version + 1}
            if target is DistributionStatus.DELIVERED:
                update["completed_date"] = self._clock()
            updated = current.model_copy(update=update)
            await self._save(updated)
        return current, updated

    async def _credit_inventory(self, inventory: InventoryCollaborator, delivered: Distribution) -> None:
        try:
            await inventory.credit(delivered.fuel_station_id, delivered.fuel_type, delivered.fuel_amount)
        except Exception as exc:
            _logger.error(
                "Distribution %s is DELIVERED but station %s was not credited with %.2f L",
                delivered.distribution_reference,
                delivered.fuel_station_id,
                delivered.fuel_amount,
            )
            raise PartialFailureError(
                f"distribution {delivered.distribution_reference} delivered but inventory credit failed: {exc}",
                amount=delivered.fuel_amount,
                distribution=delivered,
            ) from exc

    async def get(self, distribution_id: str) -> Distribution:
        return await self._load(distribution_id)

    async def list_for_station(
        self,
        station_id: str,
        status: DistributionStatus | None = None,
    ) -> list[Distribution]:
        """Distributions for a station, newest first, optionally filtered by status."""
        everything = await self._load_all()
        matches = [
            d for d in everything if d.fuel_station_id == station_id and (status is None or d.status == status)
        ]
        return sorted(matches, key=lambda d: d.distribution_date, reverse=True)

    async def recent(self, limit: int = 10) -> list[Distribution]:
        everything = await self._load_all()
        return sorted(everything, key=lambda d: d.distribution_date, reverse=True)[:limit]

    async def stats_by_type(self) -> dict[DistributionFuelType, float]:
        """Delivered liters per bulk fuel grade."""
        everything = await self._load_all()
        totals: dict[DistributionFuelType, float] = defaultdict(float)
        for fuel_type in DistributionFuelType:
            totals[fuel_type] = 0.0
        for d in everything:
            if d.status is DistributionStatus.DELIVERED:
                totals[d.fuel_type] += d.fuel_amount
        return dict(totals)
