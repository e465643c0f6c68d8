"""Dispense orchestration: validate, deduct, record."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from fuelquota._normalize import format_vehicle_number, parse_amount
from fuelquota.context import CallerContext, Role
from fuelquota.events import EventKind, EventListener, LedgerEvent, notify
from fuelquota.exceptions import FuelTypeMismatchError, PartialFailureError, ValidationError
from fuelquota.ledger.quota import QuotaLedger
from fuelquota.ledger.registry import VehicleRegistry
from fuelquota.ledger.store import TransactionStore, call_store
from fuelquota.models._base import utcnow
from fuelquota.models.qr import QrPayload
from fuelquota.models.transaction import Transaction
from fuelquota.models.vehicle import FuelType

_logger = logging.getLogger(__name__)

DISPENSE_ROLES: frozenset[Role] = frozenset({Role.STATION_OPERATOR, Role.STATION_MANAGER, Role.ADMIN})


class TransactionRecorder:
    """Turns a validated dispense into an immutable transaction record.

    The deduction and the record write are one logical unit but not an
    atomic one: if the write fails after the ledger accepted the
    deduction, :class:`PartialFailureError` is raised and nothing is
    rolled back.
    """

    def __init__(
        self,
        registry: VehicleRegistry,
        store: TransactionStore,
        *,
        store_timeout: float = 5.0,
        max_amount: float | None = None,
        clock: Callable[[], datetime] = utcnow,
        listeners: Iterable[EventListener] = (),
    ) -> None:
        self._registry = registry
        self._ledger: QuotaLedger = registry.ledger
        self._store = store
        self._store_timeout = store_timeout
        self._max_amount = max_amount
        self._clock = clock
        self._listeners = list(listeners)

    def add_listener(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    async def dispense(
        self,
        caller: CallerContext,
        vehicle_id: str,
        station_id: str,
        operator_id: str,
        fuel_type: FuelType | str,
        amount: Any,
        notes: str | None = None,
    ) -> Transaction:
        """Dispense *amount* liters to a vehicle and record the transaction.

        Raises
        ------
        AuthorizationError
            The caller may not dispense fuel.
        NotFoundError
            Unknown vehicle.
        FuelTypeMismatchError
            *fuel_type* differs from the vehicle's registered fuel type.
        InvalidAmountError, QuotaExceededError
            Propagated from :meth:`QuotaLedger.reserve_and_deduct`.
        PartialFailureError
            The quota was deducted but the record could not be stored.
        """
        caller.require(DISPENSE_ROLES, "dispense fuel")
        vehicle = self._registry.get(vehicle_id)
        try:
            requested_type = FuelType(fuel_type)
        except ValueError as exc:
            raise FuelTypeMismatchError(f"unknown fuel type {fuel_type!r}") from exc
        if requested_type != vehicle.fuel_type:
            raise FuelTypeMismatchError(
                f"vehicle {format_vehicle_number(vehicle.vehicle_number)} is registered for "
                f"{vehicle.fuel_type}, not {requested_type}"
            )
        liters = parse_amount(amount, maximum=self._max_amount)
        try:
            draft = Transaction(
                vehicle_id=vehicle.id,
                vehicle_number=vehicle.vehicle_number,
                amount=liters,
                fuel_type=vehicle.fuel_type,
                station_id=station_id,
                operator_id=operator_id,
                timestamp=self._clock(),
                remaining_quota=0.0,
                notes=notes,
            )
        except PydanticValidationError as exc:
            fields = ", ".join(str(err["loc"][0]) for err in exc.errors() if err["loc"])
            raise ValidationError(f"invalid transaction fields: {fields}") from exc

        remaining = await self._ledger.reserve_and_deduct(vehicle.id, liters)
        transaction = draft.model_copy(update={"remaining_quota": remaining})
        try:
            await asyncio.wait_for(self._store.append(transaction), self._store_timeout)
        except TimeoutError as exc:
            _logger.error(
                "Transaction store timed out after %.1fs; %.2f L deducted from %s without a record",
                self._store_timeout,
                liters,
                vehicle.id,
            )
            raise PartialFailureError(
                f"quota deducted but transaction store timed out after {self._store_timeout}s",
                vehicle_id=vehicle.id,
                amount=liters,
                remaining=remaining,
                transaction=transaction,
            ) from exc
        except Exception as exc:
            _logger.error("Transaction store failed; %.2f L deducted from %s without a record", liters, vehicle.id)
            raise PartialFailureError(
                f"quota deducted but transaction could not be stored: {exc}",
                vehicle_id=vehicle.id,
                amount=liters,
                remaining=remaining,
                transaction=transaction,
            ) from exc

        _logger.info(
            "Dispensed %.2f L %s to %s at station %s (%.2f L remaining)",
            liters,
            vehicle.fuel_type,
            format_vehicle_number(vehicle.vehicle_number),
            station_id,
            remaining,
        )
        notify(
            self._listeners,
            LedgerEvent(
                kind=EventKind.FUEL_DISPENSED,
                subject_id=vehicle.id,
                occurred_at=transaction.timestamp,
                data={
                    "transaction_id": transaction.id,
                    "owner_nic": vehicle.owner_nic,
                    "amount": liters,
                    "remaining_quota": remaining,
                },
            ),
        )
        return transaction

    async def dispense_by_qr(
        self,
        caller: CallerContext,
        qr_data: str,
        station_id: str,
        operator_id: str,
        fuel_type: FuelType | str,
        amount: Any,
        notes: str | None = None,
    ) -> Transaction:
        """Resolve a scanned QR payload, then :meth:`dispense`."""
        payload = QrPayload.parse(qr_data)
        vehicle = self._registry.resolve_qr(payload)
        return await self.dispense(caller, vehicle.id, station_id, operator_id, fuel_type, amount, notes)

    async def history(self, vehicle_id: str, limit: int | None = None) -> list[Transaction]:
        """Transactions for a vehicle, newest first."""
        self._registry.get(vehicle_id)
        transactions = await call_store(
            self._store.list_for_vehicle(vehicle_id), self._store_timeout, "transaction history"
        )
        ordered = sorted(transactions, key=lambda tx: tx.timestamp, reverse=True)
        return ordered if limit is None else ordered[:limit]
