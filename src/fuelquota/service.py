"""REST-shaped facade over the ledger core.

UI layers call these handlers and render the returned
:class:`~fuelquota.result.Ok` / :class:`~fuelquota.result.Err`; they
never touch quota arithmetic themselves.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Iterable
from typing import TypeVar

from fuelquota.config import FuelQuotaConfig
from fuelquota.context import CallerContext
from fuelquota.events import EventListener
from fuelquota.exceptions import FuelQuotaError, ValidationError
from fuelquota.ledger.distribution import DistributionWorkflow
from fuelquota.ledger.inventory import StationInventory
from fuelquota.ledger.quota import QuotaLedger
from fuelquota.ledger.recorder import TransactionRecorder
from fuelquota.ledger.registry import QuotaPolicy, VehicleRegistry
from fuelquota.ledger.store import (
    DistributionStore,
    InMemoryDistributionStore,
    InMemoryTransactionStore,
    TransactionStore,
)
from fuelquota.models.distribution import Distribution
from fuelquota.models.requests import (
    CreateDistributionRequest,
    DispenseRequest,
    DispenseResponse,
    StatusUpdateRequest,
    VehicleQuota,
)
from fuelquota.result import Err, Ok, Result

_logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _capture(awaitable: Awaitable[T]) -> Result[T]:
    try:
        return Ok(await awaitable)
    except FuelQuotaError as exc:
        _logger.debug("Request rejected: %s (%s)", exc, exc.code)
        return Err(exc)


class FuelQuotaService:
    """Wires registry, ledger, recorder, workflow and inventory together.

    Usage::

        service = FuelQuotaService(FuelQuotaConfig.from_env())
        vehicle = service.registry.register("CAB-1234", VehicleClass.CAR, FuelType.PETROL_92, "123456789V")
        result = await service.dispense(caller, DispenseRequest(vehicle_id=vehicle.id, fuel_type="PETROL_92", amount=10))
    """

    def __init__(
        self,
        config: FuelQuotaConfig | None = None,
        *,
        transaction_store: TransactionStore | None = None,
        distribution_store: DistributionStore | None = None,
        inventory: StationInventory | None = None,
        policy: QuotaPolicy | None = None,
        listeners: Iterable[EventListener] = (),
    ) -> None:
        self.config = config or FuelQuotaConfig()
        listener_list = list(listeners)
        self.ledger = QuotaLedger(
            period=self.config.quota_period,
            max_amount=self.config.max_dispense_liters,
            listeners=listener_list,
        )
        self.registry = VehicleRegistry(self.ledger, policy)
        self.inventory = inventory or StationInventory()
        self.recorder = TransactionRecorder(
            self.registry,
            transaction_store or InMemoryTransactionStore(),
            store_timeout=self.config.store_timeout,
            max_amount=self.config.max_dispense_liters,
            listeners=listener_list,
        )
        self.distributions = DistributionWorkflow(
            distribution_store or InMemoryDistributionStore(),
            inventory=self.inventory,
            store_timeout=self.config.store_timeout,
            listeners=listener_list,
        )

    async def get_quota(self, vehicle_id: str) -> Result[VehicleQuota]:
        async def _call() -> VehicleQuota:
            vehicle = self.registry.get(vehicle_id)
            record = self.ledger.get_record(vehicle_id)
            return VehicleQuota(
                vehicle_id=vehicle.id,
                vehicle_number=vehicle.vehicle_number,
                fuel_type=vehicle.fuel_type,
                period_quota=record.period_quota,
                remaining_quota=record.remaining_quota,
            )

        return await _capture(_call())

    async def scan(self, qr_data: str) -> Result[VehicleQuota]:
        """Resolve a scanned QR payload to the vehicle's quota view."""

        async def _call() -> VehicleQuota:
            vehicle = self.registry.resolve_qr(qr_data)
            record = self.ledger.get_record(vehicle.id)
            return VehicleQuota(
                vehicle_id=vehicle.id,
                vehicle_number=vehicle.vehicle_number,
                fuel_type=vehicle.fuel_type,
                period_quota=record.period_quota,
                remaining_quota=record.remaining_quota,
            )

        return await _capture(_call())

    async def dispense(self, caller: CallerContext, request: DispenseRequest) -> Result[DispenseResponse]:
        async def _call() -> DispenseResponse:
            station_id = request.station_id or caller.station_id
            if not station_id:
                raise ValidationError("stationId is required for callers not bound to a station")
            if request.qr_data:
                transaction = await self.recorder.dispense_by_qr(
                    caller,
                    request.qr_data,
                    station_id,
                    caller.user_id,
                    request.fuel_type,
                    request.amount,
                    request.notes,
                )
            else:
                assert request.vehicle_id is not None  # noqa: S101
                transaction = await self.recorder.dispense(
                    caller,
                    request.vehicle_id,
                    station_id,
                    caller.user_id,
                    request.fuel_type,
                    request.amount,
                    request.notes,
                )
            return DispenseResponse(transaction_id=transaction.id, remaining_quota=transaction.remaining_quota)

        return await _capture(_call())

    async def create_distribution(
        self,
        caller: CallerContext,
        request: CreateDistributionRequest,
    ) -> Result[Distribution]:
        return await _capture(
            self.distributions.create(
                caller,
                request.fuel_station_id,
                request.fuel_type,
                request.fuel_amount,
                request.notes,
            )
        )

    async def update_distribution_status(
        self,
        caller: CallerContext,
        distribution_id: str,
        request: StatusUpdateRequest,
    ) -> Result[Distribution]:
        return await _capture(self.distributions.transition(caller, distribution_id, request.status))
