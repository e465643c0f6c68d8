"""High-level async client for the fuel quota backend."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from fuelquota._api import dispense as _dispense_api
from fuelquota._api import distributions as _distribution_api
from fuelquota._api import inventory as _inventory_api
from fuelquota._api import quota as _quota_api
from fuelquota._transport import HttpTransport, Transport
from fuelquota.config import FuelQuotaConfig
from fuelquota.context import CallerContext
from fuelquota.exceptions import FuelQuotaError, SessionExpiredError
from fuelquota.models.distribution import Distribution, DistributionStatus
from fuelquota.models.inventory import InventoryLevel
from fuelquota.models.requests import CreateDistributionRequest, DispenseRequest, DispenseResponse, VehicleQuota
from fuelquota.models.transaction import Transaction
from fuelquota.models.vehicle import DistributionFuelType

_logger = logging.getLogger(__name__)


class FuelQuotaClient:
    """Async client for the fuel quota backend API.

    The authenticated caller is passed in explicitly and its token is
    attached to every request.

    Usage::

        async with FuelQuotaClient(config, caller=caller) as client:
            quota = await client.scan("FUELQUOTA:ABC123:123456789V")
            receipt = await client.dispense(
                DispenseRequest(vehicle_id=quota.vehicle_id, fuel_type=quota.fuel_type, amount=10)
            )
    """

    def __init__(
        self,
        config: FuelQuotaConfig,
        *,
        caller: CallerContext,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._caller = caller
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FuelQuotaClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    @property
    def caller(self) -> CallerContext:
        return self._caller

    def set_caller(self, caller: CallerContext) -> None:
        """Switch the authenticated caller (e.g. after re-login)."""
        self._caller = caller

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise FuelQuotaError("Client not initialized. Use 'async with FuelQuotaClient(...) as client:'")
        return self._transport

    def _require_caller(self) -> CallerContext:
        if self._caller.is_expired:
            raise SessionExpiredError(f"session for {self._caller.user_id} expired; log in again")
        return self._caller

    # ------------------------------------------------------------------
    # Quota and dispense
    # ------------------------------------------------------------------

    async def get_vehicle_quota(self, vehicle_id: str) -> VehicleQuota:
        return await _quota_api.fetch_vehicle_quota(self._require_transport(), self._require_caller(), vehicle_id)

    async def scan(self, qr_data: str) -> VehicleQuota:
        """Look up the vehicle behind a scanned QR payload."""
        return await _quota_api.scan_qr(self._require_transport(), self._require_caller(), qr_data)

    async def dispense(self, request: DispenseRequest) -> DispenseResponse:
        """Submit a dispense.

        Not retried on failure: a :class:`TransportError` means the
        outcome is unknown and must be reconciled by the operator.
        """
        response = await _dispense_api.post_dispense(self._require_transport(), self._require_caller(), request)
        _logger.info("Dispense accepted as %s (%.2f L remaining)", response.transaction_id, response.remaining_quota)
        return response

    async def append_transaction(self, transaction: Transaction) -> None:
        await _dispense_api.post_transaction(self._require_transport(), self._require_caller(), transaction)

    async def get_vehicle_transactions(self, vehicle_id: str) -> list[Transaction]:
        return await _dispense_api.fetch_vehicle_transactions(
            self._require_transport(),
            self._require_caller(),
            vehicle_id,
        )

    # ------------------------------------------------------------------
    # Distributions and inventory
    # ------------------------------------------------------------------

    async def create_distribution(
        self,
        station_id: str,
        fuel_type: DistributionFuelType,
        amount: float,
        notes: str | None = None,
    ) -> Distribution:
        request = CreateDistributionRequest(
            fuel_station_id=station_id,
            fuel_type=fuel_type,
            fuel_amount=amount,
            notes=notes,
        )
        return await _distribution_api.post_distribution(self._require_transport(), self._require_caller(), request)

    async def update_distribution_status(self, distribution_id: str, status: DistributionStatus) -> Distribution:
        return await _distribution_api.put_distribution_status(
            self._require_transport(),
            self._require_caller(),
            distribution_id,
            DistributionStatus(status),
        )

    async def list_station_distributions(
        self,
        station_id: str,
        status: DistributionStatus | None = None,
    ) -> list[Distribution]:
        return await _distribution_api.fetch_station_distributions(
            self._require_transport(),
            self._require_caller(),
            station_id,
            status,
        )

    async def get_station_inventory(self, station_id: str) -> list[InventoryLevel]:
        return await _inventory_api.fetch_station_inventory(
            self._require_transport(),
            self._require_caller(),
            station_id,
        )

    def transaction_store(self) -> HttpTransactionStore:
        """A :class:`~fuelquota.ledger.store.TransactionStore` backed by this client."""
        return HttpTransactionStore(self)


class HttpTransactionStore:
    """Append-only transaction store that persists through the backend."""

    def __init__(self, client: FuelQuotaClient) -> None:
        self._client = client

    async def append(self, transaction: Transaction) -> None:
        await self._client.append_transaction(transaction)

    async def list_for_vehicle(self, vehicle_id: str) -> list[Transaction]:
        return await self._client.get_vehicle_transactions(vehicle_id)
