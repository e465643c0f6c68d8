from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import pytest

from fuelquota.client import FuelQuotaClient, HttpTransactionStore
from fuelquota.config import FuelQuotaConfig
from fuelquota.context import CallerContext, Role
from fuelquota.exceptions import (
    ApiError,
    FuelQuotaError,
    InvalidAmountError,
    InvalidQrPayloadError,
    InvalidTransitionError,
    NotFoundError,
    QuotaExceededError,
    SessionExpiredError,
    TransportError,
)
from fuelquota.models import (
    DispenseRequest,
    DistributionFuelType,
    DistributionStatus,
    FuelType,
    Transaction,
)

CONFIG = FuelQuotaConfig(base_url="http://backend.test/api")


@dataclass
class Call:
    method: str
    endpoint: str
    payload: Mapping[str, Any] | None
    params: Mapping[str, str] | None
    headers: Mapping[str, str] | None


@dataclass
class FakeBackend:
    """Transport stub keyed by ``(method, endpoint)``."""

    responses: dict[tuple[str, str], tuple[int, Any]] = field(default_factory=dict)
    calls: list[Call] = field(default_factory=list)

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        payload: Mapping[str, Any] | None = None,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> tuple[int, Any]:
        self.calls.append(Call(method, endpoint, payload, params, headers))
        return self.responses.get((method, endpoint), (404, {"code": "not_found", "message": "no route"}))


def _caller(**overrides: object) -> CallerContext:
    kwargs: dict[str, object] = {
        "user_id": "op-1",
        "role": Role.STATION_OPERATOR,
        "station_id": "st-1",
        "token": "jwt-abc",
    }
    kwargs.update(overrides)
    return CallerContext(**kwargs)  # type: ignore[arg-type]


def _distribution_body(status: str = "PENDING") -> dict[str, Any]:
    return {
        "id": 7,
        "fuelStation": {"id": 3},
        "fuelAmount": 5000.0,
        "fuelType": "DIESEL",
        "status": status,
        "distributionReference": "DIST-20260105-0042",
        "distributionDate": "2026-01-05T08:00:00Z",
    }


@pytest.mark.asyncio
async def test_client_requires_context_manager() -> None:
    client = FuelQuotaClient(CONFIG, caller=_caller(), transport=FakeBackend())

    with pytest.raises(FuelQuotaError):
        await client.get_vehicle_quota("v1")


@pytest.mark.asyncio
async def test_get_vehicle_quota_sends_bearer_token() -> None:
    backend = FakeBackend(
        responses={
            ("GET", "/vehicles/v1/quota"): (
                200,
                {
                    "vehicleId": "v1",
                    "vehicleNumber": "CAB1234",
                    "fuelType": "PETROL_92",
                    "periodQuota": 20,
                    "remainingQuota": 12.5,
                },
            )
        }
    )

    async with FuelQuotaClient(CONFIG, caller=_caller(), transport=backend) as client:
        quota = await client.get_vehicle_quota("v1")

    assert quota.remaining_quota == 12.5
    assert quota.fuel_type is FuelType.PETROL_92
    assert backend.calls[0].headers == {"Authorization": "Bearer jwt-abc"}


@pytest.mark.asyncio
async def test_scan_rejects_malformed_qr_without_request() -> None:
    backend = FakeBackend()

    async with FuelQuotaClient(CONFIG, caller=_caller(), transport=backend) as client:
        with pytest.raises(InvalidQrPayloadError):
            await client.scan("BADPREFIX:x")

    assert backend.calls == []


@pytest.mark.asyncio
async def test_scan_posts_qr_code() -> None:
    qr = "FUELQUOTA:abc:123456789V"
    backend = FakeBackend(
        responses={
            ("POST", "/scan"): (
                200,
                {"vehicleId": "v1", "fuelType": "DIESEL", "periodQuota": 40, "remainingQuota": 40},
            )
        }
    )

    async with FuelQuotaClient(CONFIG, caller=_caller(), transport=backend) as client:
        quota = await client.scan(qr)

    assert quota.vehicle_id == "v1"
    assert backend.calls[0].payload == {"qrCode": qr}


@pytest.mark.asyncio
async def test_dispense_maps_quota_exceeded_body() -> None:
    backend = FakeBackend(
        responses={
            ("POST", "/fuel/dispense"): (409, {"code": "quota_exceeded", "message": "only 4.5 L left"}),
        }
    )

    async with FuelQuotaClient(CONFIG, caller=_caller(), transport=backend) as client:
        with pytest.raises(QuotaExceededError, match="only 4.5 L left"):
            await client.dispense(DispenseRequest(vehicle_id="v1", fuel_type=FuelType.DIESEL, amount=10))

    sent = backend.calls[0].payload
    assert sent == {"vehicleId": "v1", "fuelType": "DIESEL", "amount": 10.0}


@pytest.mark.asyncio
async def test_dispense_validates_amount_locally() -> None:
    backend = FakeBackend()

    async with FuelQuotaClient(CONFIG, caller=_caller(), transport=backend) as client:
        with pytest.raises(InvalidAmountError):
            await client.dispense(DispenseRequest(vehicle_id="v1", fuel_type=FuelType.DIESEL, amount="-3"))

    assert backend.calls == []


@pytest.mark.asyncio
async def test_dispense_success() -> None:
    backend = FakeBackend(
        responses={("POST", "/fuel/dispense"): (200, {"transactionId": "tx-1", "remainingQuota": 24.5})}
    )

    async with FuelQuotaClient(CONFIG, caller=_caller(), transport=backend) as client:
        response = await client.dispense(DispenseRequest(vehicle_id="v1", fuel_type="PETROL_92", amount="10"))

    assert response.transaction_id == "tx-1"
    assert response.remaining_quota == 24.5


@pytest.mark.asyncio
async def test_status_update_conflict_maps_to_invalid_transition() -> None:
    backend = FakeBackend(
        responses={("PUT", "/fuel-distributions/7/status"): (409, {"message": "already delivered"})}
    )

    async with FuelQuotaClient(CONFIG, caller=_caller(role=Role.ADMIN), transport=backend) as client:
        with pytest.raises(InvalidTransitionError):
            await client.update_distribution_status("7", DistributionStatus.CANCELLED)

    assert backend.calls[0].payload == {"status": "CANCELLED"}


@pytest.mark.asyncio
async def test_create_distribution_parses_nested_station() -> None:
    backend = FakeBackend(responses={("POST", "/fuel-distributions"): (201, _distribution_body())})

    async with FuelQuotaClient(CONFIG, caller=_caller(role=Role.ADMIN), transport=backend) as client:
        dist = await client.create_distribution("3", DistributionFuelType.DIESEL, 5000)

    assert dist.id == "7"
    assert dist.fuel_station_id == "3"
    assert dist.status is DistributionStatus.PENDING
    assert backend.calls[0].payload == {"fuelStationId": "3", "fuelAmount": 5000.0, "fuelType": "DIESEL"}


@pytest.mark.asyncio
async def test_list_station_distributions_passes_status_and_unwraps_page() -> None:
    backend = FakeBackend(
        responses={
            ("GET", "/fuel-distributions/station/3"): (200, {"content": [_distribution_body("IN_TRANSIT")]}),
        }
    )

    async with FuelQuotaClient(CONFIG, caller=_caller(role=Role.STATION_MANAGER), transport=backend) as client:
        items = await client.list_station_distributions("3", DistributionStatus.IN_TRANSIT)

    assert [d.status for d in items] == [DistributionStatus.IN_TRANSIT]
    assert backend.calls[0].params == {"status": "IN_TRANSIT"}


@pytest.mark.asyncio
async def test_station_inventory() -> None:
    backend = FakeBackend(
        responses={
            ("GET", "/fuel-stations/3/inventory"): (
                200,
                [{"fuelStationId": "3", "fuelType": "PETROL", "amount": 1200.5, "updatedAt": "2026-01-05T08:00:00Z"}],
            ),
        }
    )

    async with FuelQuotaClient(CONFIG, caller=_caller(), transport=backend) as client:
        levels = await client.get_station_inventory("3")

    assert levels[0].fuel_type is DistributionFuelType.PETROL
    assert levels[0].amount == 1200.5


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "body", "expected"),
    [
        (404, None, NotFoundError),
        (500, None, TransportError),
        (503, {"message": "maintenance"}, TransportError),
        (418, {"code": "teapot"}, ApiError),
        (200, ["not", "an", "object"], ApiError),
    ],
)
async def test_error_mapping(status: int, body: Any, expected: type[Exception]) -> None:
    backend = FakeBackend(responses={("GET", "/vehicles/v1/quota"): (status, body)})

    async with FuelQuotaClient(CONFIG, caller=_caller(), transport=backend) as client:
        with pytest.raises(expected):
            await client.get_vehicle_quota("v1")


@pytest.mark.asyncio
async def test_unknown_error_code_is_preserved() -> None:
    backend = FakeBackend(responses={("GET", "/vehicles/v1/quota"): (418, {"code": "teapot", "message": "no"})})

    async with FuelQuotaClient(CONFIG, caller=_caller(), transport=backend) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.get_vehicle_quota("v1")

    assert exc_info.value.code == "teapot"
    assert exc_info.value.status_code == 418
    assert exc_info.value.endpoint == "/vehicles/v1/quota"


@pytest.mark.asyncio
async def test_expired_caller_never_reaches_backend() -> None:
    backend = FakeBackend()

    async with FuelQuotaClient(CONFIG, caller=_caller(ttl=0), transport=backend) as client:
        with pytest.raises(SessionExpiredError):
            await client.get_vehicle_quota("v1")
        client.set_caller(_caller(token="jwt-new"))
        with pytest.raises(NotFoundError):
            await client.get_vehicle_quota("v1")

    assert len(backend.calls) == 1
    assert backend.calls[0].headers == {"Authorization": "Bearer jwt-new"}


@pytest.mark.asyncio
async def test_http_transaction_store_round_trips_through_backend() -> None:
    tx = Transaction(
        id="tx-1",
        vehicle_id="v1",
        vehicle_number="CAB1234",
        amount=10,
        fuel_type=FuelType.PETROL_92,
        station_id="st-1",
        operator_id="op-1",
        timestamp=datetime(2026, 1, 5, 8, 0, tzinfo=UTC),
        remaining_quota=24.5,
    )
    backend = FakeBackend(
        responses={
            ("POST", "/transactions"): (201, None),
            ("GET", "/vehicles/v1/transactions"): (200, [tx.to_wire()]),
        }
    )

    async with FuelQuotaClient(CONFIG, caller=_caller(), transport=backend) as client:
        store = client.transaction_store()
        assert isinstance(store, HttpTransactionStore)
        await store.append(tx)
        listed = await store.list_for_vehicle("v1")

    assert backend.calls[0].payload["vehicleId"] == "v1"  # type: ignore[index]
    assert listed == [tx]
