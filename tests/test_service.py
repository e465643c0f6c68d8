from __future__ import annotations

import asyncio

import pytest

from fuelquota.config import FuelQuotaConfig
from fuelquota.context import CallerContext, Role
from fuelquota.models import (
    CreateDistributionRequest,
    DispenseRequest,
    DispenseResponse,
    Distribution,
    DistributionStatus,
    FuelType,
    StatusUpdateRequest,
    VehicleClass,
    VehicleQuota,
)
from fuelquota.result import Err, Ok
from fuelquota.service import FuelQuotaService

OPERATOR = CallerContext(user_id="op-1", role=Role.STATION_OPERATOR, station_id="st-1")
ADMIN = CallerContext(user_id="admin-1", role=Role.ADMIN)
OWNER = CallerContext(user_id="owner-1", role=Role.VEHICLE_OWNER)


def _service() -> tuple[FuelQuotaService, str]:
    service = FuelQuotaService(FuelQuotaConfig(base_url="http://backend.test/api"))
    vehicle = service.registry.register(
        "CAB-1234", VehicleClass.CAR, FuelType.PETROL_92, "123456789V", period_quota=34.5
    )
    return service, vehicle.id


def _request(vehicle_id: str, amount: object, **extra: object) -> DispenseRequest:
    return DispenseRequest(vehicle_id=vehicle_id, fuel_type=FuelType.PETROL_92, amount=amount, **extra)


@pytest.mark.asyncio
async def test_get_quota_returns_view() -> None:
    service, vehicle_id = _service()

    result = await service.get_quota(vehicle_id)

    assert isinstance(result, Ok)
    assert result.value == VehicleQuota(
        vehicle_id=vehicle_id,
        vehicle_number="CAB1234",
        fuel_type=FuelType.PETROL_92,
        period_quota=34.5,
        remaining_quota=34.5,
    )


@pytest.mark.asyncio
async def test_get_quota_unknown_vehicle_is_404() -> None:
    service, _ = _service()

    result = await service.get_quota("missing")

    assert isinstance(result, Err)
    assert result.status == 404
    assert result.body.code == "not_found"


@pytest.mark.asyncio
async def test_dispense_then_exceed() -> None:
    service, vehicle_id = _service()

    first = await service.dispense(OPERATOR, _request(vehicle_id, 10))
    second = await service.dispense(OPERATOR, _request(vehicle_id, 30))

    assert first.is_ok
    assert isinstance(first.value, DispenseResponse)  # type: ignore[union-attr]
    assert first.value.remaining_quota == 24.5  # type: ignore[union-attr]
    assert isinstance(second, Err)
    assert second.status == 409
    assert second.code == "quota_exceeded"
    assert second.body.to_wire()["code"] == "quota_exceeded"
    assert service.ledger.get_remaining(vehicle_id) == 24.5


@pytest.mark.asyncio
async def test_dispense_invalid_amount_is_400() -> None:
    service, vehicle_id = _service()

    result = await service.dispense(OPERATOR, _request(vehicle_id, "abc"))

    assert isinstance(result, Err)
    assert result.status == 400
    assert result.code == "invalid_amount"


@pytest.mark.asyncio
async def test_dispense_by_qr() -> None:
    service, vehicle_id = _service()
    qr = service.registry.qr_payload(vehicle_id)

    result = await service.dispense(
        OPERATOR, DispenseRequest(qr_data=qr, fuel_type=FuelType.PETROL_92, amount=4.5)
    )

    assert isinstance(result, Ok)
    assert result.value.remaining_quota == 30.0
    history = await service.recorder.history(vehicle_id)
    assert history[0].id == result.value.transaction_id
    assert history[0].operator_id == "op-1"
    assert history[0].station_id == "st-1"


@pytest.mark.asyncio
async def test_dispense_bad_qr_is_400() -> None:
    service, _ = _service()

    result = await service.dispense(
        OPERATOR, DispenseRequest(qr_data="BADPREFIX:x", fuel_type=FuelType.PETROL_92, amount=1)
    )

    assert isinstance(result, Err)
    assert result.status == 400
    assert result.code == "invalid_qr"


@pytest.mark.asyncio
async def test_dispense_requires_station() -> None:
    service, vehicle_id = _service()

    unbound = await service.dispense(ADMIN, _request(vehicle_id, 1))
    bound = await service.dispense(ADMIN, _request(vehicle_id, 1, station_id="st-9"))

    assert isinstance(unbound, Err)
    assert unbound.status == 400
    assert bound.is_ok


@pytest.mark.asyncio
async def test_vehicle_owner_forbidden() -> None:
    service, vehicle_id = _service()

    result = await service.dispense(OWNER, _request(vehicle_id, 1, station_id="st-1"))

    assert isinstance(result, Err)
    assert result.status == 403
    assert result.code == "forbidden"


@pytest.mark.asyncio
async def test_expired_caller_is_401() -> None:
    service, vehicle_id = _service()
    expired = CallerContext(user_id="op-1", role=Role.STATION_OPERATOR, station_id="st-1", ttl=0)

    result = await service.dispense(expired, _request(vehicle_id, 1))

    assert isinstance(result, Err)
    assert result.status == 401
    assert result.code == "session_expired"


@pytest.mark.asyncio
async def test_scan_resolves_quota() -> None:
    service, vehicle_id = _service()

    ok = await service.scan(service.registry.qr_payload(vehicle_id))
    bad = await service.scan("FUELQUOTA:x")

    assert isinstance(ok, Ok)
    assert ok.value.vehicle_id == vehicle_id
    assert isinstance(bad, Err)
    assert bad.code == "invalid_qr"


@pytest.mark.asyncio
async def test_distribution_lifecycle_through_service() -> None:
    service, _ = _service()

    created = await service.create_distribution(
        ADMIN, CreateDistributionRequest(fuel_station_id="st-1", fuel_amount=5000, fuel_type="DIESEL")
    )
    assert isinstance(created, Ok)

    delivered = await service.update_distribution_status(
        ADMIN, created.value.id, StatusUpdateRequest(status=DistributionStatus.DELIVERED)
    )
    again = await service.update_distribution_status(
        ADMIN, created.value.id, StatusUpdateRequest(status=DistributionStatus.CANCELLED)
    )

    assert isinstance(delivered, Ok)
    assert delivered.value.completed_date is not None
    assert service.inventory.level("st-1", "DIESEL") == 5000.0
    assert isinstance(again, Err)
    assert again.status == 409
    assert again.code == "invalid_transition"


@pytest.mark.asyncio
async def test_create_distribution_invalid_amount() -> None:
    service, _ = _service()

    result = await service.create_distribution(
        ADMIN, CreateDistributionRequest(fuel_station_id="st-1", fuel_amount=0, fuel_type="PETROL")
    )

    assert isinstance(result, Err)
    assert result.status == 400


class _StalledDistributionStore:
    async def get(self, distribution_id: str) -> Distribution:
        await asyncio.sleep(1.0)
        raise AssertionError("unreachable")

    async def save(self, distribution: Distribution) -> None:
        await asyncio.sleep(1.0)

    async def list_all(self) -> list[Distribution]:
        await asyncio.sleep(1.0)
        return []


@pytest.mark.asyncio
async def test_store_timeout_becomes_err_not_exception() -> None:
    service = FuelQuotaService(
        FuelQuotaConfig(base_url="http://backend.test/api", store_timeout=0.01),
        distribution_store=_StalledDistributionStore(),
    )

    created = await service.create_distribution(
        ADMIN, CreateDistributionRequest(fuel_station_id="st-1", fuel_amount=500, fuel_type="DIESEL")
    )
    updated = await service.update_distribution_status(
        ADMIN, "d-1", StatusUpdateRequest(status=DistributionStatus.IN_TRANSIT)
    )

    for result in (created, updated):
        assert isinstance(result, Err)
        assert result.code == "transport_error"
        assert result.status == 502
