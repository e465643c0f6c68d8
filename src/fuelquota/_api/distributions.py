"""Fuel distribution endpoints."""

from __future__ import annotations

from fuelquota._api._common import expect_list, expect_object, request_json
from fuelquota._normalize import parse_amount
from fuelquota._transport import Transport
from fuelquota.context import CallerContext
from fuelquota.models.distribution import Distribution, DistributionStatus
from fuelquota.models.requests import CreateDistributionRequest, StatusUpdateRequest

_BASE = "/fuel-distributions"


async def post_distribution(
    transport: Transport,
    caller: CallerContext,
    request: CreateDistributionRequest,
) -> Distribution:
    payload = request.model_copy(update={"fuel_amount": parse_amount(request.fuel_amount)}).to_wire()
    body = await request_json(transport, "POST", _BASE, caller=caller, payload=payload)
    return Distribution.model_validate(expect_object(_BASE, body))


async def put_distribution_status(
    transport: Transport,
    caller: CallerContext,
    distribution_id: str,
    status: DistributionStatus,
) -> Distribution:
    """Update a distribution's status; a 409 surfaces as ``InvalidTransitionError``."""
    endpoint = f"{_BASE}/{distribution_id}/status"
    payload = StatusUpdateRequest(status=status).to_wire()
    body = await request_json(transport, "PUT", endpoint, caller=caller, payload=payload)
    return Distribution.model_validate(expect_object(endpoint, body))


async def fetch_station_distributions(
    transport: Transport,
    caller: CallerContext,
    station_id: str,
    status: DistributionStatus | None = None,
) -> list[Distribution]:
    endpoint = f"{_BASE}/station/{station_id}"
    params = {"status": status.value} if status is not None else None
    body = await request_json(transport, "GET", endpoint, caller=caller, params=params)
    return [Distribution.model_validate(item) for item in expect_list(endpoint, body)]
