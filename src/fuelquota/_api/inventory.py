"""Station inventory endpoint."""

from __future__ import annotations

from fuelquota._api._common import expect_list, request_json
from fuelquota._transport import Transport
from fuelquota.context import CallerContext
from fuelquota.models.inventory import InventoryLevel


async def fetch_station_inventory(
    transport: Transport,
    caller: CallerContext,
    station_id: str,
) -> list[InventoryLevel]:
    endpoint = f"/fuel-stations/{station_id}/inventory"
    body = await request_json(transport, "GET", endpoint, caller=caller)
    return [InventoryLevel.model_validate(item) for item in expect_list(endpoint, body)]
