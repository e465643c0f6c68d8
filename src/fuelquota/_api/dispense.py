"""Dispense and transaction endpoints."""

from __future__ import annotations

from fuelquota._api._common import expect_list, expect_object, request_json
from fuelquota._normalize import parse_amount
from fuelquota._transport import Transport
from fuelquota.context import CallerContext
from fuelquota.models.qr import QrPayload
from fuelquota.models.requests import DispenseRequest, DispenseResponse
from fuelquota.models.transaction import Transaction


async def post_dispense(transport: Transport, caller: CallerContext, request: DispenseRequest) -> DispenseResponse:
    if request.qr_data:
        QrPayload.parse(request.qr_data)
    payload = request.model_copy(update={"amount": parse_amount(request.amount)}).to_wire()
    endpoint = "/fuel/dispense"
    body = await request_json(transport, "POST", endpoint, caller=caller, payload=payload)
    return DispenseResponse.model_validate(expect_object(endpoint, body))


async def post_transaction(transport: Transport, caller: CallerContext, transaction: Transaction) -> None:
    await request_json(transport, "POST", "/transactions", caller=caller, payload=transaction.to_wire())


async def fetch_vehicle_transactions(
    transport: Transport,
    caller: CallerContext,
    vehicle_id: str,
) -> list[Transaction]:
    endpoint = f"/vehicles/{vehicle_id}/transactions"
    body = await request_json(transport, "GET", endpoint, caller=caller)
    return [Transaction.model_validate(item) for item in expect_list(endpoint, body)]
