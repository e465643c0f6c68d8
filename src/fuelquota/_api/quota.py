"""Vehicle quota lookup and QR scan endpoints."""

from __future__ import annotations

from fuelquota._api._common import expect_object, request_json
from fuelquota._transport import Transport
from fuelquota.context import CallerContext
from fuelquota.models.qr import QrPayload
from fuelquota.models.requests import VehicleQuota


async def fetch_vehicle_quota(transport: Transport, caller: CallerContext, vehicle_id: str) -> VehicleQuota:
    endpoint = f"/vehicles/{vehicle_id}/quota"
    body = await request_json(transport, "GET", endpoint, caller=caller)
    return VehicleQuota.model_validate(expect_object(endpoint, body))


async def scan_qr(transport: Transport, caller: CallerContext, qr_data: str) -> VehicleQuota:
    """Resolve decoded QR text on the backend.

    The payload is validated locally first so malformed scans never
    leave the device.
    """
    QrPayload.parse(qr_data)
    endpoint = "/scan"
    body = await request_json(transport, "POST", endpoint, caller=caller, payload={"qrCode": qr_data})
    return VehicleQuota.model_validate(expect_object(endpoint, body))
