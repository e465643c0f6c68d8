#!/usr/bin/env python3
"""Command-line access to the fuel quota backend.

Connection settings come from ``FUELQUOTA_*`` environment variables
(see :class:`fuelquota.FuelQuotaConfig`); the caller is taken from:
- FUELQUOTA_USER_ID
- FUELQUOTA_ROLE (default STATION_OPERATOR)
- FUELQUOTA_STATION_ID
- FUELQUOTA_TOKEN

Examples::

    fuelquota_cli.py quota 42
    fuelquota_cli.py scan "FUELQUOTA:ABC123:123456789V"
    fuelquota_cli.py dispense --qr "FUELQUOTA:ABC123:123456789V" --fuel-type PETROL_92 --amount 10
    fuelquota_cli.py distribution create --station 7 --fuel-type DIESEL --amount 500
    fuelquota_cli.py distribution status 12 DELIVERED
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from fuelquota import (  # noqa: E402
    CallerContext,
    DispenseRequest,
    DistributionFuelType,
    DistributionStatus,
    FuelQuotaClient,
    FuelQuotaConfig,
    FuelQuotaError,
    FuelType,
    Role,
)


def _caller_from_env() -> CallerContext:
    user_id = os.environ.get("FUELQUOTA_USER_ID")
    if not user_id:
        raise SystemExit("FUELQUOTA_USER_ID is required")
    return CallerContext(
        user_id=user_id,
        role=Role(os.environ.get("FUELQUOTA_ROLE", Role.STATION_OPERATOR.value)),
        station_id=os.environ.get("FUELQUOTA_STATION_ID") or None,
        token=os.environ.get("FUELQUOTA_TOKEN") or None,
    )


def _print(value: Any) -> None:
    if hasattr(value, "to_wire"):
        value = value.to_wire()
    elif isinstance(value, list):
        value = [item.to_wire() for item in value]
    print(json.dumps(value, indent=2, ensure_ascii=False))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    quota = sub.add_parser("quota", help="show a vehicle's remaining quota")
    quota.add_argument("vehicle_id")

    scan = sub.add_parser("scan", help="resolve a decoded QR payload")
    scan.add_argument("qr_data")

    dispense = sub.add_parser("dispense", help="record a dispense")
    target = dispense.add_mutually_exclusive_group(required=True)
    target.add_argument("--vehicle", dest="vehicle_id")
    target.add_argument("--qr", dest="qr_data")
    dispense.add_argument("--fuel-type", required=True, choices=[f.value for f in FuelType])
    dispense.add_argument("--amount", required=True)
    dispense.add_argument("--station", dest="station_id")
    dispense.add_argument("--notes")

    history = sub.add_parser("history", help="list a vehicle's transactions")
    history.add_argument("vehicle_id")

    dist = sub.add_parser("distribution", help="bulk distribution commands")
    dist_sub = dist.add_subparsers(dest="dist_command", required=True)
    create = dist_sub.add_parser("create")
    create.add_argument("--station", required=True)
    create.add_argument("--fuel-type", required=True, choices=[f.value for f in DistributionFuelType])
    create.add_argument("--amount", required=True, type=float)
    create.add_argument("--notes")
    status = dist_sub.add_parser("status")
    status.add_argument("distribution_id")
    status.add_argument("status", choices=[s.value for s in DistributionStatus])
    listing = dist_sub.add_parser("list")
    listing.add_argument("--station", required=True)
    listing.add_argument("--status", choices=[s.value for s in DistributionStatus])

    inventory = sub.add_parser("inventory", help="show a station's stock")
    inventory.add_argument("station_id")
    return parser


async def _run(args: argparse.Namespace) -> Any:
    config = FuelQuotaConfig.from_env()
    async with FuelQuotaClient(config, caller=_caller_from_env()) as client:
        if args.command == "quota":
            return await client.get_vehicle_quota(args.vehicle_id)
        if args.command == "scan":
            return await client.scan(args.qr_data)
        if args.command == "dispense":
            request = DispenseRequest(
                vehicle_id=args.vehicle_id,
                qr_data=args.qr_data,
                fuel_type=FuelType(args.fuel_type),
                amount=args.amount,
                station_id=args.station_id or client.caller.station_id,
                notes=args.notes,
            )
            return await client.dispense(request)
        if args.command == "history":
            return await client.get_vehicle_transactions(args.vehicle_id)
        if args.command == "inventory":
            return await client.get_station_inventory(args.station_id)
        if args.dist_command == "create":
            return await client.create_distribution(
                args.station,
                DistributionFuelType(args.fuel_type),
                args.amount,
                args.notes,
            )
        if args.dist_command == "status":
            return await client.update_distribution_status(args.distribution_id, DistributionStatus(args.status))
        status_filter = DistributionStatus(args.status) if args.status else None
        return await client.list_station_distributions(args.station, status_filter)


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        result = asyncio.run(_run(args))
    except FuelQuotaError as exc:
        print(json.dumps({"code": exc.code, "message": str(exc)}), file=sys.stderr)
        return 1
    _print(result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
