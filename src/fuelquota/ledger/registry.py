"""Vehicle registry and quota policy."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping

from fuelquota._normalize import format_vehicle_number, normalize_nic, normalize_vehicle_number
from fuelquota.exceptions import DuplicateError, NotFoundError
from fuelquota.ledger.quota import QuotaLedger
from fuelquota.models.qr import QrPayload, new_qr_identifier
from fuelquota.models.vehicle import FuelType, Vehicle, VehicleClass

_logger = logging.getLogger(__name__)

#: Weekly liters allotted per vehicle class.
DEFAULT_WEEKLY_QUOTAS: dict[VehicleClass, float] = {
    VehicleClass.MOTORCYCLE: 4.0,
    VehicleClass.THREE_WHEELER: 6.0,
    VehicleClass.CAR: 20.0,
    VehicleClass.VAN: 40.0,
    VehicleClass.BUS: 200.0,
    VehicleClass.LORRY: 100.0,
    VehicleClass.TRUCK: 300.0,
    VehicleClass.HEAVY_VEHICLE: 500.0,
}


class QuotaPolicy:
    """Maps a vehicle class to its per-period allotment."""

    def __init__(self, quotas: Mapping[VehicleClass, float] | None = None) -> None:
        self._quotas = dict(DEFAULT_WEEKLY_QUOTAS)
        if quotas:
            self._quotas.update(quotas)

    def quota_for(self, vehicle_class: VehicleClass, fuel_type: FuelType | None = None) -> float:
        return self._quotas[vehicle_class]


class VehicleRegistry:
    """Registered vehicles indexed by id, registration number and QR identifier.

    Registration opens the vehicle's quota record in the ledger;
    deregistration closes it.
    """

    def __init__(self, ledger: QuotaLedger, policy: QuotaPolicy | None = None) -> None:
        self._ledger = ledger
        self._policy = policy or QuotaPolicy()
        self._vehicles: dict[str, Vehicle] = {}
        self._by_number: dict[str, str] = {}
        self._by_qr: dict[str, str] = {}

    @property
    def ledger(self) -> QuotaLedger:
        return self._ledger

    def register(
        self,
        vehicle_number: str,
        vehicle_class: VehicleClass,
        fuel_type: FuelType,
        owner_nic: str,
        *,
        chassis_number: str | None = None,
        period_quota: float | None = None,
    ) -> Vehicle:
        number = normalize_vehicle_number(vehicle_number)
        nic = normalize_nic(owner_nic)
        if number in self._by_number:
            raise DuplicateError(f"vehicle {number} is already registered")

        vehicle = Vehicle(
            id=uuid.uuid4().hex,
            vehicle_number=number,
            vehicle_class=vehicle_class,
            fuel_type=fuel_type,
            owner_nic=nic,
            qr_identifier=new_qr_identifier(),
            chassis_number=chassis_number,
        )
        quota = period_quota if period_quota is not None else self._policy.quota_for(vehicle_class, fuel_type)
        self._ledger.open_record(vehicle.id, quota)

        self._vehicles[vehicle.id] = vehicle
        self._by_number[number] = vehicle.id
        self._by_qr[vehicle.qr_identifier] = vehicle.id
        _logger.info("Registered vehicle %s (%s, %s)", format_vehicle_number(number), vehicle_class, fuel_type)
        return vehicle

    def deregister(self, vehicle_id: str) -> None:
        vehicle = self.get(vehicle_id)
        self._ledger.close_record(vehicle_id)
        del self._vehicles[vehicle_id]
        self._by_number.pop(vehicle.vehicle_number, None)
        self._by_qr.pop(vehicle.qr_identifier, None)

    def get(self, vehicle_id: str) -> Vehicle:
        vehicle = self._vehicles.get(vehicle_id)
        if vehicle is None:
            raise NotFoundError(f"vehicle {vehicle_id} not found")
        return vehicle

    def find_by_number(self, vehicle_number: str) -> Vehicle:
        number = normalize_vehicle_number(vehicle_number)
        vehicle_id = self._by_number.get(number)
        if vehicle_id is None:
            raise NotFoundError(f"vehicle {number} not found")
        return self._vehicles[vehicle_id]

    def resolve_qr(self, payload: QrPayload | str) -> Vehicle:
        """Return the vehicle a scanned QR payload belongs to.

        Strings are parsed first, so malformed payloads are rejected
        before any lookup.
        """
        qr = payload if isinstance(payload, QrPayload) else QrPayload.parse(payload)
        vehicle_id = self._by_qr.get(qr.qr_identifier)
        if vehicle_id is None:
            raise NotFoundError(f"no vehicle for QR identifier {qr.qr_identifier}")
        vehicle = self._vehicles[vehicle_id]
        if vehicle.owner_nic != qr.owner_nic:
            raise NotFoundError(f"QR identifier {qr.qr_identifier} is not registered to the given owner")
        return vehicle

    def qr_payload(self, vehicle_id: str) -> str:
        vehicle = self.get(vehicle_id)
        return QrPayload(qr_identifier=vehicle.qr_identifier, owner_nic=vehicle.owner_nic).encode()

    def __len__(self) -> int:
        return len(self._vehicles)
