"""Per-vehicle quota ledger.

This is the only component allowed to change a vehicle's remaining
quota.  Mutations for one vehicle are serialized with a per-vehicle
``asyncio.Lock`` so two concurrent dispenses can never both validate
against the same stale balance.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

from fuelquota._constants import DEFAULT_QUOTA_PERIOD_DAYS
from fuelquota._normalize import parse_amount
from fuelquota.events import EventKind, EventListener, LedgerEvent, notify
from fuelquota.exceptions import DuplicateError, NotFoundError, QuotaExceededError
from fuelquota.models._base import utcnow
from fuelquota.models.vehicle import QuotaRecord

_logger = logging.getLogger(__name__)

# Tolerance for float drift when comparing liters (e.g. 0.1 + 0.2).
_EPSILON = 1e-9


class QuotaLedger:
    """In-memory single source of truth for vehicle quota balances."""

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = utcnow,
        period: timedelta = timedelta(days=DEFAULT_QUOTA_PERIOD_DAYS),
        max_amount: float | None = None,
        listeners: Iterable[EventListener] = (),
    ) -> None:
        self._clock = clock
        self._period = period
        self._max_amount = max_amount
        self._listeners = list(listeners)
        self._records: dict[str, QuotaRecord] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock(self, vehicle_id: str) -> asyncio.Lock:
        lock = self._locks.get(vehicle_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[vehicle_id] = lock
        return lock

    def _require(self, vehicle_id: str) -> QuotaRecord:
        record = self._records.get(vehicle_id)
        if record is None:
            raise NotFoundError(f"no quota record for vehicle {vehicle_id}")
        return record

    def __contains__(self, vehicle_id: object) -> bool:
        return vehicle_id in self._records

    def open_record(self, vehicle_id: str, period_quota: float) -> QuotaRecord:
        """Create a full quota record for a newly registered vehicle."""
        if vehicle_id in self._records:
            raise DuplicateError(f"quota record already exists for vehicle {vehicle_id}")
        quota = parse_amount(period_quota)
        record = QuotaRecord(
            vehicle_id=vehicle_id,
            period_quota=quota,
            remaining_quota=quota,
            period_started_at=self._clock(),
        )
        self._records[vehicle_id] = record
        _logger.debug("Opened quota record for %s with %.2f L", vehicle_id, quota)
        return record

    def close_record(self, vehicle_id: str) -> None:
        self._require(vehicle_id)
        del self._records[vehicle_id]
        self._locks.pop(vehicle_id, None)

    def get_record(self, vehicle_id: str) -> QuotaRecord:
        return self._require(vehicle_id)

    def get_remaining(self, vehicle_id: str) -> float:
        """Remaining liters for the current cycle."""
        return self._require(vehicle_id).remaining_quota

    async def reserve_and_deduct(self, vehicle_id: str, amount: float) -> float:
        """Deduct *amount* liters and return the new remaining quota.

        Raises
        ------
        InvalidAmountError
            *amount* is not a finite number greater than zero.
        NotFoundError
            No quota record exists for *vehicle_id*.
        QuotaExceededError
            *amount* is larger than the remaining quota.  The balance is
            left unchanged.
        """
        liters = parse_amount(amount, maximum=self._max_amount)
        # Unknown ids never get a lock entry.
        self._require(vehicle_id)
        async with self._lock(vehicle_id):
            record = self._require(vehicle_id)
            if liters > record.remaining_quota + _EPSILON:
                raise QuotaExceededError(
                    f"requested {liters} L exceeds remaining quota {record.remaining_quota} L for vehicle {vehicle_id}",
                    vehicle_id=vehicle_id,
                    requested=liters,
                    remaining=record.remaining_quota,
                )
            remaining = max(0.0, round(record.remaining_quota - liters, 6))
            self._records[vehicle_id] = record.model_copy(
                update={"remaining_quota": remaining, "version": record.version + 1}
            )
        _logger.debug("Deducted %.2f L from %s, %.2f L remaining", liters, vehicle_id, remaining)
        return remaining

    async def reset_period(self, vehicle_id: str) -> QuotaRecord:
        """Restore the full period quota and start a new cycle."""
        self._require(vehicle_id)
        async with self._lock(vehicle_id):
            record = self._require(vehicle_id)
            reset = record.model_copy(
                update={
                    "remaining_quota": record.period_quota,
                    "version": record.version + 1,
                    "period_started_at": self._clock(),
                }
            )
            self._records[vehicle_id] = reset
        notify(
            self._listeners,
            LedgerEvent(kind=EventKind.QUOTA_RESET, subject_id=vehicle_id, data={"period_quota": reset.period_quota}),
        )
        return reset

    async def reset_all(self) -> list[QuotaRecord]:
        return [await self.reset_period(vehicle_id) for vehicle_id in list(self._records)]

    async def reset_due(self, now: datetime | None = None) -> list[QuotaRecord]:
        """Reset every record whose cycle has elapsed at *now*."""
        current = now if now is not None else self._clock()
        due = [
            vehicle_id
            for vehicle_id, record in self._records.items()
            if current - record.period_started_at >= self._period
        ]
        if due:
            _logger.info("Resetting quota for %d vehicle(s)", len(due))
        return [await self.reset_period(vehicle_id) for vehicle_id in due]

