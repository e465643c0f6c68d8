"""Persistence interfaces for transactions and distributions.

Having protocols here makes it easy to pass test doubles or the HTTP
backed stores while keeping the in-memory implementations concrete.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import Protocol, TypeVar

from fuelquota.exceptions import DuplicateError, FuelQuotaError, NotFoundError, TransportError
from fuelquota.models.distribution import Distribution
from fuelquota.models.transaction import Transaction

T = TypeVar("T")


async def call_store(call: Awaitable[T], timeout: float, what: str) -> T:
    """Await a store call under *timeout*.

    Store errors from the hierarchy pass through; a timeout or any other
    backend failure becomes :class:`TransportError`.  Nothing is retried.
    """
    try:
        return await asyncio.wait_for(call, timeout)
    except FuelQuotaError:
        raise
    except TimeoutError as exc:
        raise TransportError(f"{what} timed out after {timeout}s") from exc
    except Exception as exc:
        raise TransportError(f"{what} failed: {exc}") from exc


class TransactionStore(Protocol):
    """Append-only transaction log."""

    async def append(self, transaction: Transaction) -> None:
        ...

    async def list_for_vehicle(self, vehicle_id: str) -> list[Transaction]:
        ...


class DistributionStore(Protocol):
    async def get(self, distribution_id: str) -> Distribution:
        ...

    async def save(self, distribution: Distribution) -> None:
        ...

    async def list_all(self) -> list[Distribution]:
        ...


class InMemoryTransactionStore:
    def __init__(self) -> None:
        self._transactions: list[Transaction] = []
        self._ids: set[str] = set()

    async def append(self, transaction: Transaction) -> None:
        if transaction.id in self._ids:
            raise DuplicateError(f"transaction {transaction.id} already recorded")
        self._ids.add(transaction.id)
        self._transactions.append(transaction)

    async def list_for_vehicle(self, vehicle_id: str) -> list[Transaction]:
        return [tx for tx in self._transactions if tx.vehicle_id == vehicle_id]

    def __len__(self) -> int:
        return len(self._transactions)


class InMemoryDistributionStore:
    """Keeps the latest version of each distribution.

    ``save`` rejects a write whose ``version`` is not exactly one above
    the stored one, so a lost update surfaces instead of overwriting.
    """

    def __init__(self) -> None:
        self._distributions: dict[str, Distribution] = {}

    async def get(self, distribution_id: str) -> Distribution:
        distribution = self._distributions.get(distribution_id)
        if distribution is None:
            raise NotFoundError(f"distribution {distribution_id} not found")
        return distribution

    async def save(self, distribution: Distribution) -> None:
        existing = self._distributions.get(distribution.id)
        expected = 0 if existing is None else existing.version + 1
        if distribution.version != expected:
            raise DuplicateError(
                f"distribution {distribution.id} version {distribution.version} conflicts (expected {expected})"
            )
        self._distributions[distribution.id] = distribution

    async def list_all(self) -> list[Distribution]:
        return list(self._distributions.values())
