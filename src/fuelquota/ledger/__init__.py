"""Ledger core.

This package is the single source of truth for vehicle quota balances,
dispense transactions and bulk distribution status.
"""

from fuelquota.ledger.distribution import DistributionWorkflow
from fuelquota.ledger.inventory import InventoryCollaborator, StationInventory
from fuelquota.ledger.quota import QuotaLedger
from fuelquota.ledger.recorder import TransactionRecorder
from fuelquota.ledger.registry import DEFAULT_WEEKLY_QUOTAS, QuotaPolicy, VehicleRegistry
from fuelquota.ledger.store import (
    DistributionStore,
    InMemoryDistributionStore,
    InMemoryTransactionStore,
    TransactionStore,
)

__all__ = [
    "DEFAULT_WEEKLY_QUOTAS",
    "DistributionStore",
    "DistributionWorkflow",
    "InMemoryDistributionStore",
    "InMemoryTransactionStore",
    "InventoryCollaborator",
    "QuotaLedger",
    "QuotaPolicy",
    "StationInventory",
    "TransactionRecorder",
    "TransactionStore",
    "VehicleRegistry",
]
