"""Ledger events delivered to listeners after a successful mutation.

Listeners are the hook for notifications such as "send SMS to owner";
they run only after the mutation has been committed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from fuelquota.models._base import UtcDatetime, utcnow

_logger = logging.getLogger(__name__)


class EventKind(StrEnum):
    FUEL_DISPENSED = "fuel_dispensed"
    QUOTA_RESET = "quota_reset"
    DISTRIBUTION_CREATED = "distribution_created"
    DISTRIBUTION_STATUS_CHANGED = "distribution_status_changed"


class LedgerEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: EventKind
    subject_id: str = Field(..., description="Vehicle or distribution id")
    occurred_at: UtcDatetime = Field(default_factory=utcnow)
    data: dict[str, Any] = Field(default_factory=dict)


EventListener = Callable[[LedgerEvent], None]


def notify(listeners: Iterable[EventListener], event: LedgerEvent) -> None:
    """Deliver *event* to every listener.

    A failing listener is logged and does not prevent the others from
    running; the committed mutation is never affected.
    """
    for listener in listeners:
        try:
            listener(event)
        except Exception:
            _logger.warning("Listener %r failed for %s event", listener, event.kind, exc_info=True)
