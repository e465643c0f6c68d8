"""Base model for fuelquota entities and wire payloads.

Every model inherits from :class:`FuelQuotaModel` which provides:

* ``alias_generator=to_camel`` so the backend's camelCase keys map to
  snake_case fields, and ``model_dump(by_alias=True)`` produces them back.
* ``frozen=True``; ledger entities are replaced, never mutated in place.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(UTC)


def _ensure_tz_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_ensure_tz_aware)]
"""Datetime that is always timezone-aware (naive values are taken as UTC)."""


class FuelQuotaModel(BaseModel):
    """Base for fuelquota models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        use_enum_values=False,
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-compatible dict with camelCase keys, ``None`` fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
