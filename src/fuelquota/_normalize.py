"""Normalization helpers.

Centralizes defensive parsing of amounts and identifiers coming from
forms, scans and backend payloads.
"""

from __future__ import annotations

import math
import re
from typing import Any

from fuelquota.exceptions import InvalidAmountError, ValidationError

_VEHICLE_NUMBER_RE = re.compile(r"^(?:\d{1,4}|[A-Z]{1,3}\d{1,4})$")
_NIC_RE = re.compile(r"^(?:\d{12}|\d{9}V)$")


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--":
        return None
    if isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def parse_amount(value: Any, *, maximum: float | None = None) -> float:
    """Return *value* as a strictly positive, finite number of liters.

    Raises :class:`InvalidAmountError` for anything else, including
    booleans and numeric strings with trailing garbage.
    """
    parsed = safe_float(value)
    if parsed is None:
        raise InvalidAmountError(f"amount must be a number, got {value!r}")
    if parsed <= 0:
        raise InvalidAmountError(f"amount must be greater than zero, got {parsed}")
    if maximum is not None and parsed > maximum:
        raise InvalidAmountError(f"amount must not exceed {maximum} liters, got {parsed}")
    return parsed


def normalize_vehicle_number(value: str) -> str:
    """Strip spaces/hyphens, upper-case, and validate a registration number.

    Accepted shapes are up to four digits, or one to three letters
    followed by one to four digits (``"CAB-1234"`` -> ``"CAB1234"``).
    """
    cleaned = re.sub(r"[\s-]", "", str(value)).upper()
    if not _VEHICLE_NUMBER_RE.match(cleaned):
        raise ValidationError(f"invalid vehicle number: {value!r}")
    return cleaned


def format_vehicle_number(value: str) -> str:
    """Display form of a registration number (``"CAB1234"`` -> ``"CAB-1234"``)."""
    cleaned = normalize_vehicle_number(value)
    match = re.match(r"^([A-Z]+)(\d+)$", cleaned)
    if match is None:
        return cleaned
    return f"{match.group(1)}-{match.group(2)}"


def normalize_nic(value: str) -> str:
    """Validate a national identity card number (12 digits, or 9 digits + ``V``)."""
    cleaned = re.sub(r"\s", "", str(value)).upper()
    if not _NIC_RE.match(cleaned):
        raise ValidationError(f"invalid NIC: {value!r}")
    return cleaned
