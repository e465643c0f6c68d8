"""Scrub owner identity and credentials from payloads before DEBUG logging.

Quota traffic carries bearer tokens, owners' NIC numbers and QR payloads
(which embed the NIC).  ``redact_for_log`` returns a copy that is safe to
emit while keeping the payload shape readable.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from fuelquota._constants import QR_PREFIX, QR_SEPARATOR

REDACTED = "<redacted>"

# Compared case-insensitively against mapping keys.
_SECRET_KEYS: frozenset[str] = frozenset(
    {
        "authorization",
        "cookie",
        "password",
        "otp",
        "token",
        "accesstoken",
        "refreshtoken",
        "nic",
        "ownernic",
        "qrcode",
        "qrdata",
        "qrcontent",
    }
)

_QR_MARKER = QR_PREFIX + QR_SEPARATOR
_MAX_DEPTH = 20


def _scrub_text(text: str, max_string: int) -> str:
    if text.startswith(_QR_MARKER):
        return REDACTED
    if len(text) > max_string:
        return f"{text[:max_string]}…<truncated>"
    return text


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a log-safe copy of *value*.

    Values under secret keys are replaced, any string holding a QR payload
    is replaced wherever it appears, and long strings are truncated.
    """
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _scrub_text(value, max_string)
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"
    if isinstance(value, Mapping):
        return {
            str(key): REDACTED
            if str(key).lower() in _SECRET_KEYS
            else redact_for_log(item, max_string=max_string, _depth=_depth + 1)
            for key, item in value.items()
        }
    if isinstance(value, Sequence):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
    return repr(value)
