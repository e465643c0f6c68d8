"""Explicit caller context for authenticated operations.

Ledger operations take the caller as an argument instead of reading a
process-wide "current user", so two operators on the same service can
never see each other's identity.
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from fuelquota.exceptions import AuthorizationError, SessionExpiredError

#: Default caller context time-to-live in seconds (12 hours).
DEFAULT_CONTEXT_TTL: float = 12 * 3600


class Role(StrEnum):
    ADMIN = "ADMIN"
    STATION_MANAGER = "STATION_MANAGER"
    STATION_OPERATOR = "STATION_OPERATOR"
    VEHICLE_OWNER = "VEHICLE_OWNER"


class CallerContext(BaseModel):
    """Authenticated caller.

    Parameters
    ----------
    user_id : str
        Identifier of the authenticated user.
    role : Role
        Role granted by the backend at login.
    station_id : str or None
        Station the caller operates, for station staff.
    token : str or None
        Bearer token forwarded to the backend by the HTTP client.
    created_at : float
        Monotonic timestamp (``time.monotonic()``) of authentication.
    ttl : float
        Seconds after which the context is considered expired.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    user_id: str = Field(min_length=1)
    role: Role
    station_id: str | None = None
    token: str | None = Field(default=None, repr=False)
    created_at: float = Field(default_factory=time.monotonic)
    ttl: float = DEFAULT_CONTEXT_TTL

    @property
    def is_expired(self) -> bool:
        return (time.monotonic() - self.created_at) >= self.ttl

    @property
    def age(self) -> float:
        return time.monotonic() - self.created_at

    def require(self, roles: Iterable[Role], action: str) -> None:
        """Raise unless the context is live and holds one of *roles*."""
        if self.is_expired:
            raise SessionExpiredError(f"session for {self.user_id} expired; log in again to {action}")
        allowed = frozenset(roles)
        if self.role not in allowed:
            names = ", ".join(sorted(r.value for r in allowed))
            raise AuthorizationError(f"{self.role.value} may not {action} (requires one of: {names})")

    def auth_headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
