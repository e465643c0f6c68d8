"""Client and ledger configuration for fuelquota."""

from __future__ import annotations

import dataclasses
import os
from datetime import timedelta
from typing import Any

from fuelquota._constants import BASE_URL, DEFAULT_MAX_DISPENSE_LITERS, DEFAULT_QUOTA_PERIOD_DAYS
from fuelquota.exceptions import ConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigError(f"{env_key} must be numeric, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class FuelQuotaConfig:
    """Client and ledger configuration.

    Parameters
    ----------
    base_url : str
        Backend API base URL (without trailing slash).
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    store_timeout : float
        Timeout in seconds for a transaction/distribution store call.
        Expiry is surfaced as an error, never retried.
    quota_period_days : int
        Length of a quota cycle.  Records older than this are reset by
        :meth:`fuelquota.ledger.quota.QuotaLedger.reset_due`.
    max_dispense_liters : float
        Largest amount accepted for a single dispense.
    api_trace_enabled : bool
        Log redacted request/response bodies at DEBUG level.
    """

    base_url: str = BASE_URL
    request_timeout: float = 10.0
    store_timeout: float = 5.0
    quota_period_days: int = DEFAULT_QUOTA_PERIOD_DAYS
    max_dispense_liters: float = DEFAULT_MAX_DISPENSE_LITERS
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        if self.request_timeout <= 0 or self.store_timeout <= 0:
            raise ConfigError("timeouts must be positive")
        if self.quota_period_days <= 0:
            raise ConfigError("quota_period_days must be positive")
        if self.max_dispense_liters <= 0:
            raise ConfigError("max_dispense_liters must be positive")

    @property
    def quota_period(self) -> timedelta:
        return timedelta(days=self.quota_period_days)

    @classmethod
    def from_env(cls, **overrides: Any) -> FuelQuotaConfig:
        """Create configuration from ``FUELQUOTA_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        base_url = env.get("FUELQUOTA_BASE_URL")
        if base_url is not None:
            config_kwargs["base_url"] = base_url.rstrip("/")

        _ENV_FLOAT_MAP = {
            "FUELQUOTA_REQUEST_TIMEOUT": "request_timeout",
            "FUELQUOTA_STORE_TIMEOUT": "store_timeout",
            "FUELQUOTA_MAX_DISPENSE_LITERS": "max_dispense_liters",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        period_env = env.get("FUELQUOTA_QUOTA_PERIOD_DAYS")
        if period_env is not None and "quota_period_days" not in overrides:
            config_kwargs["quota_period_days"] = int(_env_float("FUELQUOTA_QUOTA_PERIOD_DAYS", period_env))

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(env.get("FUELQUOTA_API_TRACE_ENABLED"), False)

        config_kwargs.update(overrides)
        return cls(**config_kwargs)
