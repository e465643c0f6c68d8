from __future__ import annotations

from datetime import timedelta

import pytest

from fuelquota.config import FuelQuotaConfig
from fuelquota.exceptions import ConfigError


def test_defaults() -> None:
    config = FuelQuotaConfig()

    assert config.store_timeout == 5.0
    assert config.max_dispense_liters == 1000.0
    assert config.quota_period == timedelta(days=7)
    assert config.api_trace_enabled is False


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FUELQUOTA_BASE_URL", "https://quota.example.lk/api/")
    monkeypatch.setenv("FUELQUOTA_STORE_TIMEOUT", "2.5")
    monkeypatch.setenv("FUELQUOTA_QUOTA_PERIOD_DAYS", "14")
    monkeypatch.setenv("FUELQUOTA_API_TRACE_ENABLED", "yes")

    config = FuelQuotaConfig.from_env()

    assert config.base_url == "https://quota.example.lk/api"
    assert config.store_timeout == 2.5
    assert config.quota_period_days == 14
    assert config.api_trace_enabled is True


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FUELQUOTA_REQUEST_TIMEOUT", "30")

    config = FuelQuotaConfig.from_env(request_timeout=3.0, api_trace_enabled=False)

    assert config.request_timeout == 3.0
    assert config.api_trace_enabled is False


def test_non_numeric_env_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FUELQUOTA_MAX_DISPENSE_LITERS", "plenty")

    with pytest.raises(ConfigError, match="FUELQUOTA_MAX_DISPENSE_LITERS"):
        FuelQuotaConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [{"store_timeout": 0}, {"request_timeout": -1}, {"quota_period_days": 0}, {"max_dispense_liters": 0}],
)
def test_rejects_non_positive_values(kwargs: dict[str, float]) -> None:
    with pytest.raises(ConfigError):
        FuelQuotaConfig(**kwargs)  # type: ignore[arg-type]
