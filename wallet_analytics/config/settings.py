"""Application configuration and environment helpers."""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_CURRENCY = "BRL"
DEFAULT_BATCH_CONCURRENCY = 10

DEFAULT_CURRENCY_RATES: dict[str, Decimal] = {
    "USD_BRL": Decimal("5.33"),
    "BRL_USD": Decimal("0.19"),
    "USD_EUR": Decimal("0.87"),
    "EUR_USD": Decimal("1.16"),
    "EUR_BRL": Decimal("6.16"),
    "BRL_EUR": Decimal("0.16"),
}


class AnalyticsSettings(BaseSettings):
    """Configuration options for the wallet analytics engine."""

    app_name: str = Field(default="Wallet Analytics")
    default_currency: str = Field(default=DEFAULT_CURRENCY, min_length=3, max_length=3)

    batch_concurrency: int = Field(
        default=DEFAULT_BATCH_CONCURRENCY,
        ge=1,
        description="Maximum number of wallet computations in flight at once.",
    )
    trend_depth: int = Field(default=2, ge=2)
    trend_smooth_avg: int = Field(default=2, ge=1)

    currency_rates: dict[str, Decimal] = Field(
        default_factory=lambda: dict(DEFAULT_CURRENCY_RATES),
        description="Conversion rates keyed by FROM_TO currency pair.",
    )

    log_level: str = Field(default="INFO")

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="wallet-analytics")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_insecure: bool = Field(default=True)
    telemetry_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    class Config:
        env_prefix = "WALLET_ANALYTICS_"
        env_file = ".env"
        env_file_encoding = "utf-8"

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitized dict for logging purposes."""

        hidden = {"telemetry_otlp_endpoint"}
        return {k: ("***" if k in hidden and v else v) for k, v in self.model_dump().items()}


@lru_cache(maxsize=1)
def _cached_settings() -> AnalyticsSettings:
    return AnalyticsSettings()


def get_settings(**overrides: Any) -> AnalyticsSettings:
    """Return cached application settings with optional overrides.

    Overrides build a fresh, uncached instance so tests can tweak single knobs.
    """

    if overrides:
        return AnalyticsSettings(**overrides)
    return _cached_settings()


__all__ = [
    "AnalyticsSettings",
    "DEFAULT_BATCH_CONCURRENCY",
    "DEFAULT_CURRENCY",
    "DEFAULT_CURRENCY_RATES",
    "get_settings",
]
