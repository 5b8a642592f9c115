"""Per-asset performance snapshot shared by every asset class."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, Literal

from .assets import AssetClass

ZERO = Decimal("0")


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class PerformanceResult:
    """Realized and (placeholder) unrealized figures for one asset.

    ``costs`` and ``taxes`` are non-positive, so
    ``net_amount == gross_amount + costs + taxes`` always holds.
    ``latest_date_utc`` is the exit date for done assets, otherwise the most
    recent transaction date.
    """

    id: str
    name: str
    asset_class: AssetClass
    is_done: bool
    start_date_utc: datetime | None
    latest_date_utc: datetime | None
    input_amount: Decimal = ZERO
    gross_amount: Decimal = ZERO
    costs: Decimal = ZERO
    taxes: Decimal = ZERO
    net_amount: Decimal = ZERO
    days_running: int = 0

    @property
    def costs_and_taxes(self) -> Decimal:
        return self.costs + self.taxes


def _latest_timestamp(result: PerformanceResult) -> float:
    return result.latest_date_utc.timestamp() if result.latest_date_utc else 0.0


def sort_by_latest_date(
    results: Iterable[PerformanceResult],
    order: Literal["asc", "desc"] = "asc",
) -> list[PerformanceResult]:
    """Order results by latest date; results without a date count as oldest."""

    return sorted(results, key=_latest_timestamp, reverse=order == "desc")


__all__ = ["PerformanceResult", "TrendDirection", "sort_by_latest_date"]
