"""Wallet trend from the most recent dated net amounts."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Sequence

from wallet_analytics.models import PerformanceResult, TrendDirection, sort_by_latest_date

ZERO = Decimal("0")


def _collect_tail(
    results: Sequence[PerformanceResult],
    grouped: dict[date, Decimal],
    limit: int,
    *,
    done_only: bool = False,
) -> None:
    taken = 0
    for result in reversed(sort_by_latest_date(results)):
        if taken >= limit:
            break
        if result.latest_date_utc is None or (done_only and not result.is_done):
            continue
        key = result.latest_date_utc.date()
        grouped[key] = grouped.get(key, ZERO) + result.net_amount
        taken += 1


def moving_average(values: Sequence[Decimal], window: int) -> list[Decimal]:
    return [
        sum(values[start : start + window], ZERO) / window
        for start in range(len(values) - window + 1)
    ]


def discover_trend(
    private_bonds: Sequence[PerformanceResult],
    public_bonds: Sequence[PerformanceResult],
    equity_assets: Sequence[PerformanceResult],
    depth: int = 2,
    smooth_avg: int = 2,
) -> TrendDirection:
    """Classify a wallet's recent trajectory.

    Up to ``depth + smooth_avg - 1`` of the most recent results of each asset
    class are grouped by calendar date, smoothed with a moving average of
    ``smooth_avg`` values, and the last ``depth`` averages are walked as a
    running sum. The direction of the final step wins. Private bonds only
    count once they are done, since an open bond has no realized net amount.

    Returns ``UNKNOWN`` when fewer than ``depth + smooth_avg - 1`` distinct
    dates are available.
    """

    if depth < 2:
        raise ValueError("Depth must be at least 2 to discover a trend")
    if smooth_avg < 1:
        raise ValueError("Average must be at least 1 to discover a trend")

    min_values = depth + smooth_avg - 1
    grouped: dict[date, Decimal] = {}
    _collect_tail(private_bonds, grouped, min_values, done_only=True)
    _collect_tail(public_bonds, grouped, min_values)
    _collect_tail(equity_assets, grouped, min_values)

    if len(grouped) < min_values:
        return TrendDirection.UNKNOWN

    averages = moving_average([grouped[day] for day in sorted(grouped)], smooth_avg)[-depth:]

    trend = TrendDirection.UNKNOWN
    current: Decimal | None = None
    for value in averages:
        if current is None:
            current = value
            continue
        previous, current = current, current + value
        if current > previous:
            trend = TrendDirection.UP
        elif current < previous:
            trend = TrendDirection.DOWN
        else:
            trend = TrendDirection.STABLE
    return trend


__all__ = ["TrendDirection", "discover_trend", "moving_average"]
