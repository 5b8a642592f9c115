"""Per-wallet liquidation series for charting."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Iterable, Sequence

from wallet_analytics.models import PerformanceResult, Wallet, WalletMovement
from wallet_analytics.schemas import AnalyticSerie, AnalyticSerieDataPoint
from wallet_analytics.services.aggregator import round_currency

ZERO = Decimal("0")
MOVEMENT_POINT = "movement"


@dataclass
class _PointTotals:
    input_amount: Decimal = ZERO
    gross_amount: Decimal = ZERO
    net_amount: Decimal = ZERO
    costs_and_taxes: Decimal = ZERO
    days_running: int = 0


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def build_liquidation_serie(
    wallet: Wallet,
    movements: Iterable[WalletMovement],
    results: Sequence[PerformanceResult],
) -> AnalyticSerie:
    """Group a wallet's cash flows and realized results by calendar date.

    Movements contribute their signed amount as input. Only done assets
    contribute, keyed by asset class and the date they were closed.
    """

    points: dict[tuple[str, date], _PointTotals] = {}

    for movement in movements:
        totals = points.setdefault((MOVEMENT_POINT, movement.date_utc.date()), _PointTotals())
        totals.input_amount += movement.signed_amount()

    for result in results:
        if not result.is_done or result.latest_date_utc is None:
            continue
        key = (result.asset_class.value, result.latest_date_utc.date())
        totals = points.setdefault(key, _PointTotals())
        totals.gross_amount += result.gross_amount
        totals.net_amount += result.net_amount
        totals.costs_and_taxes += result.costs_and_taxes
        totals.days_running += result.days_running

    data_points = [
        AnalyticSerieDataPoint(
            type=point_type,
            date_utc=_day_start(day),
            input_amount=round_currency(totals.input_amount),
            gross_amount=round_currency(totals.gross_amount),
            net_amount=round_currency(totals.net_amount),
            costs_and_taxes=round_currency(totals.costs_and_taxes),
            days_running=totals.days_running,
        )
        for (point_type, day), totals in points.items()
    ]
    data_points.sort(key=lambda point: point.date_utc)
    return AnalyticSerie(wallet_id=wallet.id, wallet_name=wallet.name, data_points=data_points)


__all__ = ["build_liquidation_serie"]
