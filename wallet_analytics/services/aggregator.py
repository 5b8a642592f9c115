"""Portfolio-wide indicators folded from movements and asset results.

The aggregator is a plain accumulator: feed it every wallet movement and
every :class:`PerformanceResult` and read :meth:`PortfolioAggregator.indicators`
at the end. All sums stay at full precision; rounding happens only when the
indicators are built.

Most indicators are order independent. The history high/low values are not:
they sample the running balance after each asset, so callers must feed
assets in a fixed order to get reproducible figures.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from wallet_analytics.models import MovementType, PerformanceResult, WalletMovement
from wallet_analytics.schemas import PortfolioIndicators

ZERO = Decimal("0")
CENT = Decimal("0.01")
SECONDS_PER_DAY = Decimal(86400)
DAYS_PER_YEAR = Decimal("365.2425")
DAYS_PER_MONTH = DAYS_PER_YEAR / 12
MONTHS_PER_QUARTER = Decimal(3)


def round_currency(value: Decimal | None) -> Decimal | None:
    if value is None:
        return None
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _round_days(value: Decimal | None) -> int | None:
    if value is None:
        return None
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _pick_date(current: datetime | None, candidate: datetime | None, *, earliest: bool) -> datetime | None:
    if current is None:
        return candidate
    if candidate is None:
        return current
    if earliest:
        return min(current, candidate)
    return max(current, candidate)


def _pick(current: Decimal | None, candidate: Decimal | None, *, lowest: bool) -> Decimal | None:
    if current is None:
        return candidate
    if candidate is None:
        return current
    if lowest:
        return min(current, candidate)
    return max(current, candidate)


def _ratio(numerator: Decimal, denominator: Decimal | int) -> Decimal | None:
    if denominator <= 0:
        return None
    return numerator / denominator


def days_between(start: datetime, end: datetime) -> Decimal:
    """Fractional days from ``start`` to ``end``."""

    delta = end - start
    seconds = Decimal(delta.days) * SECONDS_PER_DAY + Decimal(delta.seconds)
    seconds += Decimal(delta.microseconds) / Decimal(1_000_000)
    return seconds / SECONDS_PER_DAY


@dataclass
class Bucket:
    """Sum and extrema of one side (profit or loss) of an amount."""

    sum: Decimal = ZERO
    count: int = 0
    max: Decimal | None = None
    min: Decimal | None = None

    def add(self, value: Decimal, *, losses: bool) -> None:
        self.sum += value
        self.count += 1
        # For losses "max" is the deepest loss, i.e. the lowest value
        self.max = _pick(self.max, value, lowest=losses)
        self.min = _pick(self.min, value, lowest=not losses)

    @property
    def avg(self) -> Decimal | None:
        return _ratio(self.sum, self.count)


class PortfolioAggregator:
    """Accumulates movements and asset results into portfolio indicators."""

    def __init__(self) -> None:
        self.movements_sum = ZERO
        self.movements_max: Decimal | None = None
        self.movements_min: Decimal | None = None
        self.number_of_movements = 0
        self.number_of_movements_deposit = 0
        self.number_of_movements_withdrawal = 0
        self.movement_date_start: datetime | None = None
        self.movement_date_end: datetime | None = None

        self.asset_date_start: datetime | None = None
        self.asset_date_end: datetime | None = None
        self.number_of_assets = 0
        self.number_of_assets_profit = 0
        self.number_of_assets_loss = 0
        self.number_of_active_assets = 0
        self.number_of_active_assets_profit = 0
        self.number_of_active_assets_loss = 0
        self.sum_days_by_asset = ZERO

        self.gross_profits = Bucket()
        self.gross_losses = Bucket()
        self.net_profits = Bucket()
        self.net_losses = Bucket()
        self.costs_sum = ZERO
        self.costs_max: Decimal | None = None
        self.taxes_sum = ZERO
        self.taxes_max: Decimal | None = None

        self.history_highest_balance: Decimal | None = None
        self.history_lowest_balance: Decimal | None = None
        self.history_highest_net: Decimal | None = None
        self.history_lowest_net: Decimal | None = None

    @property
    def net_result(self) -> Decimal:
        return self.net_profits.sum + self.net_losses.sum

    def add_movement(self, movement: WalletMovement) -> None:
        amount = movement.signed_amount()
        self.movement_date_start = _pick_date(self.movement_date_start, movement.date_utc, earliest=True)
        self.movement_date_end = _pick_date(self.movement_date_end, movement.date_utc, earliest=False)

        self.movements_sum += amount
        # Extremes start from zero: max is a deposit or 0, min a withdrawal or 0
        self.movements_max = max(self.movements_max if self.movements_max is not None else ZERO, amount)
        self.movements_min = min(self.movements_min if self.movements_min is not None else ZERO, amount)

        self.number_of_movements += 1
        if movement.movement_type == MovementType.DEPOSIT:
            self.number_of_movements_deposit += 1
        elif movement.movement_type == MovementType.WITHDRAW:
            self.number_of_movements_withdrawal += 1

    def add_movements(self, movements: Iterable[WalletMovement]) -> None:
        for movement in movements:
            self.add_movement(movement)

    def add_result(self, result: PerformanceResult) -> None:
        self.asset_date_start = _pick_date(self.asset_date_start, result.start_date_utc, earliest=True)
        self.asset_date_end = _pick_date(self.asset_date_end, result.latest_date_utc, earliest=False)

        if result.net_amount > 0:
            self.number_of_assets_profit += 1
            if not result.is_done:
                self.number_of_active_assets_profit += 1
        elif result.net_amount < 0:
            self.number_of_assets_loss += 1
            if not result.is_done:
                self.number_of_active_assets_loss += 1

        if result.is_done:
            self.sum_days_by_asset += result.days_running
        else:
            self.number_of_active_assets += 1

        if result.gross_amount > 0:
            self.gross_profits.add(result.gross_amount, losses=False)
        elif result.gross_amount < 0:
            self.gross_losses.add(result.gross_amount, losses=True)
        if result.net_amount > 0:
            self.net_profits.add(result.net_amount, losses=False)
        elif result.net_amount < 0:
            self.net_losses.add(result.net_amount, losses=True)

        self.costs_sum += result.costs
        self.taxes_sum += result.taxes
        self.costs_max = _pick(self.costs_max, result.costs, lowest=True)
        self.taxes_max = _pick(self.taxes_max, result.taxes, lowest=True)

        net = self.net_result
        balance = self.movements_sum + net
        self.history_highest_balance = _pick(self.history_highest_balance, balance, lowest=False)
        self.history_lowest_balance = _pick(self.history_lowest_balance, balance, lowest=True)
        self.history_highest_net = _pick(self.history_highest_net, net, lowest=False)
        self.history_lowest_net = _pick(self.history_lowest_net, net, lowest=True)

        self.number_of_assets += 1

    def add_results(self, results: Iterable[PerformanceResult]) -> None:
        for result in results:
            self.add_result(result)

    @property
    def breakeven(self) -> Decimal | None:
        """Share of winning assets needed to break even given the average win and loss."""

        avg_profit = self.net_profits.avg
        avg_loss = self.net_losses.avg
        if avg_profit is None or avg_loss is None:
            return None
        return abs(avg_loss) / (avg_profit + abs(avg_loss))

    @property
    def edge(self) -> Decimal | None:
        breakeven = self.breakeven
        if breakeven is None or self.number_of_assets == 0:
            return None
        return Decimal(self.number_of_assets_profit) / self.number_of_assets - breakeven

    def _asset_range_days(self) -> Decimal:
        if self.asset_date_start is None or self.asset_date_end is None:
            return ZERO
        return days_between(self.asset_date_start, self.asset_date_end)

    def indicators(self) -> PortfolioIndicators:
        net = self.net_result
        days = self._asset_range_days()
        months = days / DAYS_PER_MONTH
        quarters = months / MONTHS_PER_QUARTER
        years = days / DAYS_PER_YEAR
        assets = self.number_of_assets

        def per_period(total: Decimal) -> dict[str, Decimal | None]:
            return {
                "asset": round_currency(_ratio(total, assets)),
                "day": round_currency(_ratio(total, days)),
                "month": round_currency(_ratio(total, months)),
                "quarter": round_currency(_ratio(total, quarters)),
                "year": round_currency(_ratio(total, years)),
            }

        expectancy = per_period(net)
        avg_cost = per_period(self.costs_sum)
        avg_tax = per_period(self.taxes_sum)

        return PortfolioIndicators(
            resulting_balance_in_currency=round_currency(self.movements_sum + net),
            resulting_profit_in_currency=round_currency(net),
            resulting_profit_in_perc=round_currency(net / self.movements_sum) if self.movements_sum > 0 else None,
            date_start_utc=_pick_date(self.asset_date_start, self.movement_date_start, earliest=True),
            date_end_utc=_pick_date(self.asset_date_end, self.movement_date_end, earliest=False),
            asset_date_start_utc=self.asset_date_start,
            asset_date_end_utc=self.asset_date_end,
            movement_date_start_utc=self.movement_date_start,
            movement_date_end_utc=self.movement_date_end,
            avg_days_by_asset=_round_days(_ratio(self.sum_days_by_asset, assets)),
            number_of_movements=self.number_of_movements,
            number_of_movements_deposit=self.number_of_movements_deposit,
            number_of_movements_withdrawal=self.number_of_movements_withdrawal,
            number_of_assets=assets,
            number_of_assets_profit=self.number_of_assets_profit,
            number_of_assets_loss=self.number_of_assets_loss,
            number_of_active_assets=self.number_of_active_assets,
            number_of_active_assets_profit=self.number_of_active_assets_profit,
            number_of_active_assets_loss=self.number_of_active_assets_loss,
            expectancy_by_asset=expectancy["asset"],
            expectancy_by_day=expectancy["day"],
            expectancy_by_month=expectancy["month"],
            expectancy_by_quarter=expectancy["quarter"],
            expectancy_by_year=expectancy["year"],
            avg_cost_by_asset=avg_cost["asset"],
            avg_cost_by_day=avg_cost["day"],
            avg_cost_by_month=avg_cost["month"],
            avg_cost_by_quarter=avg_cost["quarter"],
            avg_cost_by_year=avg_cost["year"],
            avg_tax_by_asset=avg_tax["asset"],
            avg_tax_by_day=avg_tax["day"],
            avg_tax_by_month=avg_tax["month"],
            avg_tax_by_quarter=avg_tax["quarter"],
            avg_tax_by_year=avg_tax["year"],
            movements_sum=round_currency(self.movements_sum),
            movements_avg=round_currency(_ratio(self.movements_sum, self.number_of_movements)),
            movements_max=round_currency(self.movements_max),
            movements_min=round_currency(self.movements_min),
            gross_profit_sum=round_currency(self.gross_profits.sum),
            gross_profit_avg=round_currency(self.gross_profits.avg),
            gross_profit_max=round_currency(self.gross_profits.max),
            gross_profit_min=round_currency(self.gross_profits.min),
            gross_loss_sum=round_currency(self.gross_losses.sum),
            gross_loss_avg=round_currency(self.gross_losses.avg),
            gross_loss_max=round_currency(self.gross_losses.max),
            gross_loss_min=round_currency(self.gross_losses.min),
            net_profit_sum=round_currency(self.net_profits.sum),
            net_profit_avg=round_currency(self.net_profits.avg),
            net_profit_max=round_currency(self.net_profits.max),
            net_profit_min=round_currency(self.net_profits.min),
            net_loss_sum=round_currency(self.net_losses.sum),
            net_loss_avg=round_currency(self.net_losses.avg),
            net_loss_max=round_currency(self.net_losses.max),
            net_loss_min=round_currency(self.net_losses.min),
            sum_costs=round_currency(self.costs_sum),
            max_cost=round_currency(self.costs_max),
            sum_taxes=round_currency(self.taxes_sum),
            max_tax=round_currency(self.taxes_max),
            breakeven=round_currency(self.breakeven),
            edge=round_currency(self.edge),
            history_highest_balance=round_currency(self.history_highest_balance),
            history_lowest_balance=round_currency(self.history_lowest_balance),
            history_highest_net=round_currency(self.history_highest_net),
            history_lowest_net=round_currency(self.history_lowest_net),
        )


__all__ = ["Bucket", "PortfolioAggregator", "days_between", "round_currency"]
