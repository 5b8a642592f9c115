from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from wallet_analytics.models import AssetClass, MovementType, PerformanceResult, WalletMovement
from wallet_analytics.services.aggregator import PortfolioAggregator, days_between, round_currency


def _at(month: int, day: int) -> datetime:
    return datetime(2024, month, day, tzinfo=timezone.utc)


def _result(
    asset_id: str,
    net: str,
    *,
    gross: str | None = None,
    costs: str = "0",
    taxes: str = "0",
    is_done: bool = True,
    start: datetime | None = None,
    latest: datetime | None = None,
    days: int = 0,
) -> PerformanceResult:
    return PerformanceResult(
        id=asset_id,
        name=asset_id,
        asset_class=AssetClass.SEFBFR,
        is_done=is_done,
        start_date_utc=start,
        latest_date_utc=latest,
        gross_amount=Decimal(gross if gross is not None else net),
        costs=Decimal(costs),
        taxes=Decimal(taxes),
        net_amount=Decimal(net),
        days_running=days,
    )


def build_movements() -> list[WalletMovement]:
    return [
        WalletMovement("m-1", "w-1", MovementType.DEPOSIT, _at(1, 1), Decimal("1000")),
        WalletMovement("m-2", "w-1", MovementType.WITHDRAW, _at(2, 1), Decimal("200")),
        WalletMovement("m-3", "w-1", MovementType.DEPOSIT, _at(3, 1), Decimal("500")),
    ]


def test_movement_statistics():
    aggregator = PortfolioAggregator()
    aggregator.add_movements(build_movements())
    indicators = aggregator.indicators()
    assert indicators.movements_sum == Decimal("1300.00")
    assert indicators.movements_max == Decimal("1000.00")
    assert indicators.movements_min == Decimal("-200.00")
    assert indicators.movements_avg == Decimal("433.33")
    assert indicators.number_of_movements == 3
    assert indicators.number_of_movements_deposit == 2
    assert indicators.number_of_movements_withdrawal == 1
    assert indicators.movement_date_start_utc == _at(1, 1)
    assert indicators.movement_date_end_utc == _at(3, 1)
    assert indicators.resulting_balance_in_currency == Decimal("1300.00")


def test_movements_alone_leave_history_empty():
    aggregator = PortfolioAggregator()
    aggregator.add_movements(build_movements())
    indicators = aggregator.indicators()
    assert indicators.history_highest_balance is None
    assert indicators.history_lowest_balance is None
    assert indicators.history_lowest_net is None

    aggregator.add_result(_result("a", "100"))
    assert aggregator.indicators().history_highest_balance == Decimal("1400.00")


def test_deposit_only_movements_have_zero_minimum():
    aggregator = PortfolioAggregator()
    aggregator.add_movement(build_movements()[0])
    assert aggregator.indicators().movements_min == Decimal("0.00")


def test_breakeven_and_edge_undefined_without_losses():
    aggregator = PortfolioAggregator()
    aggregator.add_results([_result("a", "100"), _result("b", "50")])
    indicators = aggregator.indicators()
    assert indicators.breakeven is None
    assert indicators.edge is None
    assert indicators.net_loss_avg is None
    assert indicators.net_profit_avg == Decimal("75.00")


def test_empty_portfolio_leaves_ratios_undefined():
    indicators = PortfolioAggregator().indicators()
    assert indicators.number_of_assets == 0
    assert indicators.expectancy_by_asset is None
    assert indicators.expectancy_by_day is None
    assert indicators.avg_days_by_asset is None
    assert indicators.resulting_profit_in_perc is None
    assert indicators.history_highest_balance is None
    assert indicators.breakeven is None


def test_profit_and_loss_buckets():
    aggregator = PortfolioAggregator()
    aggregator.add_movements(build_movements())
    aggregator.add_results(
        [
            _result("win-1", "300", costs="-10", start=_at(1, 1), latest=_at(1, 31), days=30),
            _result("loss-1", "-100", costs="-5", taxes="-1", start=_at(1, 10), latest=_at(2, 9), days=30),
            _result("win-2", "100", start=_at(2, 1), latest=_at(3, 2), days=30),
            _result("loss-2", "-300", is_done=False, start=_at(3, 1), latest=_at(4, 10)),
            _result("flat", "0", is_done=False, start=_at(4, 1), latest=_at(4, 10)),
        ]
    )
    indicators = aggregator.indicators()

    assert indicators.number_of_assets == 5
    assert indicators.number_of_assets_profit == 2
    assert indicators.number_of_assets_loss == 2
    assert indicators.number_of_active_assets == 2
    assert indicators.number_of_active_assets_loss == 1
    assert indicators.number_of_active_assets_profit == 0

    assert indicators.net_profit_sum == Decimal("400.00")
    assert indicators.net_profit_max == Decimal("300.00")
    assert indicators.net_profit_min == Decimal("100.00")
    assert indicators.net_loss_sum == Decimal("-400.00")
    # loss "max" is the deepest loss
    assert indicators.net_loss_max == Decimal("-300.00")
    assert indicators.net_loss_min == Decimal("-100.00")
    assert indicators.gross_loss_max == Decimal("-300.00")

    assert indicators.sum_costs == Decimal("-15.00")
    assert indicators.max_cost == Decimal("-10.00")
    assert indicators.sum_taxes == Decimal("-1.00")

    # avg profit 200, avg loss -200
    assert indicators.breakeven == Decimal("0.50")
    assert indicators.edge == Decimal("-0.10")

    assert indicators.resulting_profit_in_currency == Decimal("0.00")
    assert indicators.resulting_balance_in_currency == Decimal("1300.00")
    assert indicators.resulting_profit_in_perc == Decimal("0.00")
    assert indicators.expectancy_by_asset == Decimal("0.00")
    assert indicators.avg_cost_by_asset == Decimal("-3.00")
    assert indicators.avg_days_by_asset == 18

    assert indicators.asset_date_start_utc == _at(1, 1)
    assert indicators.asset_date_end_utc == _at(4, 10)
    assert indicators.date_start_utc == _at(1, 1)
    assert indicators.date_end_utc == _at(4, 10)


def test_history_follows_fold_order():
    aggregator = PortfolioAggregator()
    aggregator.add_movements(build_movements())
    aggregator.add_results([_result("a", "300"), _result("b", "-500"), _result("c", "100")])
    indicators = aggregator.indicators()
    assert indicators.history_highest_balance == Decimal("1600.00")
    assert indicators.history_lowest_balance == Decimal("1100.00")
    assert indicators.history_highest_net == Decimal("300.00")
    assert indicators.history_lowest_net == Decimal("-200.00")

    reordered = PortfolioAggregator()
    reordered.add_movements(build_movements())
    reordered.add_results([_result("b", "-500"), _result("a", "300"), _result("c", "100")])
    assert reordered.indicators().history_lowest_net == Decimal("-500.00")
    assert reordered.indicators().resulting_profit_in_currency == indicators.resulting_profit_in_currency


def test_expectancy_per_time_unit():
    aggregator = PortfolioAggregator()
    aggregator.add_results(
        [_result("a", "365.2425", start=datetime(2023, 1, 1, tzinfo=timezone.utc), latest=datetime(2024, 1, 1, tzinfo=timezone.utc))]
    )
    indicators = aggregator.indicators()
    assert indicators.expectancy_by_day == Decimal("1.00")
    assert indicators.expectancy_by_year == round_currency(Decimal("365.2425") / (Decimal(365) / Decimal("365.2425")))


def test_rounding_is_half_up():
    assert round_currency(Decimal("2.345")) == Decimal("2.35")
    assert round_currency(Decimal("-2.345")) == Decimal("-2.35")
    assert round_currency(None) is None


def test_days_between_is_fractional():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    end = datetime(2024, 1, 2, 12, tzinfo=timezone.utc)
    assert days_between(start, end) == Decimal("1.5")
