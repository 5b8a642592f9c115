from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from conftest import USER_ID
from wallet_analytics.config import get_settings
from wallet_analytics.main import create_service
from wallet_analytics.models import TrendDirection
from wallet_analytics.schemas import (
    LiquidationSeriesRequest,
    PerformanceAnalyticsRequest,
    WalletsOverviewRequest,
)
from wallet_analytics.services.analytics import AnalyticsService
from wallet_analytics.services.repository import InMemoryRepository


def _at(month: int, day: int) -> datetime:
    return datetime(2024, month, day, tzinfo=timezone.utc)


def build_service(repository, **overrides) -> AnalyticsService:
    return AnalyticsService(repository, get_settings(batch_concurrency=2, **overrides))


async def test_performance_defaults_to_latest_wallet(sample_repository):
    response = await build_service(sample_repository).performance(PerformanceAnalyticsRequest(user_id=USER_ID))

    assert response is not None
    assert response.wallet_ids == ["w-main"]
    assert response.currency_to_show == "BRL"
    indicators = response.indicators
    assert indicators.movements_sum == Decimal("9000.00")
    assert indicators.number_of_assets == 4
    assert indicators.number_of_assets_profit == 2
    assert indicators.number_of_assets_loss == 1
    assert indicators.number_of_active_assets == 1
    assert indicators.net_profit_sum == Decimal("3085.00")
    assert indicators.net_loss_sum == Decimal("-2.00")
    assert indicators.resulting_profit_in_currency == Decimal("3083.00")
    assert indicators.resulting_balance_in_currency == Decimal("12083.00")
    assert indicators.resulting_profit_in_perc == Decimal("0.34")
    assert indicators.expectancy_by_asset == Decimal("770.75")
    assert indicators.expectancy_by_day == Decimal("32.11")
    assert indicators.avg_days_by_asset == 39
    assert indicators.breakeven == Decimal("0.00")
    assert indicators.edge == Decimal("0.50")
    assert indicators.history_highest_balance == Decimal("12083.00")
    assert indicators.history_lowest_balance == Decimal("10193.00")
    assert indicators.history_lowest_net == Decimal("1193.00")
    assert indicators.date_start_utc == _at(1, 2)
    assert indicators.date_end_utc == _at(5, 1)


async def test_performance_keeps_requested_wallet_order(sample_repository):
    request = PerformanceAnalyticsRequest(user_id=USER_ID, wallet_ids=["w-old", "w-main", "w-unknown"])
    response = await build_service(sample_repository).performance(request)
    assert response.wallet_ids == ["w-old", "w-main"]
    assert response.indicators.movements_sum == Decimal("9500.00")
    assert response.indicators.history_lowest_balance == Decimal("10693.00")


async def test_performance_in_selected_currency(sample_repository):
    request = PerformanceAnalyticsRequest(user_id=USER_ID, wallet_ids="w-main", selected_currency="USD")
    response = await build_service(sample_repository).performance(request)
    assert response.currency_to_show == "USD"
    assert response.indicators.resulting_profit_in_currency == Decimal("585.77")
    assert response.indicators.movements_sum == Decimal("1710.00")


async def test_performance_without_wallets_returns_none():
    service = build_service(InMemoryRepository())
    assert await service.performance(PerformanceAnalyticsRequest(user_id=USER_ID)) is None


async def test_liquidation_series(sample_repository):
    request = LiquidationSeriesRequest(user_id=USER_ID, wallet_ids=["w-main"])
    series = await build_service(sample_repository).liquidation_series(request)

    assert len(series) == 1
    points = series[0].data_points
    assert [(point.type, point.date_utc.date().isoformat()) for point in points] == [
        ("movement", "2024-01-02"),
        ("sefbfr", "2024-03-10"),
        ("sefbfr", "2024-03-20"),
        ("brl_private_bond", "2024-04-01"),
        ("movement", "2024-05-01"),
    ]
    assert points[-1].input_amount == Decimal("-1000.00")
    assert points[3].net_amount == Decimal("1890.00")
    assert points[3].days_running == 60


async def test_wallets_overview(sample_repository):
    overview = await build_service(sample_repository).wallets_overview(WalletsOverviewRequest(user_id=USER_ID))

    assert [wallet.id for wallet in overview.wallets] == ["w-main", "w-old"]
    main, old = overview.wallets
    assert main.initial_balance == Decimal("9000.00")
    assert main.profit_in_currency == Decimal("3083.00")
    assert main.current_balance == Decimal("12083.00")
    assert main.profit_in_perc == Decimal("0.34")
    assert main.trend == TrendDirection.UP
    assert old.profit_in_perc == Decimal("0.00")
    assert old.trend == TrendDirection.UNKNOWN
    assert overview.metadata.total_count == 2
    assert overview.metadata.total_pages == 1
    assert overview.metadata.next_page is None


async def test_wallets_overview_pagination(sample_repository):
    request = WalletsOverviewRequest(user_id=USER_ID, page=2, limit=1, sort_by="walletName", sort_order="asc")
    overview = await build_service(sample_repository).wallets_overview(request)
    assert [wallet.name for wallet in overview.wallets] == ["Old"]
    assert overview.metadata.previous_page == 1
    assert overview.metadata.next_page is None
    assert overview.metadata.total_pages == 2


@pytest.mark.parametrize("fields", [{"page": 0}, {"limit": 0}, {"limit": 101}, {"sort_by": "balance"}])
def test_overview_request_validation(fields):
    with pytest.raises(ValidationError):
        WalletsOverviewRequest(user_id=USER_ID, **fields)


async def test_create_service_configures_process(sample_repository):
    service = create_service(sample_repository, get_settings(log_level="debug"))
    assert isinstance(service, AnalyticsService)
    response = await service.performance(PerformanceAnalyticsRequest(user_id=USER_ID))
    assert response.wallet_ids == ["w-main"]
