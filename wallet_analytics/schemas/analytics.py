"""Request and response schemas for wallet analytics."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from wallet_analytics.models import TrendDirection

SelectedCurrency = Literal["USD", "BRL", "EUR", "Wallet"]
SerieDataPointType = Literal["movement", "brl_private_bond", "brl_public_bond", "sefbfr"]
WalletSortField = Literal["walletName", "walletCurrencyCode", "walletCreatedAt", "walletUpdatedAt"]


class WalletSelectionRequest(BaseModel):
    """Wallet selector shared by the analytics requests.

    ``wallet_ids`` accepts a single id or a list. When it is missing or empty
    the most recently updated wallet of the user is used.
    """

    user_id: str = Field(..., min_length=1)
    wallet_ids: list[str] | str | None = Field(default=None)
    selected_currency: SelectedCurrency = Field(default="Wallet")
    use_live_price_quote: bool = Field(default=False)

    def wallet_id_list(self) -> list[str]:
        if self.wallet_ids is None:
            return []
        if isinstance(self.wallet_ids, str):
            return [self.wallet_ids]
        return list(self.wallet_ids)


class PerformanceAnalyticsRequest(WalletSelectionRequest):
    pass


class LiquidationSeriesRequest(WalletSelectionRequest):
    pass


class WalletsOverviewRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)
    sort_by: WalletSortField | None = Field(default=None)
    sort_order: Literal["asc", "desc"] = Field(default="desc")


class PortfolioIndicators(BaseModel):
    """Portfolio-wide indicators.

    Currency values are rounded half-up to 2 places and average days to a
    whole number. ``None`` marks an indicator whose denominator was zero.
    """

    resulting_balance_in_currency: Decimal
    resulting_profit_in_currency: Decimal
    resulting_profit_in_perc: Decimal | None = None

    date_start_utc: datetime | None = None
    date_end_utc: datetime | None = None
    asset_date_start_utc: datetime | None = None
    asset_date_end_utc: datetime | None = None
    movement_date_start_utc: datetime | None = None
    movement_date_end_utc: datetime | None = None

    avg_days_by_asset: int | None = None

    number_of_movements: int = 0
    number_of_movements_deposit: int = 0
    number_of_movements_withdrawal: int = 0
    number_of_assets: int = 0
    number_of_assets_profit: int = 0
    number_of_assets_loss: int = 0
    number_of_active_assets: int = 0
    number_of_active_assets_profit: int = 0
    number_of_active_assets_loss: int = 0

    expectancy_by_asset: Decimal | None = None
    expectancy_by_day: Decimal | None = None
    expectancy_by_month: Decimal | None = None
    expectancy_by_quarter: Decimal | None = None
    expectancy_by_year: Decimal | None = None

    avg_cost_by_asset: Decimal | None = None
    avg_cost_by_day: Decimal | None = None
    avg_cost_by_month: Decimal | None = None
    avg_cost_by_quarter: Decimal | None = None
    avg_cost_by_year: Decimal | None = None

    avg_tax_by_asset: Decimal | None = None
    avg_tax_by_day: Decimal | None = None
    avg_tax_by_month: Decimal | None = None
    avg_tax_by_quarter: Decimal | None = None
    avg_tax_by_year: Decimal | None = None

    movements_sum: Decimal = Decimal("0")
    movements_avg: Decimal | None = None
    movements_max: Decimal | None = None
    movements_min: Decimal | None = None

    gross_profit_sum: Decimal = Decimal("0")
    gross_profit_avg: Decimal | None = None
    gross_profit_max: Decimal | None = None
    gross_profit_min: Decimal | None = None
    gross_loss_sum: Decimal = Decimal("0")
    gross_loss_avg: Decimal | None = None
    gross_loss_max: Decimal | None = None
    gross_loss_min: Decimal | None = None

    net_profit_sum: Decimal = Decimal("0")
    net_profit_avg: Decimal | None = None
    net_profit_max: Decimal | None = None
    net_profit_min: Decimal | None = None
    net_loss_sum: Decimal = Decimal("0")
    net_loss_avg: Decimal | None = None
    net_loss_max: Decimal | None = None
    net_loss_min: Decimal | None = None

    sum_costs: Decimal = Decimal("0")
    max_cost: Decimal | None = None
    sum_taxes: Decimal = Decimal("0")
    max_tax: Decimal | None = None

    breakeven: Decimal | None = None
    edge: Decimal | None = None

    history_highest_balance: Decimal | None = None
    history_lowest_balance: Decimal | None = None
    history_highest_net: Decimal | None = None
    history_lowest_net: Decimal | None = None


class PerformanceAnalyticsResponse(BaseModel):
    currency_to_show: str
    wallet_ids: list[str]
    indicators: PortfolioIndicators


class AnalyticSerieDataPoint(BaseModel):
    type: SerieDataPointType
    date_utc: datetime
    input_amount: Decimal = Decimal("0")
    gross_amount: Decimal = Decimal("0")
    net_amount: Decimal = Decimal("0")
    costs_and_taxes: Decimal = Decimal("0")
    days_running: int = 0


class AnalyticSerie(BaseModel):
    wallet_id: str
    wallet_name: str
    data_points: list[AnalyticSerieDataPoint] = Field(default_factory=list)


class WalletSummary(BaseModel):
    id: str
    name: str
    currency_code: str
    trend: TrendDirection
    initial_balance: Decimal
    current_balance: Decimal
    profit_in_currency: Decimal
    profit_in_perc: Decimal
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PaginationMetadata(BaseModel):
    total_count: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
    sort_by: str | None = None
    sort_order: Literal["asc", "desc"] | None = None
    next_page: int | None = None
    previous_page: int | None = None

    @field_validator("next_page", "previous_page")
    @classmethod
    def _pages_are_positive(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            raise ValueError("Page references must be at least 1")
        return value


class WalletListResponse(BaseModel):
    wallets: list[WalletSummary]
    metadata: PaginationMetadata


__all__ = [
    "AnalyticSerie",
    "AnalyticSerieDataPoint",
    "LiquidationSeriesRequest",
    "PaginationMetadata",
    "PerformanceAnalyticsRequest",
    "PerformanceAnalyticsResponse",
    "PortfolioIndicators",
    "WalletListResponse",
    "WalletSelectionRequest",
    "WalletSummary",
    "WalletsOverviewRequest",
]
