"""Analytics facade: wallet selection, batched performance and the response DTOs."""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from functools import partial
from typing import Callable, Sequence

from wallet_analytics.config import AnalyticsSettings, get_settings
from wallet_analytics.core.telemetry import get_tracer
from wallet_analytics.models import PerformanceResult, Wallet, WalletMovement
from wallet_analytics.schemas import (
    AnalyticSerie,
    LiquidationSeriesRequest,
    PaginationMetadata,
    PerformanceAnalyticsRequest,
    PerformanceAnalyticsResponse,
    WalletListResponse,
    WalletsOverviewRequest,
    WalletSummary,
)
from wallet_analytics.services.aggregator import PortfolioAggregator, round_currency
from wallet_analytics.services.batch import bounded_as_completed
from wallet_analytics.services.currency import (
    CurrencyConverter,
    StaticRateConverter,
    convert_movement,
    convert_result,
    decide_currency_to_show,
)
from wallet_analytics.services.live_quotes import IndexRateProvider, LiveQuoteProvider
from wallet_analytics.services.performance import (
    get_all_equity_performance,
    get_all_private_bond_performance,
    get_all_public_bond_performance,
)
from wallet_analytics.services.repository import AnalyticsRepository
from wallet_analytics.services.series import build_liquidation_serie
from wallet_analytics.services.trend import discover_trend

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

_SORT_FIELDS: dict[str, Callable[[Wallet], object]] = {
    "walletName": lambda wallet: wallet.name,
    "walletCurrencyCode": lambda wallet: wallet.currency_code,
    "walletCreatedAt": lambda wallet: wallet.created_at,
    "walletUpdatedAt": lambda wallet: wallet.updated_at or wallet.created_at,
}
_DEFAULT_SORT_FIELD = "walletCreatedAt"


def _timestamp(moment: datetime | None) -> float:
    return moment.timestamp() if moment else 0.0


def fold_order(result: PerformanceResult) -> tuple[float, float, str]:
    """Key that fixes the order assets are folded into the portfolio."""

    return (_timestamp(result.latest_date_utc), _timestamp(result.start_date_utc), result.id)


@dataclass
class WalletPerformance:
    wallet: Wallet
    private_bonds: list[PerformanceResult] = field(default_factory=list)
    public_bonds: list[PerformanceResult] = field(default_factory=list)
    equity_assets: list[PerformanceResult] = field(default_factory=list)

    def movements(self) -> list[WalletMovement]:
        return sorted(self.wallet.movements, key=lambda movement: movement.date_utc)

    def results(self) -> list[PerformanceResult]:
        return sorted([*self.private_bonds, *self.public_bonds, *self.equity_assets], key=fold_order)


class AnalyticsService:
    """Portfolio analytics over the wallets a repository exposes."""

    def __init__(
        self,
        repository: AnalyticsRepository,
        settings: AnalyticsSettings | None = None,
        converter: CurrencyConverter | None = None,
        quote_provider: LiveQuoteProvider | None = None,
        index_rate_provider: IndexRateProvider | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ):
        self.repository = repository
        self.settings = settings or get_settings()
        self.converter = converter or StaticRateConverter(self.settings.currency_rates)
        self.quote_provider = quote_provider
        self.index_rate_provider = index_rate_provider
        self._clock = clock
        self._tracer = get_tracer(__name__)

    async def select_wallets(self, user_id: str, wallet_ids: Sequence[str]) -> list[Wallet]:
        """Wallets in request order, or the most recently updated one when none is asked for."""

        wallets = await self.repository.list_wallets(user_id)
        if not wallet_ids:
            if not wallets:
                return []
            latest = max(wallets, key=lambda wallet: _timestamp(wallet.updated_at or wallet.created_at))
            return [latest]
        by_id = {wallet.id: wallet for wallet in wallets}
        missing = [wallet_id for wallet_id in wallet_ids if wallet_id not in by_id]
        if missing:
            logger.info("Ignoring wallets not owned by user %s: %s", user_id, ", ".join(missing))
        return [by_id[wallet_id] for wallet_id in dict.fromkeys(wallet_ids) if wallet_id in by_id]

    async def wallet_performance(self, wallet: Wallet, apply_live_valuation: bool = False) -> WalletPerformance:
        """Performance of every asset in ``wallet``, the three asset classes fetched concurrently."""

        now = self._clock() if self._clock else None
        private_bonds, public_bonds, equity_assets = await asyncio.gather(
            get_all_private_bond_performance(
                self.repository,
                wallet.id,
                apply_live_valuation=apply_live_valuation,
                index_rate_provider=self.index_rate_provider,
                now=now,
            ),
            get_all_public_bond_performance(
                self.repository,
                wallet.id,
                apply_live_valuation=apply_live_valuation,
                quote_provider=self.quote_provider,
                now=now,
            ),
            get_all_equity_performance(
                self.repository,
                wallet.id,
                apply_live_valuation=apply_live_valuation,
                quote_provider=self.quote_provider,
                now=now,
            ),
        )
        return WalletPerformance(wallet, private_bonds, public_bonds, equity_assets)

    async def _collect(self, wallets: Sequence[Wallet], apply_live_valuation: bool) -> list[WalletPerformance]:
        factories = [partial(self.wallet_performance, wallet, apply_live_valuation) for wallet in wallets]
        by_wallet: dict[str, WalletPerformance] = {}
        async for item in bounded_as_completed(factories, self.settings.batch_concurrency):
            by_wallet[item.wallet.id] = item  # type: ignore[union-attr]
        # Completion order is arbitrary; restore selection order
        return [by_wallet[wallet.id] for wallet in wallets]

    def _converted(
        self, item: WalletPerformance, currency: str
    ) -> tuple[list[WalletMovement], list[PerformanceResult]]:
        movements = [convert_movement(movement, self.converter, currency) for movement in item.movements()]
        results = [
            convert_result(result, self.converter, item.wallet.currency_code, currency)
            for result in item.results()
        ]
        return movements, results

    async def performance(self, request: PerformanceAnalyticsRequest) -> PerformanceAnalyticsResponse | None:
        with self._tracer.start_as_current_span("analytics.performance") as span:
            wallets = await self.select_wallets(request.user_id, request.wallet_id_list())
            span.set_attribute("analytics.wallet_count", len(wallets))
            if not wallets:
                return None

            currency = decide_currency_to_show(
                [wallet.currency_code for wallet in wallets], request.selected_currency
            )
            aggregator = PortfolioAggregator()
            for item in await self._collect(wallets, request.use_live_price_quote):
                movements, results = self._converted(item, currency)
                aggregator.add_movements(movements)
                aggregator.add_results(results)
            span.set_attribute("analytics.asset_count", aggregator.number_of_assets)

            logger.info(
                "Computed performance of %d assets across %d wallets in %s",
                aggregator.number_of_assets,
                len(wallets),
                currency,
            )
            return PerformanceAnalyticsResponse(
                currency_to_show=currency,
                wallet_ids=[wallet.id for wallet in wallets],
                indicators=aggregator.indicators(),
            )

    async def liquidation_series(self, request: LiquidationSeriesRequest) -> list[AnalyticSerie]:
        with self._tracer.start_as_current_span("analytics.liquidation_series") as span:
            wallets = await self.select_wallets(request.user_id, request.wallet_id_list())
            span.set_attribute("analytics.wallet_count", len(wallets))
            if not wallets:
                return []

            currency = decide_currency_to_show(
                [wallet.currency_code for wallet in wallets], request.selected_currency
            )
            series = []
            asset_count = 0
            for item in await self._collect(wallets, request.use_live_price_quote):
                movements, results = self._converted(item, currency)
                asset_count += len(results)
                series.append(build_liquidation_serie(item.wallet, movements, results))
            span.set_attribute("analytics.asset_count", asset_count)
            return series

    def _summarize(self, item: WalletPerformance) -> WalletSummary:
        wallet = item.wallet
        initial = sum((movement.signed_amount() for movement in wallet.movements), ZERO)
        profit = sum((result.net_amount for result in item.results()), ZERO)
        current = initial + profit
        profit_perc = current / initial - 1 if initial != 0 else ZERO
        trend = discover_trend(
            item.private_bonds,
            item.public_bonds,
            item.equity_assets,
            self.settings.trend_depth,
            self.settings.trend_smooth_avg,
        )
        return WalletSummary(
            id=wallet.id,
            name=wallet.name,
            currency_code=wallet.currency_code,
            trend=trend,
            initial_balance=round_currency(initial),
            current_balance=round_currency(current),
            profit_in_currency=round_currency(profit),
            profit_in_perc=round_currency(profit_perc),
            created_at=wallet.created_at,
            updated_at=wallet.updated_at,
        )

    async def wallets_overview(self, request: WalletsOverviewRequest) -> WalletListResponse:
        with self._tracer.start_as_current_span("analytics.wallets_overview") as span:
            wallets = await self.repository.list_wallets(request.user_id)
            sort_by = request.sort_by or _DEFAULT_SORT_FIELD
            ordered = sorted(
                wallets,
                key=_SORT_FIELDS[sort_by],  # type: ignore[arg-type]
                reverse=request.sort_order == "desc",
            )

            total = len(ordered)
            total_pages = max(math.ceil(total / request.limit), 1)
            offset = (request.page - 1) * request.limit
            page = ordered[offset : offset + request.limit]
            span.set_attribute("analytics.wallet_count", len(page))

            summaries = [self._summarize(item) for item in await self._collect(page, False)]
            return WalletListResponse(
                wallets=summaries,
                metadata=PaginationMetadata(
                    total_count=total,
                    page=request.page,
                    limit=request.limit,
                    total_pages=total_pages,
                    sort_by=sort_by,
                    sort_order=request.sort_order,
                    next_page=request.page + 1 if request.page < total_pages else None,
                    previous_page=request.page - 1 if request.page > 1 else None,
                ),
            )


__all__ = ["AnalyticsService", "WalletPerformance", "fold_order"]
