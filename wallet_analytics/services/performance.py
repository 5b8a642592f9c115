"""Per-asset performance reducers.

Each reducer consumes one asset's transaction records in ascending date order
and produces a single :class:`PerformanceResult`. Records that cannot be
parsed into an event are logged and skipped; they never abort the asset or
the batch it belongs to.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable

from wallet_analytics.core.exceptions import MalformedTransactionError, SelectorRequiredError
from wallet_analytics.models import AssetClass, EquityAsset, PerformanceResult, PrivateBond, PublicBond
from wallet_analytics.models.transactions import (
    BOND_TRANSACTION_TYPES,
    EQUITY_TRANSACTION_TYPES,
    Buy,
    Dividend,
    Sell,
    TransactionRecord,
    TransactionType,
    parse_transaction,
)
from wallet_analytics.services.cost_basis import RunningCostState, advance
from wallet_analytics.services.live_quotes import (
    AverageCostQuoteProvider,
    IndexRateProvider,
    LiveQuoteProvider,
    ZeroIndexRateProvider,
)
from wallet_analytics.services.repository import AnalyticsRepository

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass
class _Totals:
    input_amount: Decimal = ZERO
    gross_amount: Decimal = ZERO
    costs: Decimal = ZERO
    taxes: Decimal = ZERO
    start_date_utc: datetime | None = None
    latest_date_utc: datetime | None = None

    def track_date(self, moment: datetime) -> None:
        if self.start_date_utc is None or moment < self.start_date_utc:
            self.start_date_utc = moment
        if self.latest_date_utc is None or moment > self.latest_date_utc:
            self.latest_date_utc = moment


def _now_for(reference: datetime, now: datetime | None) -> datetime:
    if now is not None:
        return now
    if reference.tzinfo is None:
        return datetime.now(timezone.utc).replace(tzinfo=None)
    return datetime.now(timezone.utc)


def days_running(
    is_done: bool,
    start_date_utc: datetime | None,
    latest_date_utc: datetime | None,
    apply_live_valuation: bool,
    now: datetime | None = None,
) -> int:
    """Whole days an asset has been running.

    Done assets count from start to exit; open assets count from their latest
    date until ``now`` only when a live valuation was requested. Partial days
    are dropped, so the count rounds down.
    """

    if is_done:
        if start_date_utc is None or latest_date_utc is None:
            return 0
        return (latest_date_utc - start_date_utc).days
    if apply_live_valuation and latest_date_utc is not None:
        return (_now_for(latest_date_utc, now) - latest_date_utc).days
    return 0


def _fold_records(
    asset_id: str,
    records: Iterable[TransactionRecord],
    allowed_types: frozenset[TransactionType],
) -> tuple[RunningCostState, _Totals]:
    state = RunningCostState()
    totals = _Totals()
    for record in sorted(records, key=lambda r: r.date_utc):
        try:
            event = parse_transaction(record, allowed_types)
        except MalformedTransactionError as exc:
            logger.warning(
                "Skipping %s transaction of asset %s at %s: %s",
                record.type.value,
                asset_id,
                record.date_utc.isoformat(),
                exc.reason,
            )
            continue

        state = advance(state, event)
        if isinstance(event, Buy):
            totals.input_amount += abs(event.shares * event.price)
        elif isinstance(event, Sell):
            totals.gross_amount += abs(event.shares * event.price)
        elif isinstance(event, Dividend):
            totals.gross_amount += event.value
        totals.costs += record.costs or ZERO
        totals.taxes += record.taxes or ZERO
        totals.track_date(record.date_utc)
    return state, totals


def _compute_traded_asset(
    asset: EquityAsset | PublicBond,
    asset_class: AssetClass,
    records: Iterable[TransactionRecord],
    allowed_types: frozenset[TransactionType],
    apply_live_valuation: bool,
    quote_provider: LiveQuoteProvider | None,
    now: datetime | None,
) -> PerformanceResult:
    state, totals = _fold_records(asset.id, records, allowed_types)
    is_done = asset.is_done

    gross = totals.gross_amount
    if apply_live_valuation and not is_done and state.shares_outstanding != 0:
        provider = quote_provider or AverageCostQuoteProvider()
        quote = provider.latest_quote(asset, state.average_price)
        gross += state.shares_outstanding * (quote - state.average_price)

    return PerformanceResult(
        id=asset.id,
        name=asset.name,
        asset_class=asset_class,
        is_done=is_done,
        start_date_utc=totals.start_date_utc,
        latest_date_utc=totals.latest_date_utc,
        input_amount=totals.input_amount,
        gross_amount=gross,
        costs=totals.costs,
        taxes=totals.taxes,
        net_amount=gross + totals.costs + totals.taxes,
        days_running=days_running(
            is_done,
            totals.start_date_utc,
            totals.latest_date_utc,
            apply_live_valuation,
            now,
        ),
    )


def compute_equity_performance(
    asset: EquityAsset,
    records: Iterable[TransactionRecord],
    apply_live_valuation: bool = False,
    *,
    quote_provider: LiveQuoteProvider | None = None,
    now: datetime | None = None,
) -> PerformanceResult:
    """Reduce an equity-like asset's transactions to its performance."""

    return _compute_traded_asset(
        asset,
        AssetClass.SEFBFR,
        records,
        EQUITY_TRANSACTION_TYPES,
        apply_live_valuation,
        quote_provider,
        now,
    )


def compute_public_bond_performance(
    bond: PublicBond,
    records: Iterable[TransactionRecord],
    apply_live_valuation: bool = False,
    *,
    quote_provider: LiveQuoteProvider | None = None,
    now: datetime | None = None,
) -> PerformanceResult:
    """Reduce a public bond's buy/sell records; other types are skipped."""

    return _compute_traded_asset(
        bond,
        AssetClass.BRL_PUBLIC_BOND,
        records,
        BOND_TRANSACTION_TYPES,
        apply_live_valuation,
        quote_provider,
        now,
    )


def compute_private_bond_performance(
    bond: PrivateBond,
    apply_live_valuation: bool = False,
    *,
    index_rate_provider: IndexRateProvider | None = None,
    now: datetime | None = None,
) -> PerformanceResult:
    """Performance of a private bond from the figures stored on the bond.

    Done bonds report their terminal gross amount. Active bonds are only
    valued when a live valuation is requested, by accruing the provider's
    index rate over the input amount.
    """

    costs = bond.fees or ZERO
    taxes = bond.taxes or ZERO
    latest = bond.exit_date_utc or bond.enter_date_utc

    if bond.is_done:
        gross = bond.gross_amount or ZERO
    elif apply_live_valuation:
        provider = index_rate_provider or ZeroIndexRateProvider()
        gross = bond.input_amount * (1 + provider.current_rate(bond))
    else:
        gross = ZERO

    return PerformanceResult(
        id=bond.id,
        name=bond.name,
        asset_class=AssetClass.BRL_PRIVATE_BOND,
        is_done=bond.is_done,
        start_date_utc=bond.enter_date_utc,
        latest_date_utc=latest,
        input_amount=bond.input_amount,
        gross_amount=gross,
        costs=costs,
        taxes=taxes,
        net_amount=gross + costs + taxes,
        days_running=days_running(
            bond.is_done, bond.enter_date_utc, latest, apply_live_valuation, now
        ),
    )


async def get_all_equity_performance(
    repository: AnalyticsRepository,
    wallet_id: str | None = None,
    asset_id: str | None = None,
    *,
    apply_live_valuation: bool = False,
    quote_provider: LiveQuoteProvider | None = None,
    now: datetime | None = None,
) -> list[PerformanceResult]:
    if wallet_id is None and asset_id is None:
        raise SelectorRequiredError("walletId", "assetId")
    holdings = await repository.list_equity_assets(wallet_id, asset_id)
    return [
        compute_equity_performance(
            holding.asset,
            holding.transactions,
            apply_live_valuation,
            quote_provider=quote_provider,
            now=now,
        )
        for holding in holdings
    ]


async def get_all_public_bond_performance(
    repository: AnalyticsRepository,
    wallet_id: str | None = None,
    bond_id: str | None = None,
    *,
    apply_live_valuation: bool = False,
    quote_provider: LiveQuoteProvider | None = None,
    now: datetime | None = None,
) -> list[PerformanceResult]:
    if wallet_id is None and bond_id is None:
        raise SelectorRequiredError("walletId", "bondId")
    holdings = await repository.list_public_bonds(wallet_id, bond_id)
    return [
        compute_public_bond_performance(
            holding.asset,
            holding.transactions,
            apply_live_valuation,
            quote_provider=quote_provider,
            now=now,
        )
        for holding in holdings
    ]


async def get_all_private_bond_performance(
    repository: AnalyticsRepository,
    wallet_id: str | None = None,
    bond_id: str | None = None,
    *,
    apply_live_valuation: bool = False,
    index_rate_provider: IndexRateProvider | None = None,
    now: datetime | None = None,
) -> list[PerformanceResult]:
    if wallet_id is None and bond_id is None:
        raise SelectorRequiredError("walletId", "bondId")
    bonds = await repository.list_private_bonds(wallet_id, bond_id)
    return [
        compute_private_bond_performance(
            bond,
            apply_live_valuation,
            index_rate_provider=index_rate_provider,
            now=now,
        )
        for bond in bonds
    ]


__all__ = [
    "compute_equity_performance",
    "compute_private_bond_performance",
    "compute_public_bond_performance",
    "days_running",
    "get_all_equity_performance",
    "get_all_private_bond_performance",
    "get_all_public_bond_performance",
]
