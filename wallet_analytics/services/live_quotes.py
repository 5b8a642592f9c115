"""Pluggable live valuation sources.

No market data service is wired in yet: the default providers mark open
positions at their own average cost and assume a zero index rate, so live
valuation adds nothing until a real provider is injected.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol

from wallet_analytics.models import EquityAsset, PrivateBond, PublicBond


class LiveQuoteProvider(Protocol):
    """Current unit price for an open equity or public bond position."""

    def latest_quote(self, asset: EquityAsset | PublicBond, average_price: Decimal) -> Decimal:
        ...


class IndexRateProvider(Protocol):
    """Accrued index rate for an active private bond, as a fraction."""

    def current_rate(self, bond: PrivateBond) -> Decimal:
        ...


class AverageCostQuoteProvider:
    """Placeholder quote source returning the position's average price."""

    def latest_quote(self, asset: EquityAsset | PublicBond, average_price: Decimal) -> Decimal:
        return average_price


class StaticQuoteProvider:
    """Fixed quotes keyed by asset id; falls back to the average price."""

    def __init__(self, quotes: dict[str, Decimal | str]):
        self._quotes = {asset_id: Decimal(str(q)) for asset_id, q in quotes.items()}

    def latest_quote(self, asset: EquityAsset | PublicBond, average_price: Decimal) -> Decimal:
        return self._quotes.get(asset.id, average_price)


class ZeroIndexRateProvider:
    """Placeholder index source: active bonds are valued at their input amount."""

    def current_rate(self, bond: PrivateBond) -> Decimal:
        return Decimal("0")


__all__ = [
    "AverageCostQuoteProvider",
    "IndexRateProvider",
    "LiveQuoteProvider",
    "StaticQuoteProvider",
    "ZeroIndexRateProvider",
]
