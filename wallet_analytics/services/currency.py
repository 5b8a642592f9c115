"""Currency conversion for displayed analytics."""

from __future__ import annotations

from collections import Counter
from dataclasses import replace
from decimal import Decimal
from typing import Mapping, Protocol, Sequence

from wallet_analytics.config import get_settings
from wallet_analytics.core.exceptions import CurrencyConversionError
from wallet_analytics.models import PerformanceResult, WalletMovement

WALLET_CURRENCY = "Wallet"
FALLBACK_CURRENCY = "BRL"


class CurrencyConverter(Protocol):
    def convert(self, amount: Decimal, from_currency: str, to_currency: str) -> Decimal:
        ...


class StaticRateConverter:
    """Converter backed by a fixed ``"FROM_TO" -> rate`` table.

    Defaults to the configured ``currency_rates``. Rates are placeholders
    until a rate provider is wired in.
    """

    def __init__(self, rates: Mapping[str, Decimal | str] | None = None):
        source = rates if rates is not None else get_settings().currency_rates
        self._rates = {key.upper(): Decimal(str(rate)) for key, rate in source.items()}

    def convert(self, amount: Decimal, from_currency: str, to_currency: str) -> Decimal:
        if from_currency == to_currency:
            return amount
        rate = self._rates.get(f"{from_currency}_{to_currency}".upper())
        if rate is None:
            raise CurrencyConversionError(from_currency, to_currency)
        return amount * rate


def decide_currency_to_show(wallet_currencies: Sequence[str], selected_currency: str) -> str:
    """Currency the analytics are displayed in.

    ``"Wallet"`` picks the currency most wallets use (the first one seen wins
    ties) and falls back to BRL when there are no wallets. Anything else is
    returned unchanged.
    """

    if selected_currency != WALLET_CURRENCY:
        return selected_currency
    if not wallet_currencies:
        return FALLBACK_CURRENCY
    counts = Counter(wallet_currencies)
    best = wallet_currencies[0]
    for currency in counts:
        if counts[currency] > counts[best]:
            best = currency
    return best


def convert_result(
    result: PerformanceResult,
    converter: CurrencyConverter,
    from_currency: str,
    to_currency: str,
) -> PerformanceResult:
    if from_currency == to_currency:
        return result

    def convert(amount: Decimal) -> Decimal:
        return converter.convert(amount, from_currency, to_currency)

    return replace(
        result,
        input_amount=convert(result.input_amount),
        gross_amount=convert(result.gross_amount),
        costs=convert(result.costs),
        taxes=convert(result.taxes),
        net_amount=convert(result.net_amount),
    )


def convert_movement(
    movement: WalletMovement,
    converter: CurrencyConverter,
    to_currency: str,
) -> WalletMovement:
    if movement.result_currency_code == to_currency:
        return movement
    return replace(
        movement,
        result_amount=converter.convert(movement.result_amount, movement.result_currency_code, to_currency),
        result_currency_code=to_currency,
    )


__all__ = [
    "CurrencyConverter",
    "StaticRateConverter",
    "WALLET_CURRENCY",
    "convert_movement",
    "convert_result",
    "decide_currency_to_show",
]
