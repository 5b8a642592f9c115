"""Engine-specific exceptions.

These give semantic meaning to the failures callers are expected to handle,
separating contract violations from malformed data.
"""

from __future__ import annotations

from typing import Any


class AnalyticsError(Exception):
    """Base exception for analytics operations."""


class MalformedTransactionError(AnalyticsError):
    """A transaction record is missing a field its type requires."""

    def __init__(self, record: Any, reason: str):
        self.record = record
        self.reason = reason
        super().__init__(reason)


class SelectorRequiredError(AnalyticsError, ValueError):
    """Neither a wallet id nor an asset id was supplied to a lookup."""

    def __init__(self, wallet_label: str = "walletId", asset_label: str = "assetId"):
        super().__init__(f"Either {wallet_label} or {asset_label} must be provided")


class CurrencyConversionError(AnalyticsError):
    """No conversion rate is known for a currency pair."""

    def __init__(self, from_currency: str, to_currency: str):
        self.from_currency = from_currency
        self.to_currency = to_currency
        super().__init__(f"Conversion rate from {from_currency} to {to_currency} not found.")
