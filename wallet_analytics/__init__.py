"""Asset performance and portfolio analytics for investment wallets."""

from wallet_analytics.config import AnalyticsSettings, get_settings
from wallet_analytics.core.exceptions import (
    AnalyticsError,
    CurrencyConversionError,
    MalformedTransactionError,
    SelectorRequiredError,
)
from wallet_analytics.models import PerformanceResult, TransactionRecord, TransactionType, TrendDirection
from wallet_analytics.services.analytics import AnalyticsService
from wallet_analytics.services.repository import InMemoryRepository
from wallet_analytics.main import create_service

__all__ = [
    "AnalyticsError",
    "AnalyticsService",
    "AnalyticsSettings",
    "CurrencyConversionError",
    "InMemoryRepository",
    "MalformedTransactionError",
    "PerformanceResult",
    "SelectorRequiredError",
    "TransactionRecord",
    "TransactionType",
    "TrendDirection",
    "create_service",
    "get_settings",
]
