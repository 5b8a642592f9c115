"""Pydantic schemas for analytics requests and responses."""

from .analytics import (
    AnalyticSerie,
    AnalyticSerieDataPoint,
    LiquidationSeriesRequest,
    PaginationMetadata,
    PerformanceAnalyticsRequest,
    PerformanceAnalyticsResponse,
    PortfolioIndicators,
    WalletListResponse,
    WalletsOverviewRequest,
    WalletSummary,
)

__all__ = [
    "AnalyticSerie",
    "AnalyticSerieDataPoint",
    "LiquidationSeriesRequest",
    "PaginationMetadata",
    "PerformanceAnalyticsRequest",
    "PerformanceAnalyticsResponse",
    "PortfolioIndicators",
    "WalletListResponse",
    "WalletSummary",
    "WalletsOverviewRequest",
]
