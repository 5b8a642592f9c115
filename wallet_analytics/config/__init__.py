"""Configuration package for the wallet analytics engine."""

from .settings import AnalyticsSettings, get_settings

__all__ = ["AnalyticsSettings", "get_settings"]
