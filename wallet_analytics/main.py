"""Engine entrypoint wiring settings, logging and telemetry around the service."""

from __future__ import annotations

import logging

from wallet_analytics.config import AnalyticsSettings, get_settings
from wallet_analytics.core.logging import setup_logging
from wallet_analytics.core.telemetry import setup_telemetry
from wallet_analytics.services.analytics import AnalyticsService
from wallet_analytics.services.repository import AnalyticsRepository

logger = logging.getLogger(__name__)


def create_service(
    repository: AnalyticsRepository,
    settings: AnalyticsSettings | None = None,
) -> AnalyticsService:
    """Configure the process once and return an :class:`AnalyticsService`."""

    settings = settings or get_settings()
    setup_logging(settings.log_level.upper())
    setup_telemetry(settings)
    logger.info("Starting %s with %s", settings.app_name, settings.dict_for_logging())
    return AnalyticsService(repository, settings)


__all__ = ["create_service"]
