"""Application bootstrap utilities for OrderDesk."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from orderdesk.infrastructure.app_constants import APP_TITLE
from orderdesk.infrastructure.logger import configure_logging
from orderdesk.infrastructure.product_cache import ProductCacheController
from orderdesk.services.api_client import BackendApiClient
from orderdesk.services.backend_repository import ApiBackendRepository
from orderdesk.services.settings_service import SettingsService


@dataclass
class ApplicationContext:
    """Aggregate of resources created during application bootstrap."""

    logger: logging.Logger
    settings: SettingsService
    client: BackendApiClient
    cache: ProductCacheController
    repository: ApiBackendRepository


class ApplicationBuilder:
    """Coordinate logging, settings and backend wiring."""

    def __init__(
        self,
        *,
        logging_factory: Callable[[SettingsService], logging.Logger] = configure_logging,
        settings_factory: Callable[[], SettingsService] = SettingsService,
        warm_cache: bool = True,
    ) -> None:
        self._logging_factory = logging_factory
        self._settings_factory = settings_factory
        self._warm_cache = warm_cache

    def build(self) -> ApplicationContext:
        settings = self._settings_factory()
        logger = self._logging_factory(settings)
        logger.info("Starting %s", APP_TITLE)

        api = settings.api_settings()
        logger.info("Using backend %s (timeout %ss)", api.base_url, api.timeout_sec)

        client = BackendApiClient(api.base_url, timeout=api.timeout_sec)
        cache = ProductCacheController()
        repository = ApiBackendRepository(client, cache)
        if self._warm_cache:
            repository.warm_cache()

        return ApplicationContext(
            logger=logger,
            settings=settings,
            client=client,
            cache=cache,
            repository=repository,
        )


def bootstrap(builder: Optional[ApplicationBuilder] = None) -> ApplicationContext:
    """Convenience entry point used by front-ends embedding OrderDesk."""
    return (builder or ApplicationBuilder()).build()
