"""Application settings service built on QSettings."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from PyQt5.QtCore import QSettings

from orderdesk.exceptions import SettingsError
from orderdesk.infrastructure.app_constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_API_TIMEOUT_SEC,
    LOG_DIR,
    SETTINGS_APP,
    SETTINGS_ORG,
)

API_URL_ENV = "ORDERDESK_API_URL"
DEBUG_ENV = "ORDERDESK_DEBUG"
LOG_DIR_ENV = "ORDERDESK_LOG_DIR"
ORDER_DRAFT_KEY = "orders/draft"


@dataclass(frozen=True)
class ApiSettings:
    base_url: str
    timeout_sec: float


@dataclass(frozen=True)
class LogSettings:
    debug_mode: bool
    log_dir: str
    auto_cleanup: bool
    cleanup_days: int


class SettingsService:
    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._settings = QSettings(SETTINGS_ORG, SETTINGS_APP)
        self._logger = logger or logging.getLogger(__name__)

    # --- Backend -------------------------------------------------------
    def api_settings(self) -> ApiSettings:
        """Return the backend address; the environment overrides stored settings."""
        base_url = os.environ.get(API_URL_ENV) or self._settings.value(
            "api/base_url", DEFAULT_API_BASE_URL, type=str
        )
        raw_timeout = self._settings.value("api/timeout_sec", DEFAULT_API_TIMEOUT_SEC)
        try:
            timeout = float(raw_timeout)
        except (TypeError, ValueError):
            timeout = float(DEFAULT_API_TIMEOUT_SEC)
        return ApiSettings(base_url=str(base_url).strip() or DEFAULT_API_BASE_URL,
                           timeout_sec=max(1.0, timeout))

    def save_api_settings(self, base_url: str, timeout_sec: float) -> None:
        if not (base_url or "").strip():
            raise SettingsError("Backend URL cannot be empty")
        self._settings.setValue("api/base_url", base_url.strip())
        self._settings.setValue("api/timeout_sec", float(timeout_sec))
        self._settings.sync()

    # --- Logging -------------------------------------------------------
    def log_settings(self) -> LogSettings:
        """Return logging options; ``ORDERDESK_DEBUG`` and ``ORDERDESK_LOG_DIR`` win over stored values."""
        if DEBUG_ENV in os.environ:
            debug_mode = os.environ[DEBUG_ENV].strip().lower() in ("true", "1", "yes")
        else:
            debug_mode = self._settings.value("logging/debug_mode", False, type=bool)
        log_dir = os.environ.get(LOG_DIR_ENV) or self._settings.value(
            "logging/log_dir", LOG_DIR, type=str
        )
        cleanup_days = self._settings.value("logging/cleanup_days", 1, type=int)
        return LogSettings(
            debug_mode=bool(debug_mode),
            log_dir=str(log_dir),
            auto_cleanup=bool(self._settings.value("logging/auto_cleanup", False, type=bool)),
            cleanup_days=min(max(int(cleanup_days or 1), 1), 365),
        )

    # --- Order draft ---------------------------------------------------
    def load_order_draft(self) -> Optional[Mapping[str, Any]]:
        raw = self._settings.value(ORDER_DRAFT_KEY)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as exc:
            self._logger.warning("Discarding unreadable order draft: %s", exc)
            self._settings.remove(ORDER_DRAFT_KEY)
            return None
        return data if isinstance(data, dict) else None

    def save_order_draft(self, draft: Mapping[str, Any]) -> None:
        self._settings.setValue(ORDER_DRAFT_KEY, json.dumps(draft))
        self._settings.sync()

    def clear_order_draft(self) -> None:
        self._settings.remove(ORDER_DRAFT_KEY)
        self._settings.sync()

    # --- Convenience ---------------------------------------------------
    def get(self, key: str, default=None, *, type=None):
        if type is None:
            return self._settings.value(key, defaultValue=default)
        return self._settings.value(key, defaultValue=default, type=type)

    def set(self, key: str, value) -> None:
        self._settings.setValue(key, value)
        self._settings.sync()

    def raw(self) -> QSettings:
        return self._settings
