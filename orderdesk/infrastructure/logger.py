"""Logging setup for OrderDesk.

Log files rotate in ``log_dir``: ``<app>.log`` (INFO and up),
``<app>_error.log`` (ERROR and up) and, in debug mode, ``<app>_debug.log``.
"""
import logging
import logging.handlers
import time
from pathlib import Path

from orderdesk.exceptions import ApiError, NetworkError
from orderdesk.infrastructure.app_constants import LOG_DIR
from orderdesk.services.settings_service import SettingsService

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(module)s:%(lineno)d] [%(funcName)s] %(message)s"
SENSITIVE_KEYS = ("password", "key", "salt", "hash", "token", "secret", "authorization")
MASK = "********"

_MB = 1024 * 1024

logger = logging.getLogger(__name__)


def _rotating_handler(path, level, max_bytes, backup_count, formatter):
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(app_name="orderdesk", log_dir=LOG_DIR, debug_mode=False):
    """
    Replace the root logger's handlers with OrderDesk's file and console handlers.

    Args:
        app_name (str): Base name for log files
        log_dir (str): Directory to store log files, created when missing
        debug_mode (bool): Log DEBUG records to a separate file and the console

    Returns:
        logging.Logger: Configured root logger
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug_mode else logging.INFO)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    files = [
        (f"{app_name}.log", logging.INFO, 5 * _MB, 10),
        (f"{app_name}_error.log", logging.ERROR, 5 * _MB, 10),
    ]
    if debug_mode:
        files.append((f"{app_name}_debug.log", logging.DEBUG, 10 * _MB, 5))
    for file_name, level, max_bytes, backup_count in files:
        root_logger.addHandler(
            _rotating_handler(log_path / file_name, level, max_bytes, backup_count, formatter)
        )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if debug_mode else logging.WARNING)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    root_logger.info("Logging to %s (debug=%s)", log_path, debug_mode)
    return root_logger


class ApiOperation:
    """Context manager logging the start and outcome of one backend call.

    Backend rejections are logged as warnings, unreachable backends and
    unexpected failures as errors. Exceptions always propagate.
    """

    def __init__(self, operation_name, logger=None):
        self.operation_name = operation_name
        self.logger = logger or logging.getLogger()
        self.success = False

    def __enter__(self):
        self.logger.debug("Starting API operation: %s", self.operation_name)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.logger.debug("Completed API operation: %s", self.operation_name)
            self.success = True
            return False

        if issubclass(exc_type, ApiError):
            self.logger.warning("Backend rejected %s: %s", self.operation_name, exc_val)
        elif issubclass(exc_type, NetworkError):
            self.logger.error("Network error during %s: %s", self.operation_name, exc_val)
        else:
            self.logger.error(
                "Unexpected error during %s: %s", self.operation_name, exc_val, exc_info=True
            )
        return False


def sanitize_for_logging(data, sensitive_keys=SENSITIVE_KEYS):
    """Return a copy of a request payload with secret-looking values masked.

    Dicts and lists are walked recursively; any key containing one of
    ``sensitive_keys`` (case-insensitive) has its value replaced.
    """
    if isinstance(data, list):
        return [sanitize_for_logging(item, sensitive_keys) for item in data]
    if not isinstance(data, dict):
        return data
    return {
        key: MASK
        if any(marker in str(key).lower() for marker in sensitive_keys)
        else sanitize_for_logging(value, sensitive_keys)
        for key, value in data.items()
    }


def cleanup_old_logs(log_dir=LOG_DIR, max_age_days=1):
    """Delete log files in ``log_dir`` untouched for ``max_age_days``; return how many went."""
    log_path = Path(log_dir)
    if not log_path.is_dir():
        logger.debug("No log directory at %s, nothing to clean", log_path)
        return 0

    cutoff = time.time() - max(1, int(max_age_days)) * 24 * 3600
    removed = 0
    for file_path in log_path.glob("*.log*"):
        if not file_path.is_file() or file_path.stat().st_mtime >= cutoff:
            continue
        try:
            file_path.unlink()
        except OSError as exc:
            logger.warning("Could not remove old log file %s: %s", file_path, exc)
            continue
        removed += 1

    if removed:
        logger.info("Removed %s log files older than %s days", removed, max_age_days)
    return removed


def configure_logging(settings=None):
    """
    Set up logging from the stored (or environment) logging options.

    Args:
        settings: SettingsService to read options from; a fresh one by default

    Returns:
        logging.Logger: Configured root logger
    """
    config = (settings or SettingsService()).log_settings()

    root_logger = setup_logging(log_dir=config.log_dir, debug_mode=config.debug_mode)
    if config.auto_cleanup:
        cleanup_old_logs(config.log_dir, config.cleanup_days)
    root_logger.debug("Logging configuration: %s", config)
    return root_logger
