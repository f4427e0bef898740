# rockwatch/utils/logger.py
"""
Logging setup shared by every module.
Console plus two rotating files under LOG_DIR:
  rockwatch.log  everything at LOG_LEVEL
  alerts.log     alert lifecycle only (pipeline, dispatcher, channels, alert rows)
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from rockwatch.config import get_settings

_settings = get_settings()
LOG_LEVEL = _settings.LOG_LEVEL.upper()
LOG_DIR = _settings.LOG_DIR or os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs"
)

ALERT_LOGGERS = (
    "rockwatch.services.risk_pipeline",
    "rockwatch.services.notification_dispatcher",
    "rockwatch.services.notification_channels",
    "rockwatch.services.persistence_gateway",
)

# Third-party loggers that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore")

_configured = False


class AlertLifecycleFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.name.startswith(ALERT_LOGGERS)


def _rotating(filename: str, fmt: logging.Formatter) -> RotatingFileHandler:
    # 10 × 5MB per file
    handler = RotatingFileHandler(
        filename=os.path.join(LOG_DIR, filename),
        maxBytes=5 * 1024 * 1024,
        backupCount=10,
        encoding="utf-8",
    )
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(fmt)
    return handler


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True
    os.makedirs(LOG_DIR, exist_ok=True)

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setLevel(LOG_LEVEL)
    console.setFormatter(fmt)

    alerts = _rotating("alerts.log", fmt)
    alerts.addFilter(AlertLifecycleFilter())

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    root.addHandler(console)
    root.addHandler(_rotating("rockwatch.log", fmt))
    root.addHandler(alerts)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, logging.getLevelName(LOG_LEVEL)))


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    _configure_root_logger()
    return logging.getLogger(name)
