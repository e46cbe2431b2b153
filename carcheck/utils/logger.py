# carcheck/utils/logger.py
"""
Centralised logging configuration.
Console + rotating file in /logs/carcheck.log. The DVLA API key is masked in
every record, and httpx/httpcore request chatter is kept at WARNING so DVLA
calls are only reported through our own [DVLA] lines.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from carcheck.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs")
LOG_FILE = os.path.join(LOG_DIR, "carcheck.log")

QUIET_LOGGERS = ("httpx", "httpcore", "urllib3", "sqlalchemy.engine")

_configured = False


class SecretMaskFilter(logging.Filter):
    """Replaces configured secrets in the rendered message with ***."""

    def __init__(self, secrets):
        super().__init__()
        self.secrets = [s for s in secrets if s]

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True
        message = record.getMessage()
        for secret in self.secrets:
            message = message.replace(secret, "***")
        record.msg, record.args = message, None
        return True


def _handlers() -> list[logging.Handler]:
    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    mask = SecretMaskFilter([settings.DVLA_API_KEY, settings.API_KEY])

    console = logging.StreamHandler()

    os.makedirs(LOG_DIR, exist_ok=True)
    file_handler = RotatingFileHandler(LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8")

    for handler in (console, file_handler):
        handler.setLevel(LOG_LEVEL)
        handler.setFormatter(fmt)
        handler.addFilter(mask)
    return [console, file_handler]


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    for handler in _handlers():
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Named logger; call once at the top of each module."""
    _configure_root_logger()
    return logging.getLogger(name)
