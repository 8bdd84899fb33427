"""
Logging configuration for the application.
"""
from __future__ import annotations

import logging
import sys

from gifcapture.infrastructure.config import LoggingSettings

HANDLER_NAME = "gifcapture"


def setup_logging(settings: LoggingSettings | None = None) -> logging.Handler:
    """Install the stdout handler on the root logger.

    A repeated call replaces the handler installed by the previous one.
    """
    settings = settings or LoggingSettings()
    log_level = getattr(logging, settings.level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(logging.Formatter(fmt=settings.format, datefmt=settings.date_format))

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        if existing.get_name() == HANDLER_NAME:
            root_logger.removeHandler(existing)
    root_logger.setLevel(log_level)
    root_logger.addHandler(handler)

    for name in settings.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
