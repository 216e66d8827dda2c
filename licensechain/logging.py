#!/usr/bin/env python3
"""
Structured logging for the licensechain SDK.

SDK loggers wrap stdlib loggers under ``licensechain``, which carries only a
NullHandler, so nothing is written until the application configures logging
or calls ``setup_logging()``. Values under secret-looking keys are masked
before any renderer sees them.
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.typing import EventDict, Processor

from .config import get_settings

SECRET_KEYS = frozenset(
    {"api_key", "authorization", "password", "secret", "token", "refresh_token", "signature"}
)
MASK = "***"

ROOT_LOGGER_NAME = "licensechain"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def add_log_level(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add log level to event dict."""
    if method_name in ("debug", "info", "warning", "error", "critical"):
        event_dict["level"] = method_name.upper()
    return event_dict


def redact_secrets(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask credential values passed as log fields."""
    for key in event_dict:
        if key.lower() in SECRET_KEYS and event_dict[key] is not None:
            event_dict[key] = MASK
    return event_dict


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Route SDK events to stderr.

    Args:
        level: Minimum level; defaults to LICENSECHAIN_LOG_LEVEL
        log_format: ``console`` or ``json``; defaults to LICENSECHAIN_LOG_FORMAT
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()
    log_format = (log_format or settings.log_format).lower()

    sdk_logger = logging.getLogger(ROOT_LOGGER_NAME)
    sdk_logger.setLevel(getattr(logging, level))
    if not any(type(h) is logging.StreamHandler for h in sdk_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        sdk_logger.addHandler(handler)

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        add_log_level,
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        processors += [
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors += [
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = ROOT_LOGGER_NAME) -> structlog.stdlib.BoundLogger:
    """Get a logger bound to ``name`` (use ``__name__`` in SDK modules).

    Events always go through the stdlib logger of that name; processors come
    from the structlog configuration at the time of the call.
    """
    return structlog.wrap_logger(
        logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger
    )
