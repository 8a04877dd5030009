"""
Structured Logging

DESIGN DECISION: Every module logs through structlog with the same processor
chain, so log lines from the engine, the validator and the callers can be
correlated by key instead of parsed from free text.

The settlement engine only ever logs. Logging never changes a result and a
logging failure never stops a computation.
"""

import logging
from typing import Optional

import structlog

from giftwise.config import LoggingSettings, get_settings


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Configure structlog and the stdlib "giftwise" logger.
    
    Safe to call more than once; the last call wins.
    """
    settings = settings or get_settings().logging
    
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.json_output
        else structlog.dev.ConsoleRenderer()
    )
    
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    
    root = logging.getLogger("giftwise")
    root.setLevel(settings.level)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger bound to a module name."""
    return structlog.get_logger(name)


configure_logging()
