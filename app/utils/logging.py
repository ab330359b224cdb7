"""structlog configuration shared by the whole service."""

from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog


def setup_logging(level: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
    """Route structlog through stdlib logging with a single stream handler.

    Falls back to the values in ``app.config.settings`` when arguments are
    omitted.
    """
    if level is None or json_logs is None:
        from app.config import settings

        level = level or settings.log_level
        json_logs = settings.log_json if json_logs is None else json_logs

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
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
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(level.upper())

    # Keep uvicorn's access log readable next to ours
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
