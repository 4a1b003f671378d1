import logging
import sys
from pathlib import Path
from typing import Any

import structlog

from offsetpanel.config import get_config

# Raised to WARNING; the API client logs its own requests
_QUIET_LOGGERS = ("httpx", "httpcore", "multipart")


def configure_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Configure structlog and route stdlib logging through it.

    ``level`` and ``json_logs`` default to ``LOG_LEVEL`` and ``JSON_LOGS``.
    """
    config = get_config()
    level = (level or config.log_level).upper()
    if json_logs is None:
        json_logs = config.log_format == "json"

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        # Keep Persian text unescaped
        renderer: Any = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    log_file = Path("logs/offsetpanel.log")
    if log_file.parent.exists():
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(format="%(message)s", handlers=handlers, level=level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
