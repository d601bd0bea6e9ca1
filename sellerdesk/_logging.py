from __future__ import annotations

import logging
import sys

from sellerdesk._config import Settings

logger = logging.getLogger(__name__)


def setup_logging(level: str | None = None, format_string: str | None = None) -> None:
    """
    Configure the root logger with a single stdout handler.

    Explicit arguments win over SELLERDESK_LOG_LEVEL / SELLERDESK_LOG_FORMAT.
    """
    settings = Settings.from_env()
    log_level = level or settings.log_level
    log_format = format_string or settings.log_format

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter(log_format))
    root_logger.addHandler(stream_handler)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logger.info("Logging configured at %s", log_level.upper())


__all__ = ("setup_logging",)
