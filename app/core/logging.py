"""Logging configuration.

``setup_logging`` is called once at startup; modules obtain loggers with
``logging.getLogger(__name__)`` and pass request context through ``extra``.
The ``json`` format renders stdlib records through structlog.
"""

import logging
import sys

import structlog

from app.core.config import LogFormatEnum, Settings

SIMPLE_FORMAT = "%(asctime)s - %(name)s - [%(levelname)s] - %(message)s"


def build_formatter(config: Settings) -> logging.Formatter:
    """Formatter for the configured log format."""
    if config.log_format != LogFormatEnum.json:
        return logging.Formatter(SIMPLE_FORMAT)

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            # user_id, file_id, storage_key... passed through ``extra``
            structlog.stdlib.ExtraAdder(),
            structlog.processors.format_exc_info,
            structlog.processors.EventRenamer("message"),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(default=str),
        ],
    )


def setup_logging(config: Settings) -> None:
    """
    Configures the root logger for the application.
    This function should be called ONLY ONCE at startup.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(config))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(config.log_level.value)

    # Silence noisy libraries
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
