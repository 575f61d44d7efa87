"""Logging for processes that embed the app runtime.

The runtime logs two ways: managers and sessions call loguru directly, while
the execution, service and translation modules use
``logging.getLogger(__name__)``.  ``setup_logging`` routes the stdlib side
into loguru so an embedding UI process sees one stream.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from collections.abc import Iterable

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Client libraries used by the generation service and the S3 store.
NOISY_LOGGERS = ("httpx", "httpcore", "botocore", "boto3", "urllib3", "s3transfer")


class _InterceptHandler(logging.Handler):
    """Forward stdlib records to loguru, keeping the original call-site."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(
    level: str = "INFO",
    *,
    sink: Any = sys.stderr,
    serialize: bool = False,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Make loguru the only sink for runtime and library logs.

    *sink* is anything ``logger.add`` accepts (stream, path, callable);
    ``serialize=True`` writes one JSON object per record.  Loggers named in
    *quiet* are capped at WARNING.
    """
    level = level.upper()

    logger.remove()
    logger.add(sink, level=level, format=LOG_FORMAT, serialize=serialize)

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info("Logging initialised (level={}, serialize={})", level, serialize)
