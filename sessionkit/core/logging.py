from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog

FILE_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logging(log_level: str = "INFO", debug: bool = False) -> None:
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

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
            structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    # Request lines are noisy next to the structured events.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


class RaisingFileHandler(logging.FileHandler):
    """FileHandler that lets write errors reach the caller instead of printing them."""

    def handleError(self, record: logging.LogRecord) -> None:
        _, exc, _ = sys.exc_info()
        if exc is not None:
            raise exc


def setup_file_logger(
    name: str,
    app_log_path: str,
    error_log_path: str,
    fmt: str = FILE_LOG_FORMAT,
) -> logging.Logger:
    """Plain-text file logger: every record goes to app_log_path, errors also to error_log_path.

    The logger does not propagate, so its lines never reach the structlog stdout stream.
    Write failures raise OSError from the logging call. Calling it again for the same
    name replaces the previous handlers.
    """
    file_logger = logging.getLogger(name)
    for handler in list(file_logger.handlers):
        file_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt)
    for path, level in ((app_log_path, logging.DEBUG), (error_log_path, logging.ERROR)):
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        handler = RaisingFileHandler(path, encoding="utf-8")
        handler.setLevel(level)
        handler.setFormatter(formatter)
        file_logger.addHandler(handler)

    file_logger.setLevel(logging.DEBUG)
    file_logger.propagate = False
    return file_logger
