from __future__ import annotations

import logging

from sessionkit.core.exceptions import ServerError, ValidationError
from sessionkit.core.logging import get_logger, setup_file_logger
from sessionkit.schemas.enums import LogLevel
from sessionkit.schemas.requests import ClientLogRequest

logger = get_logger(__name__)

CLIENT_LOGGER_NAME = "sessionkit.client"

# "<client timestamp> [WARN] <message> sessionId=<id>"
CLIENT_LINE_FORMAT = "%(client_timestamp)s [%(client_level)s] %(message)s"


class ClientLogSink:
    """Persists log records shipped by browser/desktop clients to the app and error log files."""

    def __init__(self, file_logger: logging.Logger) -> None:
        self._file_logger = file_logger

    @classmethod
    def from_paths(cls, app_log_path: str, error_log_path: str) -> ClientLogSink:
        return cls(
            setup_file_logger(CLIENT_LOGGER_NAME, app_log_path, error_log_path, fmt=CLIENT_LINE_FORMAT)
        )

    def write(self, record: ClientLogRequest) -> None:
        missing = [
            name
            for name in ("level", "message", "session_id", "timestamp")
            if not getattr(record, name)
        ]
        if missing:
            raise ValidationError(
                message="Log level, message, sessionId and timestamp are required",
                detail=f"missing={','.join(missing)}",
            )

        level: LogLevel = record.level
        try:
            self._file_logger.log(
                level.stdlib_level,
                "%s sessionId=%s",
                record.message,
                record.session_id,
                extra={"client_timestamp": record.timestamp, "client_level": level.value.upper()},
            )
        except OSError as exc:
            raise ServerError(message="Internal server error", detail=f"log write failed: {exc}") from exc

        logger.debug("client_log_received", level=level.value, session_id=record.session_id)

    def close(self) -> None:
        for handler in list(self._file_logger.handlers):
            self._file_logger.removeHandler(handler)
            try:
                handler.close()
            except OSError:
                logger.warning("client_log_close_failed", handler=repr(handler), exc_info=True)
