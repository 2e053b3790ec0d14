from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Callable

import httpx

from sessionkit.clients.cookie_store import CookieStore
from sessionkit.clients.session_id import get_session_id
from sessionkit.clients.token_expiry import utcnow
from sessionkit.config import Settings
from sessionkit.core.logging import get_logger
from sessionkit.schemas.enums import LogLevel
from sessionkit.utils.retry import with_retry

logger = get_logger(__name__)


class RemoteLogger:
    """Ships client log records to the server's /log endpoint.

    Sending is fire-and-forget: each record becomes a background task and delivery
    failures end in a local warning, never in an exception for the caller.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: Settings,
        cookies: CookieStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._client = client
        self._settings = settings
        self._cookies = cookies
        self._clock = clock
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def log(self, level: LogLevel, message: str) -> None:
        if not self._settings.CLIENT_LOG_ENABLED:
            return

        record = {
            "level": level.value,
            "message": message,
            "sessionId": get_session_id(self._cookies, self._settings.SESSION_ID_COOKIE_NAME),
            "timestamp": self._clock().isoformat(),
        }
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("client_log_dropped", reason="no_event_loop", level=level.value)
            return

        task = loop.create_task(self._deliver(record))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def info(self, message: str) -> None:
        self.log(LogLevel.INFO, message)

    def warn(self, message: str) -> None:
        self.log(LogLevel.WARN, message)

    def error(self, message: str) -> None:
        self.log(LogLevel.ERROR, message)

    def debug(self, message: str) -> None:
        self.log(LogLevel.DEBUG, message)

    async def flush(self) -> None:
        """Wait for every in-flight record."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _deliver(self, record: dict[str, Any]) -> None:
        send = with_retry(
            max_retries=self._settings.LOG_SHIP_MAX_RETRIES,
            backoff_factor=self._settings.BACKOFF_FACTOR,
        )(self._post)
        try:
            await send(record)
        except Exception:
            logger.warning("client_log_delivery_failed", level=record["level"], exc_info=True)

    async def _post(self, record: dict[str, Any]) -> None:
        resp = await self._client.post("/log", json=record)
        resp.raise_for_status()
