from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import httpx

from sessionkit.clients.auth_api import AuthApiClient
from sessionkit.clients.cookie_store import CookieStore
from sessionkit.clients.http_client import close_http_client, create_http_client
from sessionkit.clients.navigation import Navigator
from sessionkit.clients.remote_log import RemoteLogger
from sessionkit.clients.session_lifecycle import SessionLifecycle
from sessionkit.clients.session_timers import Scheduler, SessionTimers
from sessionkit.config import Settings
from sessionkit.core.logging import get_logger

logger = get_logger(__name__)


def create_cookie_store(settings: Settings) -> CookieStore:
    secure = httpx.URL(settings.API_BASE_URL).scheme == "https"
    if settings.COOKIE_STORE_PATH:
        return CookieStore.load(Path(settings.COOKIE_STORE_PATH), secure_transport=secure)
    return CookieStore(secure_transport=secure)


@asynccontextmanager
async def session_runtime(
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
    scheduler: Scheduler | None = None,
    navigator: Navigator | None = None,
) -> AsyncIterator[SessionLifecycle]:
    """Build a session lifecycle, rehydrate it from stored cookies, and tear it down on exit.

    Pending timers are cancelled and queued log records flushed on exit; the credential
    cookie is left in place so the next start can restore the session.
    """
    owns_client = http_client is None
    client = http_client or create_http_client(settings)
    cookies = create_cookie_store(settings)
    remote_log = RemoteLogger(client=client, settings=settings, cookies=cookies)
    lifecycle = SessionLifecycle(
        api=AuthApiClient(client=client, settings=settings),
        cookies=cookies,
        timers=SessionTimers(scheduler),
        settings=settings,
        navigator=navigator,
        remote_log=remote_log,
    )
    state = lifecycle.restore()
    logger.info("session_runtime_started", state=state.value)
    try:
        yield lifecycle
    finally:
        lifecycle.close()
        await remote_log.flush()
        if owns_client:
            await close_http_client(client)
        logger.info("session_runtime_stopped")
