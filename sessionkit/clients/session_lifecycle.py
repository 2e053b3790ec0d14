from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Callable

from pydantic import BaseModel

from sessionkit.clients.auth_api import AuthApiClient
from sessionkit.clients.cookie_store import CookieStore
from sessionkit.clients.navigation import (
    HOME_PATH,
    SESSION_EXPIRED_PATH,
    Navigator,
    resolve_route,
)
from sessionkit.clients.remote_log import RemoteLogger
from sessionkit.clients.session_timers import SessionTimers, TimerKind
from sessionkit.clients.token_expiry import (
    decode_unverified,
    expiry_from_duration,
    expiry_from_token,
    parse_expiry,
    utcnow,
)
from sessionkit.config import Settings
from sessionkit.core.exceptions import AuthError
from sessionkit.core.logging import get_logger
from sessionkit.schemas.enums import LogLevel

logger = get_logger(__name__)


class SessionState(str, Enum):
    LOGGED_OUT = "logged_out"
    ACTIVE = "active"
    WARNING_SHOWN = "warning_shown"
    EXPIRED = "expired"


class Session(BaseModel):
    """Client-held session fields. Timer handles live in the lifecycle's SessionTimers."""

    username: str = ""
    token: str | None = None
    expires_at: datetime | None = None
    is_logged_in: bool = False
    is_expired: bool = False
    show_warning: bool = False


class SessionLifecycle:
    """Client-side session state machine.

    LOGGED_OUT --log_in--> ACTIVE --warning timer--> WARNING_SHOWN
    WARNING_SHOWN --extend_session ok--> ACTIVE
    WARNING_SHOWN --extend_session fails / close timer--> EXPIRED
    any --log_out--> LOGGED_OUT

    All transitions run on one event loop. Timer callbacks are the only asynchronous
    re-entry, and a refresh that resolves after the session was restarted or ended is
    discarded.
    """

    def __init__(
        self,
        api: AuthApiClient,
        cookies: CookieStore,
        timers: SessionTimers,
        settings: Settings,
        navigator: Navigator | None = None,
        remote_log: RemoteLogger | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._api = api
        self._cookies = cookies
        self._timers = timers
        self._settings = settings
        self._navigator = navigator or Navigator()
        self._remote_log = remote_log
        self._clock = clock
        self.session = Session()

    @property
    def state(self) -> SessionState:
        if self.session.is_expired:
            return SessionState.EXPIRED
        if not self.session.is_logged_in:
            return SessionState.LOGGED_OUT
        if self.session.show_warning:
            return SessionState.WARNING_SHOWN
        return SessionState.ACTIVE

    @property
    def navigator(self) -> Navigator:
        return self._navigator

    @property
    def timers(self) -> SessionTimers:
        return self._timers

    @property
    def _cookie_name(self) -> str:
        return self._settings.AUTH_COOKIE_NAME

    async def sign_in(self, username: str, password: str) -> None:
        """Log in against the server and start the session. Auth errors propagate."""
        result = await self._api.login(username, password)
        expires_at = expiry_from_duration(result.expires_in, now=self._clock())
        self.log_in(username, result.token, expires_at)

    def log_in(self, username: str, token: str, expires_at: datetime) -> None:
        self.session.username = username
        self.session.is_logged_in = True
        self.session.is_expired = False
        self._start_session(token, expires_at)
        logger.info("session_started", username=username, expires_at=expires_at.isoformat())
        self._ship(LogLevel.INFO, f"User {username} logged in")

    def restore(self) -> SessionState:
        """Rehydrate from a persisted credential cookie on application start."""
        token = self._cookies.read(self._cookie_name)
        if token is None:
            return self.state

        expires_at = expiry_from_token(token)
        if expires_at is None or expires_at <= self._clock():
            logger.info("stored_session_discarded", reason="expired" if expires_at else "unreadable")
            self._cookies.delete(self._cookie_name)
            return self.state

        claims = decode_unverified(token) or {}
        self.session.username = str(claims.get("username", ""))
        self.session.is_logged_in = True
        self.session.is_expired = False
        self._start_session(token, expires_at)
        logger.info("session_restored", username=self.session.username, expires_at=expires_at.isoformat())
        return self.state

    async def extend_session(self) -> bool:
        """Refresh the credential. Returns True when the session was renewed.

        Any refresh failure forces the session into EXPIRED; it is never retried.
        """
        self._timers.cancel(TimerKind.CLOSE)

        token = self._cookies.read(self._cookie_name)
        if token is None:
            if self.session.is_logged_in:
                logger.warning("extend_without_credential")
                self.end_session()
            return False

        generation = self._timers.generation
        try:
            result = await self._api.refresh_token(token)
            new_expiry = parse_expiry(result.new_expiry)
        except (AuthError, ValueError) as exc:
            if generation != self._timers.generation:
                logger.info("refresh_result_discarded", reason="session_changed")
                return False
            logger.warning("session_refresh_failed", error=str(exc))
            self._ship(LogLevel.ERROR, f"Session refresh failed: {exc}")
            self.end_session()
            return False

        if generation != self._timers.generation:
            logger.info("refresh_result_discarded", reason="session_changed")
            return False

        # The server's expiry is authoritative; the new token is not decoded.
        self._start_session(result.new_token, new_expiry)
        self.session.is_expired = False
        self.session.show_warning = False
        logger.info("session_extended", username=self.session.username, expires_at=new_expiry.isoformat())
        self._ship(LogLevel.INFO, "Session extended")
        return True

    def end_session(self) -> None:
        """Forced logout after expiry or a failed refresh."""
        username = self.session.username
        self._teardown()
        self.session.is_expired = True
        logger.info("session_expired", username=username)
        self._ship(LogLevel.WARN, f"Session expired for {username or 'unknown user'}")
        self._navigator.navigate(SESSION_EXPIRED_PATH)

    def log_out(self) -> None:
        """Explicit user logout."""
        username = self.session.username
        self._teardown()
        self.session.is_expired = False
        logger.info("session_logged_out", username=username)
        self._ship(LogLevel.INFO, f"User {username or 'unknown user'} logged out")
        self._navigator.navigate(HOME_PATH)

    def close(self) -> None:
        """Cancel pending timers when the host goes away; credentials are kept."""
        self._timers.invalidate()

    def go_to(self, path: str) -> str:
        """Navigate through the route guard. Returns the path actually shown."""
        target = resolve_route(path, self._cookies, self._cookie_name)
        self._navigator.navigate(target)
        return target

    def _start_session(self, token: str, expires_at: datetime) -> None:
        self._timers.invalidate()
        self._cookies.write(
            self._cookie_name,
            token,
            expires=expires_at,
            secure=True,
            same_site="Strict",
        )
        self.session.token = token
        self.session.expires_at = expires_at
        self._schedule_warning(expires_at)

    def _schedule_warning(self, expires_at: datetime) -> None:
        lead = self._settings.SESSION_WARNING_LEAD_SECONDS
        delay = (expires_at - self._clock()).total_seconds() - lead
        if delay <= 0:
            # Already inside the warning window: skip the warning, end the session at expiry.
            seconds_left = max(0.0, delay + lead)
            logger.warning("session_in_final_window", seconds_left=seconds_left)
            self._timers.schedule(TimerKind.CLOSE, seconds_left, self._on_close)
            return
        self._timers.schedule(TimerKind.WARNING, delay, self._on_warning)

    def _on_warning(self) -> None:
        self.session.show_warning = True
        logger.info("session_warning_shown", username=self.session.username)
        self._timers.schedule(
            TimerKind.CLOSE,
            self._settings.SESSION_CLOSE_GRACE_SECONDS,
            self._on_close,
        )

    def _on_close(self) -> None:
        logger.info("session_warning_timed_out", username=self.session.username)
        self.end_session()

    def _teardown(self) -> None:
        self._timers.invalidate()
        self._cookies.delete(self._cookie_name)
        self.session = Session()

    def _ship(self, level: LogLevel, message: str) -> None:
        if self._remote_log is not None:
            self._remote_log.log(level, message)
