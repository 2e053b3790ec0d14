from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from pathlib import Path
from typing import Callable
from urllib.parse import quote, unquote

from pydantic import BaseModel, TypeAdapter

from sessionkit.clients.token_expiry import utcnow
from sessionkit.core.exceptions import InvalidCookieNameError
from sessionkit.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_COOKIE_TTL = timedelta(hours=1)
DEFAULT_SAME_SITE = "Lax"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_INVALID_NAME = re.compile(r"[;=\s]")


class StoredCookie(BaseModel):
    name: str
    value: str
    expires: datetime | None = None  # None: lives for the browser session
    path: str = "/"
    secure: bool = False
    same_site: str = DEFAULT_SAME_SITE


_COOKIE_LIST = TypeAdapter(list[StoredCookie])


class CookieStore:
    """Client-side cookie jar, the equivalent of the browser's document.cookie.

    Cookies are keyed by name only (one path per name). When `path` is given, the jar is
    saved as JSON after every mutation so a restarted client can rehydrate its session.
    """

    def __init__(
        self,
        secure_transport: bool = False,
        path: Path | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._secure_transport = secure_transport
        self._path = path
        self._clock = clock
        self._cookies: dict[str, StoredCookie] = {}

    @classmethod
    def load(
        cls,
        path: Path,
        secure_transport: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ) -> CookieStore:
        store = cls(secure_transport=secure_transport, path=path, clock=clock)
        if path.exists():
            try:
                cookies = _COOKIE_LIST.validate_json(path.read_bytes())
            except ValueError:
                logger.warning("cookie_store_unreadable", path=str(path), exc_info=True)
                cookies = []
            store._cookies = {cookie.name: cookie for cookie in cookies}
            store._purge_expired()
        return store

    @property
    def secure_transport(self) -> bool:
        return self._secure_transport

    @property
    def header(self) -> str:
        """Unexpired cookies as a request header value: 'a=1; b=2'."""
        self._purge_expired()
        return "; ".join(f"{c.name}={quote(c.value, safe='')}" for c in self._cookies.values())

    def write(
        self,
        name: str,
        value: str,
        expires: datetime | None = None,
        secure: bool = False,
        same_site: str | None = None,
        http_only: bool = False,
        path: str = "/",
        session: bool = False,
    ) -> str:
        """Store a cookie and return its Set-Cookie style serialization.

        Expiry defaults to one hour from now; session=True stores a browser-session cookie
        without an expires attribute. An expiry in the past removes the cookie.
        """
        if not name or _INVALID_NAME.search(name):
            raise InvalidCookieNameError(message="Invalid cookie name", detail=f"name={name!r}")

        if expires is not None and not isinstance(expires, datetime):
            raise TypeError("expires must be a datetime")
        if expires is None and not session:
            expires = self._clock() + DEFAULT_COOKIE_TTL
        if expires is not None and expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)

        if http_only:
            logger.warning("cookie_http_only_ignored", cookie=name, hint="HttpOnly must be set by the server")

        cookie = StoredCookie(
            name=name,
            value=value,
            expires=expires,
            path=path,
            # Secure is only honoured over an encrypted transport.
            secure=secure and self._secure_transport,
            same_site=same_site or DEFAULT_SAME_SITE,
        )

        if cookie.expires is not None and cookie.expires <= self._clock():
            self._cookies.pop(name, None)
        else:
            self._cookies[name] = cookie
        self._save()
        return self.serialize(cookie)

    def read(self, name: str) -> str | None:
        """Value of the cookie called exactly `name`, or None."""
        for segment in self.header.split("; "):
            key, sep, raw = segment.partition("=")
            if sep and key == name:
                try:
                    return unquote(raw, errors="strict")
                except UnicodeDecodeError:
                    return raw
        return None

    def delete(self, name: str, path: str = "/") -> None:
        if name in self._cookies:
            self.write(name, "", expires=EPOCH, path=path)

    @staticmethod
    def serialize(cookie: StoredCookie) -> str:
        parts = [f"{cookie.name}={quote(cookie.value, safe='')}", f"path={cookie.path}"]
        if cookie.expires is not None:
            parts.append(f"expires={format_datetime(cookie.expires.astimezone(timezone.utc), usegmt=True)}")
        if cookie.secure:
            parts.append("Secure")
        parts.append(f"SameSite={cookie.same_site}")
        return "; ".join(parts)

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [n for n, c in self._cookies.items() if c.expires is not None and c.expires <= now]
        for name in expired:
            del self._cookies[name]
        if expired:
            self._save()

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_bytes(_COOKIE_LIST.dump_json(list(self._cookies.values())))
