from __future__ import annotations

import uuid

from sessionkit.clients.cookie_store import CookieStore

SESSION_ID_COOKIE = "sessionId"


def generate_session_id() -> str:
    return str(uuid.uuid4())


def get_session_id(cookies: CookieStore, cookie_name: str = SESSION_ID_COOKIE) -> str:
    """Return the client session id, creating the browser-session cookie on first use."""
    existing = cookies.read(cookie_name)
    if existing:
        return existing

    session_id = generate_session_id()
    cookies.write(cookie_name, session_id, secure=True, same_site="Strict", session=True)
    return session_id
