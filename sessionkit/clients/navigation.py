from __future__ import annotations

from sessionkit.clients.cookie_store import CookieStore
from sessionkit.core.logging import get_logger

logger = get_logger(__name__)

HOME_PATH = "/"
LOGIN_PATH = "/login"
SESSION_EXPIRED_PATH = "/login?sessionExpired=true"

# Views that need a credential cookie; anything else is public.
PROTECTED_PATHS = frozenset({"/home"})


class Navigator:
    """Holds the current view location, the stand-in for window.location."""

    def __init__(self, location: str = HOME_PATH) -> None:
        self.location = location
        self.history: list[str] = [location]

    def navigate(self, path: str) -> None:
        logger.info("navigate", path=path, previous=self.location)
        self.location = path
        self.history.append(path)


def resolve_route(path: str, cookies: CookieStore, auth_cookie: str = "authToken") -> str:
    """Route guard: protected views fall back to the landing page without a credential."""
    route = path.split("?", 1)[0]
    if route in PROTECTED_PATHS and cookies.read(auth_cookie) is None:
        logger.info("route_guard_redirect", path=path)
        return HOME_PATH
    return path
