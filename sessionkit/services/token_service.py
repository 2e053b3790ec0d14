from __future__ import annotations

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Any

import jwt

from sessionkit.config import Settings
from sessionkit.core.exceptions import AuthError, ServerError, TokenMissingError
from sessionkit.core.logging import get_logger
from sessionkit.db.models import User

logger = get_logger(__name__)

# Claims carried from a verified token into its replacement.
IDENTITY_CLAIMS = ("sub", "username", "role")


class TokenService:
    """Signs login tokens and exchanges still-valid tokens for longer-lived ones."""

    def __init__(self, settings: Settings) -> None:
        self._secret = settings.JWT_SECRET.get_secret_value()
        self._algorithm = settings.JWT_ALGORITHM
        self._login_ttl = settings.LOGIN_TOKEN_TTL_SECONDS
        self._refresh_ttl = settings.REFRESH_TOKEN_TTL_SECONDS

    def issue_login_token(self, user: User) -> tuple[str, int]:
        """Return (token, expires_in_seconds) for a freshly authenticated user."""
        claims = {"sub": str(user.id), "username": user.username, "role": user.role.value}
        token, _ = self._sign(claims, self._login_ttl)
        logger.info("login_token_issued", username=user.username, expires_in=self._login_ttl)
        return token, self._login_ttl

    def refresh(self, token: str | None) -> tuple[str, datetime]:
        """Verify token and mint a replacement. Returns (new_token, new_expiry)."""
        if not token:
            raise TokenMissingError(message="Refresh token required")

        claims = self.verify(token)
        identity = {key: claims[key] for key in IDENTITY_CLAIMS if key in claims}
        new_token, expires_at = self._sign(identity, self._refresh_ttl)
        logger.info("token_refreshed", username=identity.get("username"), expires_at=expires_at.isoformat())
        return new_token, expires_at

    def verify(self, token: str) -> dict[str, Any]:
        self._require_secret()
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.PyJWTError as exc:
            raise AuthError(message="Invalid refresh token", detail=str(exc)) from exc

    def _sign(self, claims: dict[str, Any], ttl_seconds: int) -> tuple[str, datetime]:
        self._require_secret()
        now = datetime.now(timezone.utc).replace(microsecond=0)
        expires_at = now + timedelta(seconds=ttl_seconds)
        payload = {**claims, "iat": now, "exp": expires_at}
        return jwt.encode(payload, self._secret, algorithm=self._algorithm), expires_at

    def _require_secret(self) -> None:
        if not self._secret:
            raise ServerError(message="Internal server error", detail="JWT_SECRET is not configured")


def format_expiry(expires_at: datetime) -> str:
    """RFC 1123 form used on the wire, e.g. 'Thu, 01 Jan 2026 00:00:00 GMT'."""
    return format_datetime(expires_at.astimezone(timezone.utc), usegmt=True)
