"""Conversions from the various expiry representations to an absolute UTC instant."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Any

import jwt

from sessionkit.core.logging import get_logger

logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def expiry_from_duration(expires_in: float, now: datetime | None = None) -> datetime:
    """Absolute expiry for a server-supplied lifetime in seconds (login's expiresIn)."""
    return (now or utcnow()) + timedelta(seconds=expires_in)


def parse_expiry(value: str) -> datetime:
    """Parse a server expiry string.

    Accepts the RFC 1123 form returned by /refresh-token ('Thu, 01 Jan 2026 00:00:00 GMT')
    and ISO 8601. Naive values are taken as UTC. Raises ValueError when neither form fits.
    """
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        # fromisoformat only accepts a trailing "Z" from Python 3.11 on.
        iso = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
        parsed = datetime.fromisoformat(iso)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def decode_unverified(token: str) -> dict[str, Any] | None:
    """Read a JWT's claims without checking the signature. Returns None if unreadable."""
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        logger.warning("token_decode_failed", exc_info=True)
        return None


def expiry_from_token(token: str) -> datetime | None:
    """Expiry instant from a JWT's exp claim, or None when the token carries none."""
    claims = decode_unverified(token)
    if not claims or "exp" not in claims:
        return None
    try:
        return datetime.fromtimestamp(float(claims["exp"]), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError):
        logger.warning("token_exp_invalid", exp=claims.get("exp"))
        return None
