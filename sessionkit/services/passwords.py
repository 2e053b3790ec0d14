from __future__ import annotations

import re

import bcrypt

from sessionkit.core.logging import get_logger

logger = get_logger(__name__)

ALLOWED_SYMBOLS = "!@#$%^&*"

PASSWORD_POLICY = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])(?=.*[!@#$%^&*])[A-Za-z0-9!@#$%^&*]{8,}$"
)

PASSWORD_POLICY_MESSAGE = (
    "Password must be at least 8 characters long, contain at least one uppercase letter, "
    "one lowercase letter, one number, and one special character."
)

# bcrypt only looks at the first 72 bytes; newer releases raise instead of truncating.
_BCRYPT_MAX_BYTES = 72


def is_strong_password(password: str) -> bool:
    return PASSWORD_POLICY.fullmatch(password) is not None


class PasswordHasher:
    """One-way bcrypt hashing of account passwords."""

    def __init__(self, rounds: int = 10) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(self._encode(password), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(self._encode(password), password_hash.encode("utf-8"))
        except ValueError:
            logger.warning("password_hash_unreadable")
            return False

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
