from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from sessionkit.config import Settings
from sessionkit.core.exceptions import (
    ConflictError,
    InvalidCredentialsError,
    ServerError,
    UserNotFoundError,
    ValidationError,
)
from sessionkit.core.logging import get_logger
from sessionkit.db.models import User
from sessionkit.schemas.enums import UserRole
from sessionkit.services.passwords import PASSWORD_POLICY_MESSAGE, PasswordHasher, is_strong_password
from sessionkit.services.token_service import TokenService

logger = get_logger(__name__)

# Same text for unknown user and wrong password.
INVALID_LOGIN_MESSAGE = "Invalid username or password"


class AccountService:
    """Signup and login against the user table."""

    def __init__(
        self,
        db: Session,
        settings: Settings,
        hasher: PasswordHasher,
        tokens: TokenService,
    ) -> None:
        self._db = db
        self._settings = settings
        self._hasher = hasher
        self._tokens = tokens

    def signup(self, username: str | None, email: str | None, password: str | None) -> User:
        if not username or not email or not password:
            raise ValidationError(message="All fields are required")

        if not is_strong_password(password):
            raise ValidationError(message=PASSWORD_POLICY_MESSAGE)

        normalized = username.lower()

        try:
            if self._find_by_username(normalized) is not None:
                raise ConflictError(message=self._settings.DUPE_USER, detail=f"username={normalized}")
            if self._db.scalar(select(User).where(User.email == email)) is not None:
                raise ConflictError(message=self._settings.DUPE_EMAIL, detail=f"email={email}")

            user = User(
                username=normalized,
                email=email,
                password_hash=self._hasher.hash(password),
                role=UserRole.USER,
            )
            self._db.add(user)
            self._db.commit()
        except IntegrityError as exc:
            # Lost a race with a concurrent signup for the same username or email.
            self._db.rollback()
            raise ConflictError(
                message="Email or username is already registered",
                detail=str(exc.orig),
            ) from exc
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise ServerError(message="Internal server error", detail=str(exc)) from exc

        logger.info("user_created", username=normalized)
        return user

    def login(self, username: str | None, password: str | None) -> tuple[str, int]:
        """Check credentials and return (token, expires_in)."""
        if not username or not password:
            raise ValidationError(message="Username and password are required")

        normalized = username.lower()
        try:
            user = self._find_by_username(normalized)
        except SQLAlchemyError as exc:
            raise ServerError(message="Internal server error", detail=str(exc)) from exc

        if user is None:
            raise UserNotFoundError(message=INVALID_LOGIN_MESSAGE, detail=f"username={normalized}")
        if not self._hasher.verify(password, user.password_hash):
            raise InvalidCredentialsError(message=INVALID_LOGIN_MESSAGE, detail=f"username={normalized}")

        return self._tokens.issue_login_token(user)

    def _find_by_username(self, normalized: str) -> User | None:
        return self._db.scalar(select(User).where(User.username == normalized))
