from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from sessionkit.config import Settings
from sessionkit.services.account_service import AccountService
from sessionkit.services.log_sink import ClientLogSink
from sessionkit.services.passwords import PasswordHasher
from sessionkit.services.token_service import TokenService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Iterator[Session]:
    session = request.app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def get_password_hasher(settings: Settings = Depends(get_settings)) -> PasswordHasher:
    return PasswordHasher(rounds=settings.BCRYPT_ROUNDS)


def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return TokenService(settings=settings)


def get_account_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> AccountService:
    return AccountService(db=db, settings=settings, hasher=hasher, tokens=tokens)


def get_log_sink(request: Request) -> ClientLogSink:
    return request.app.state.log_sink
