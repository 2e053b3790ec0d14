from __future__ import annotations

import base64
import json
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from freezegun import freeze_time

from sessionkit.config import Settings
from sessionkit.core.exceptions import AuthError, ServerError, TokenMissingError
from sessionkit.db.models import User
from sessionkit.schemas.enums import UserRole
from sessionkit.services.token_service import TokenService, format_expiry

SECRET = "unit-test-secret-with-plenty-of-entropy-0123456789"


@pytest.fixture
def service() -> TokenService:
    return TokenService(Settings(JWT_SECRET=SECRET))


@pytest.fixture
def user() -> User:
    return User(id=7, username="alice", email="alice@example.com", password_hash="x", role=UserRole.USER)


def _decode(token: str) -> dict:
    return jwt.decode(token, SECRET, algorithms=["HS256"])


class TestLoginToken:
    @freeze_time("2026-03-01 12:00:00")
    def test_expires_in_one_hour(self, service, user):
        token, expires_in = service.issue_login_token(user)
        claims = _decode(token)
        now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
        assert expires_in == 3600
        assert claims["exp"] == int((now + timedelta(seconds=3600)).timestamp())
        assert claims["sub"] == "7"
        assert claims["username"] == "alice"
        assert claims["role"] == "user"

    def test_missing_secret_is_server_error(self, user):
        with pytest.raises(ServerError):
            TokenService(Settings(JWT_SECRET="")).issue_login_token(user)


class TestRefresh:
    def test_new_token_valid_for_three_hours(self, service, user):
        with freeze_time("2026-03-01 12:00:00"):
            token, _ = service.issue_login_token(user)
        with freeze_time("2026-03-01 12:59:30"):
            new_token, expires_at = service.refresh(token)
            claims = _decode(new_token)

        expected = datetime(2026, 3, 1, 15, 59, 30, tzinfo=timezone.utc)
        assert expires_at == expected
        assert claims["exp"] == int(expected.timestamp())
        assert claims["sub"] == "7"
        assert claims["username"] == "alice"

    def test_missing_token(self, service):
        with pytest.raises(TokenMissingError) as exc_info:
            service.refresh(None)
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Refresh token required"

    def test_expired_token(self, service, user):
        with freeze_time("2026-03-01 12:00:00"):
            token, _ = service.issue_login_token(user)
        with freeze_time("2026-03-01 13:00:01"):
            with pytest.raises(AuthError) as exc_info:
                service.refresh(token)
        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Invalid refresh token"

    def test_forged_token(self, service):
        forged = jwt.encode(
            {"sub": "7", "username": "alice", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            "some-other-secret-that-is-also-long-enough-000",
            algorithm="HS256",
        )
        with pytest.raises(AuthError):
            service.refresh(forged)

    def test_tampered_payload(self, service, user):
        token, _ = service.issue_login_token(user)
        header, _, signature = token.split(".")
        claims = _decode(token) | {"username": "mallory", "role": "admin"}
        payload = base64.urlsafe_b64encode(json.dumps(claims).encode()).rstrip(b"=").decode()
        with pytest.raises(AuthError):
            service.refresh(f"{header}.{payload}.{signature}")

    def test_garbage_token(self, service):
        with pytest.raises(AuthError):
            service.refresh("not-a-jwt")


def test_format_expiry_is_rfc1123_gmt():
    value = format_expiry(datetime(2026, 1, 1, 0, 0, tzinfo=timezone.utc))
    assert value == "Thu, 01 Jan 2026 00:00:00 GMT"
