from __future__ import annotations

import pytest
from pydantic import ValidationError

from sessionkit.schemas.enums import ErrorCode, LogLevel
from sessionkit.schemas.requests import ClientLogRequest, SignupRequest
from sessionkit.schemas.responses import ErrorResponse, LoginResponse, RefreshResponse


class TestWireNames:
    def test_login_response_uses_camel_case(self):
        dumped = LoginResponse(token="t", expires_in=3600).model_dump(by_alias=True)
        assert dumped == {"message": "Login successful", "token": "t", "expiresIn": 3600}

    def test_refresh_response_accepts_wire_names(self):
        resp = RefreshResponse.model_validate(
            {"newToken": "t", "newExpiry": "Thu, 01 Jan 2026 03:00:00 GMT"}
        )
        assert resp.new_token == "t"
        assert resp.new_expiry.endswith("GMT")

    def test_refresh_response_requires_both_fields(self):
        with pytest.raises(ValidationError):
            RefreshResponse.model_validate({"newToken": "t"})

    def test_client_log_session_id_alias(self):
        record = ClientLogRequest.model_validate(
            {"level": "warn", "message": "m", "sessionId": "abc", "timestamp": "x"}
        )
        assert record.session_id == "abc"
        assert record.level is LogLevel.WARN

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            ClientLogRequest.model_validate({"level": "fatal"})

    def test_error_response_serializes_code_as_string(self):
        body = ErrorResponse(error_code=ErrorCode.CONFLICT, message="Username is already taken")
        assert body.model_dump(mode="json") == {
            "error_code": "CONFLICT",
            "message": "Username is already taken",
        }


def test_requests_tolerate_missing_fields():
    body = SignupRequest.model_validate({"username": "alice"})
    assert body.email is None
    assert body.password is None
