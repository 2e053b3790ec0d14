from __future__ import annotations

from typing import Any

import httpx

from sessionkit.config import Settings
from sessionkit.core.exceptions import AuthError, ServerError, SessionKitError, error_for_code
from sessionkit.core.logging import get_logger
from sessionkit.schemas.responses import LoginResponse, RefreshResponse, SignupResponse

logger = get_logger(__name__)


class AuthApiClient:
    """Calls the auth server's signup, login and refresh-token endpoints."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    async def signup(self, username: str, email: str, password: str) -> SignupResponse:
        data = await self._post(
            "/signup",
            {"username": username, "email": email, "password": password},
        )
        return SignupResponse.model_validate(data)

    async def login(self, username: str, password: str) -> LoginResponse:
        data = await self._post("/login", {"username": username, "password": password})
        return LoginResponse.model_validate(data)

    async def refresh_token(self, token: str) -> RefreshResponse:
        """Exchange token for a new one.

        Every failure, including transport errors, timeouts and malformed bodies, is
        raised as an AuthError so callers can treat it as an invalid session.
        """
        try:
            data = await self._post(
                "/refresh-token",
                {"token": token},
                timeout=self._settings.REFRESH_TIMEOUT,
                network_error=AuthError,
                default_error=AuthError,
            )
        except AuthError:
            raise
        except SessionKitError as exc:
            raise AuthError(message=exc.message, detail=exc.detail) from exc
        try:
            return RefreshResponse.model_validate(data)
        except ValueError as exc:
            raise AuthError(message="Session refresh failed", detail=str(exc)) from exc

    async def _post(
        self,
        path: str,
        payload: dict[str, Any],
        timeout: float | None = None,
        network_error: type[SessionKitError] = ServerError,
        default_error: type[SessionKitError] = ServerError,
    ) -> dict[str, Any]:
        extra: dict[str, Any] = {}
        if timeout is not None:
            extra["timeout"] = httpx.Timeout(timeout)
        try:
            resp = await self._client.post(path, json=payload, **extra)
        except httpx.HTTPError as exc:
            logger.warning("auth_request_failed", path=path, error=str(exc))
            raise network_error(message="Auth server unreachable", detail=f"{type(exc).__name__}: {exc}") from exc

        body = self._json_body(resp)
        if resp.is_success and body is not None:
            return body

        message = (body or {}).get("message") or f"Request failed with status {resp.status_code}"
        error_cls = error_for_code((body or {}).get("error_code"), default_error)
        logger.info(
            "auth_request_rejected",
            path=path,
            status_code=resp.status_code,
            error_code=error_cls.error_code,
        )
        raise error_cls(message=message, detail=f"status={resp.status_code}")

    @staticmethod
    def _json_body(resp: httpx.Response) -> dict[str, Any] | None:
        try:
            body = resp.json()
        except ValueError:
            return None
        return body if isinstance(body, dict) else None
