from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from sessionkit.schemas.enums import LogLevel

# Fields are optional at the schema level: missing values are reported by the
# services with their own 400 messages rather than FastAPI's generic payload error.


class SignupRequest(BaseModel):
    username: str | None = None
    email: str | None = None
    password: str | None = None


class LoginRequest(BaseModel):
    username: str | None = None
    password: str | None = None


class RefreshTokenRequest(BaseModel):
    token: str | None = None


class ClientLogRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    level: LogLevel | None = None
    message: str | None = None
    session_id: str | None = Field(default=None, alias="sessionId")
    timestamp: str | None = Field(default=None, description="Client-side ISO 8601 time")
