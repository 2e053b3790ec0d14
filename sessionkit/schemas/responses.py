from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from sessionkit.schemas.enums import ErrorCode


class HealthResponse(BaseModel):
    status: str = "ok"
    service: str = "sessionkit"


class MessageResponse(BaseModel):
    message: str


class UserPublic(BaseModel):
    username: str
    email: str


class SignupResponse(BaseModel):
    message: str = "User created successfully!"
    user: UserPublic


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Login successful"
    token: str
    expires_in: int = Field(..., alias="expiresIn", description="Token lifetime in seconds")


class RefreshResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_token: str = Field(..., alias="newToken")
    new_expiry: str = Field(..., alias="newExpiry", description="RFC 1123 UTC expiry of newToken")


class ErrorResponse(BaseModel):
    error_code: ErrorCode
    message: str
