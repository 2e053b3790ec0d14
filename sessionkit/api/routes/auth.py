from __future__ import annotations

from fastapi import APIRouter, Depends, status

from sessionkit.api.deps import get_account_service, get_token_service
from sessionkit.schemas.requests import LoginRequest, RefreshTokenRequest, SignupRequest
from sessionkit.schemas.responses import (
    LoginResponse,
    RefreshResponse,
    SignupResponse,
    UserPublic,
)
from sessionkit.services.account_service import AccountService
from sessionkit.services.token_service import TokenService, format_expiry

router = APIRouter()

# Sync handlers: bcrypt and the ORM block, so FastAPI runs these in its threadpool.


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(
    body: SignupRequest,
    accounts: AccountService = Depends(get_account_service),
) -> SignupResponse:
    user = accounts.signup(username=body.username, email=body.email, password=body.password)
    return SignupResponse(user=UserPublic(username=user.username, email=user.email))


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
) -> LoginResponse:
    token, expires_in = accounts.login(username=body.username, password=body.password)
    return LoginResponse(token=token, expires_in=expires_in)


@router.post("/refresh-token", response_model=RefreshResponse)
def refresh_token(
    body: RefreshTokenRequest,
    tokens: TokenService = Depends(get_token_service),
) -> RefreshResponse:
    new_token, expires_at = tokens.refresh(body.token)
    return RefreshResponse(new_token=new_token, new_expiry=format_expiry(expires_at))
