from __future__ import annotations

from fastapi import APIRouter

from sessionkit.api.routes import auth, client_log, health

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(client_log.router, tags=["log"])
