from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from sessionkit.api.router import api_router
from sessionkit.config import Settings
from sessionkit.core.exceptions import SessionKitError
from sessionkit.core.logging import get_logger, setup_logging
from sessionkit.core.middleware import (
    request_validation_handler,
    sessionkit_exception_handler,
    unhandled_exception_handler,
)
from sessionkit.db.database import create_db_engine, create_session_factory, init_db
from sessionkit.services.log_sink import ClientLogSink

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    setup_logging(log_level=settings.LOG_LEVEL, debug=settings.DEBUG)
    if not settings.JWT_SECRET.get_secret_value():
        logger.warning("jwt_secret_missing")

    engine = create_db_engine(settings)
    init_db(engine)
    app.state.session_factory = create_session_factory(engine)
    app.state.log_sink = ClientLogSink.from_paths(settings.APP_LOG_PATH, settings.ERROR_LOG_PATH)
    logger.info("server_started", port=settings.SERVER_PORT)
    yield
    app.state.log_sink.close()
    engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    app = FastAPI(
        title="sessionkit auth API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(SessionKitError, sessionkit_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    app.include_router(api_router)
    return app


app = create_app()


def run() -> None:
    settings: Settings = app.state.settings
    uvicorn.run(app, host=settings.SERVER_HOST, port=settings.SERVER_PORT)


if __name__ == "__main__":
    run()
