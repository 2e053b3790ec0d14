from __future__ import annotations

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from sessionkit.config import Settings
from sessionkit.core.logging import get_logger
from sessionkit.db.models import Base

logger = get_logger(__name__)


def build_database_url(settings: Settings) -> URL:
    """Postgres URL from the DB_* parts when DB_HOST is set, otherwise DATABASE_URL."""
    if not settings.DB_HOST:
        return make_url(settings.DATABASE_URL)
    return URL.create(
        "postgresql+psycopg",
        username=settings.DB_USERNAME or None,
        password=settings.DB_PASSWORD.get_secret_value() or None,
        host=settings.DB_HOST,
        database=settings.DB_NAME or None,
    )


def create_db_engine(settings: Settings) -> Engine:
    url = build_database_url(settings)
    backend = url.get_backend_name()

    if backend == "sqlite":
        # In-memory databases must share one connection across threadpool workers.
        options: dict = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
        engine = create_engine(url, **options)
    else:
        engine = create_engine(url, pool_pre_ping=True)

    logger.info("database_engine_created", backend=backend, database=url.database)
    return engine


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(engine)
    logger.info("database_schema_ready")


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

