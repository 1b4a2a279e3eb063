"""Engine, sessions and schema setup for the relational task store.

SQLite is the default for local use; any SQLAlchemy URL (PostgreSQL in
production) can be supplied through `DATABASE_URL`.
"""

import logging
import os
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./tickoff.db")


def _is_sqlite_url(database_url: str) -> bool:
    return "sqlite" in (database_url or "")


def _env_flag(name: str) -> bool:
    return os.getenv(name, "False").lower() == "true"


def _pool_settings() -> dict:
    """Connection pool sizing for server databases."""
    return {
        "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
        "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "5")),
        "pool_timeout": int(os.getenv("DB_POOL_TIMEOUT_SEC", "30")),
    }


def get_engine_kwargs(database_url: str) -> dict:
    """Keyword arguments for create_engine, computed without connecting."""
    kwargs = {"echo": _env_flag("DEBUG"), "pool_pre_ping": True}
    if _is_sqlite_url(database_url):
        # One process serves requests from several threads.
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(_pool_settings())
    return kwargs


def build_engine(database_url: str) -> Engine:
    return create_engine(database_url, **get_engine_kwargs(database_url))


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


@event.listens_for(Engine, "connect")
def set_sqlite_pragmas(dbapi_conn, connection_record):
    """Turn on foreign keys so removing a user also removes their todos."""
    if not _is_sqlite_url(DATABASE_URL):
        return
    cursor = dbapi_conn.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
    finally:
        cursor.close()


def get_db() -> Iterator[Session]:
    """Request-scoped session (FastAPI dependency)."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def run_migrations(database_url: str) -> None:
    """Upgrade the schema to the newest Alembic revision."""
    from alembic import command
    from alembic.config import Config

    config = Config(os.getenv("ALEMBIC_INI", "alembic.ini"))
    config.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(config, "head")


def init_db():
    """Create the users and todos tables.

    Server databases are migrated with Alembic when RUN_MIGRATIONS=true;
    otherwise the tables are created straight from the models.
    """
    from tickoff.database import models  # noqa: F401

    if _env_flag("RUN_MIGRATIONS") and not _is_sqlite_url(DATABASE_URL):
        logger.info("Applying database migrations")
        run_migrations(DATABASE_URL)
        return

    Base.metadata.create_all(bind=engine)
