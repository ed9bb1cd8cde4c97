"""Database engine and helpers.

This module builds the SQLModel/SQLAlchemy engine from `Settings` and
provides the small helpers used by the application, the scripts and the
tests. Nothing here is global: callers pass the engine they want to use,
and the FastAPI app keeps its own engine on `app.state`.
"""

import logging
import time

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from . import models  # noqa: F401  (registers tables on SQLModel.metadata)
from .config import Settings

logger = logging.getLogger("app.db")


class DatabaseUnavailableError(RuntimeError):
    """Raised when the database cannot be reached at startup."""


def build_engine(settings: Settings) -> Engine:
    """Create an engine with a bounded connection pool.

    SQLite gets `check_same_thread=False` so FastAPI's worker threads can
    share it; in-memory SQLite additionally shares a single connection.
    Server databases get the configured pool limits and, for PyMySQL,
    connect/read/write timeouts so no request holds a connection forever.
    """
    url = settings.database_url
    if url.get_backend_name() == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=settings.SQL_ECHO, **kwargs)

    connect_args = {}
    if url.get_driver_name() == "pymysql":
        connect_args = {
            "connect_timeout": settings.DB_CONNECT_TIMEOUT,
            "read_timeout": settings.DB_READ_TIMEOUT,
            "write_timeout": settings.DB_READ_TIMEOUT,
        }
    return create_engine(
        url,
        echo=settings.SQL_ECHO,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def wait_for_database(engine: Engine, retries: int = 5, backoff_seconds: float = 1.0) -> None:
    """Block until `SELECT 1` succeeds, retrying with exponential backoff.

    Raises `DatabaseUnavailableError` once `retries` attempts have failed.
    """
    delay = backoff_seconds
    for attempt in range(1, retries + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return
        except SQLAlchemyError as exc:
            logger.warning("database not reachable (attempt %d/%d): %s", attempt, retries, exc)
            if attempt == retries:
                raise DatabaseUnavailableError(
                    f"database unreachable after {retries} attempts"
                ) from exc
            time.sleep(delay)
            delay *= 2


def create_db_and_tables(engine: Engine):
    """Create missing tables from SQLModel metadata.

    Existing tables are left untouched, matching the "update if missing"
    schema mode the service has always been deployed with.
    """
    SQLModel.metadata.create_all(engine)


def get_session(request: Request):
    """Yield a database `Session` for FastAPI dependency injection.

    The session is bound to the engine of the app serving the request
    and is closed (rolling back anything uncommitted) when the request
    scope finishes.
    """
    with Session(request.app.state.engine) as session:
        yield session
