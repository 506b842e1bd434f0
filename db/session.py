"""
db/session.py

SQLAlchemy engine and lazily-created session factory for the ledger store.

Nothing here touches the database at import time; the engine is built on
the first session so tests and the dry-run CLI never need a live server.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import redact_database_url, resolve_database_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineSettings:
    url: str
    echo: bool = False
    pool_recycle: int = 1800
    pool_size: int = 5
    max_overflow: int = 10

    @classmethod
    def from_env(cls) -> "EngineSettings":
        def _int(name: str, default: int) -> int:
            try:
                return int(os.getenv(name, str(default)))
            except ValueError:
                return default

        return cls(
            url=resolve_database_url(),
            echo=os.getenv("SQL_ECHO", "").strip().lower() in {"1", "true", "yes", "on"},
            pool_recycle=_int("DB_POOL_RECYCLE", 1800),
            pool_size=_int("DB_POOL_SIZE", 5),
            max_overflow=_int("DB_MAX_OVERFLOW", 10),
        )


def create_db_engine(settings: EngineSettings | None = None) -> Engine:
    resolved = settings or EngineSettings.from_env()
    if not resolved.url.startswith("postgresql"):
        raise RuntimeError("Only PostgreSQL URLs are supported.")

    logger.info("Creating ledger engine url=%s", redact_database_url(resolved.url))
    return create_engine(
        resolved.url,
        echo=resolved.echo,
        pool_pre_ping=True,
        pool_recycle=resolved.pool_recycle,
        pool_size=resolved.pool_size,
        max_overflow=resolved.max_overflow,
    )


_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def get_engine() -> Engine:
    """Return the shared engine, creating it on first call."""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def SessionLocal() -> Session:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            class_=Session,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_factory()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    One session for a background job or CLI run; always closed on exit.

    Commit and rollback stay with the unit of work using the session.
    """

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding one session per request."""
    with session_scope() as db:
        yield db
