"""
Database session management.

Builds the SQLAlchemy engine from settings on first use and exposes a session
factory plus a context manager for synchronous callers such as the CLI and the
due-date scanner.
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from config import settings

from .models import Base


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    if database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, future=True)
    return create_engine(
        database_url,
        echo=echo,
        future=True,
        pool_pre_ping=True,
        pool_recycle=1800,
    )


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine(settings.database_url, echo=settings.sql_echo)


def make_session_factory(engine: Engine | None = None) -> sessionmaker:
    return sessionmaker(bind=engine or get_engine(), autocommit=False, autoflush=False, future=True)


def create_schema(engine: Engine | None = None) -> None:
    Base.metadata.create_all(engine or get_engine())


class SessionContext:
    """Context manager for database sessions."""

    def __init__(self, factory: sessionmaker | None = None) -> None:
        self._factory = factory

    def __enter__(self) -> Session:
        factory = self._factory or make_session_factory()
        self.db = factory()
        return self.db

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.db.close()
