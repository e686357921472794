"""Shared pytest fixtures for the automation engine tests."""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from db import Base, InMemoryAutomationStore, SqlAlchemyAutomationStore
from factories import NOW


@pytest.fixture
def store() -> InMemoryAutomationStore:
    return InMemoryAutomationStore()


@pytest.fixture
def db_session():
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def sql_store(db_session) -> SqlAlchemyAutomationStore:
    return SqlAlchemyAutomationStore(db_session)


@pytest.fixture
def fixed_clock():
    return lambda: NOW
