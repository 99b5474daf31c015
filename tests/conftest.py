"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Generator

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from pastebin.db import Base, build_engine
from pastebin.repositories import records as _records  # noqa: F401
from pastebin.repositories.base import PasteStore
from pastebin.repositories.memory import InMemoryPasteStore
from pastebin.repositories.paste_repository import SqlAlchemyPasteStore


T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture(scope="function")
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory SQLite engine for each test function."""

    engine = build_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sql_store(engine: Engine) -> SqlAlchemyPasteStore:
    session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    return SqlAlchemyPasteStore(session_factory=session_factory)


@pytest.fixture
def memory_store() -> InMemoryPasteStore:
    return InMemoryPasteStore()


@pytest.fixture(params=["memory", "sqlalchemy"])
def store(request: pytest.FixtureRequest) -> PasteStore:
    """Each engine test runs once per storage backend."""

    if request.param == "memory":
        return request.getfixturevalue("memory_store")
    return request.getfixturevalue("sql_store")
