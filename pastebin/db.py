from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from flask import Flask
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool


Base = declarative_base()

EXTENSION_KEY = "pastebin.db"


@dataclass
class Database:
    """Engine and session factory owned by one Flask app."""

    engine: Engine
    session_factory: sessionmaker[Session]

    def dispose(self) -> None:
        self.engine.dispose()


def build_engine(database_uri: str, *, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine for ``database_uri``.

    In-memory SQLite databases get a single shared connection so that every
    session sees the same schema and rows.
    """
    kwargs: dict[str, Any] = {"future": True, "echo": echo}
    if database_uri.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_uri or database_uri.rstrip("/").endswith("sqlite:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_uri, **kwargs)


def get_database(app: Flask) -> Database:
    """
    Return the database attached to ``app``.

    This expects that ``init_db(app)`` has been called during application
    startup to configure the engine from Flask config.
    """
    database = app.extensions.get(EXTENSION_KEY)
    if database is None:
        raise RuntimeError("Database engine is not initialized. Call init_db(app) first.")
    return database


def init_db(app: Flask) -> Database:
    """
    Initialize the SQLAlchemy engine and session factory for the Flask app.

    Reads the database URL from ``app.config['SQLALCHEMY_DATABASE_URI']`` and
    creates the schema directly when ``CREATE_SCHEMA`` is set (otherwise
    Alembic owns it).
    """
    database_uri = app.config.get("SQLALCHEMY_DATABASE_URI")
    if not database_uri:
        raise RuntimeError(
            "SQLALCHEMY_DATABASE_URI is not configured on the Flask app."
        )

    engine = build_engine(database_uri, echo=app.config.get("SQLALCHEMY_ECHO", False))
    database = Database(
        engine=engine,
        session_factory=sessionmaker(bind=engine, autoflush=False, expire_on_commit=False),
    )

    if app.config.get("CREATE_SCHEMA", False):
        # Register the mapped tables on Base.metadata.
        from pastebin.repositories import records as _records  # noqa: F401

        Base.metadata.create_all(engine)

    app.extensions[EXTENSION_KEY] = database
    return database


def close_db(app: Flask) -> None:
    """Dispose of the app's engine and its pooled connections."""
    database = app.extensions.pop(EXTENSION_KEY, None)
    if database is not None:
        database.dispose()
