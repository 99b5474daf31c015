from __future__ import annotations

import os
from typing import Any, Mapping

from flask import Flask
from flask_cors import CORS

from .api.pastes import api_bp
from .config import get_config
from .db import init_db
from .observability import init_observability
from .repositories.base import STORE_EXTENSION_KEY, PasteStore
from .repositories.memory import InMemoryPasteStore
from .repositories.paste_repository import SqlAlchemyPasteStore
from .worker.purge_worker import start_purge_worker


def _build_store(app: Flask) -> PasteStore:
    backend = app.config.get("PASTE_STORE", "sqlalchemy")
    if backend == "memory":
        return InMemoryPasteStore()
    if backend == "sqlalchemy":
        database = init_db(app)
        return SqlAlchemyPasteStore(session_factory=database.session_factory)
    raise RuntimeError(f"Unknown PASTE_STORE backend {backend!r}.")


def create_app(
    env_name: str | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Flask:
    """
    Application factory for the pastebin service.

    The configuration is selected based on the provided ``env_name`` or,
    if not given, the ``APP_ENV`` environment variable (falling back to
    ``development``). ``overrides`` are applied on top of it.
    """
    if env_name is None:
        env_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__)
    app_config = get_config(env_name)
    app.config.from_object(app_config)
    if overrides:
        app.config.update(overrides)

    CORS(app)

    # Initialize infrastructure layers
    init_observability(app)
    app.extensions[STORE_EXTENSION_KEY] = _build_store(app)

    # Register API blueprints
    app.register_blueprint(api_bp)

    # Start background purge worker (disabled in testing)
    if not app.config.get("TESTING", False):
        start_purge_worker(app)

    return app
