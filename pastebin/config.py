import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    """Base application configuration shared across environments."""

    APP_NAME: str = "pastebin"

    # Database
    SQLALCHEMY_DATABASE_URI: str = os.getenv(
        "DATABASE_URL",
        "sqlite+pysqlite:///pastebin.db",
    )
    SQLALCHEMY_ECHO: bool = False
    CREATE_SCHEMA: bool = True

    # Alembic
    ALEMBIC_CONFIG: str = os.getenv(
        "ALEMBIC_CONFIG",
        str(BASE_DIR / "alembic.ini"),
    )

    # Paste storage backend: "sqlalchemy" or "memory"
    PASTE_STORE: str = os.getenv("PASTE_STORE", "sqlalchemy")

    # Public prefix for share URLs; request host is used when unset.
    BASE_URL: str | None = os.getenv("BASE_URL") or None

    # Honour the X-Test-Now-Ms header for deterministic expiry.
    TEST_MODE: bool = _env_flag("TEST_MODE")

    # Background purge of unavailable pastes; <= 0 disables it.
    PURGE_INTERVAL_SECONDS: float = float(os.getenv("PURGE_INTERVAL_SECONDS", "60"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Other Flask-style config flags
    TESTING: bool = False
    DEBUG: bool = False


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SQLALCHEMY_ECHO = False


class ProductionConfig(BaseConfig):
    DEBUG = False
    CREATE_SCHEMA = False


class TestingConfig(BaseConfig):
    TESTING = True
    TEST_MODE = True
    SQLALCHEMY_ECHO = False

    SQLALCHEMY_DATABASE_URI: str = os.getenv(
        "TEST_DATABASE_URL",
        "sqlite+pysqlite:///:memory:",
    )


CONFIG_BY_NAME = {
    "development": DevelopmentConfig,
    "dev": DevelopmentConfig,
    "production": ProductionConfig,
    "prod": ProductionConfig,
    "testing": TestingConfig,
    "test": TestingConfig,
}


def get_config(env_name: str | None) -> type[BaseConfig]:
    """Return a config class for the given environment name."""
    if not env_name:
        return DevelopmentConfig
    return CONFIG_BY_NAME.get(env_name, DevelopmentConfig)
