"""
Runtime configuration for the identity store.

Values are sourced from environment variables once and cached; call
``reset_settings_cache`` after changing the environment (tests do this).
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional

from zero_identity.errors import ConfigurationError

_POSTGRES_VARS = ("POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_HOST", "POSTGRES_PORT", "POSTGRES_DB")


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str]
    test_database_url: Optional[str]
    store_max_workers: Optional[int]
    sql_echo: bool
    log_level: str
    missing_database_vars: tuple = ()

    def require_database_url(self) -> str:
        """Return the configured database URL or raise listing what is missing."""
        if self.database_url:
            return self.database_url
        missing = ", ".join(self.missing_database_vars or _POSTGRES_VARS)
        raise ConfigurationError(f"Missing required database environment variables: {missing}")


def _normalize_bool(value: str | None, default: bool = False) -> bool:
    """Return normalized boolean from environment-style value."""
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"", "0", "false", "no", "off"}:
        return False
    if normalized in {"1", "true", "yes", "on"}:
        return True
    return default


def _optional_positive_int(var_name: str) -> Optional[int]:
    raw = os.getenv(var_name)
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{var_name} must be an integer, got {raw!r}")
    if value < 1:
        raise ConfigurationError(f"{var_name} must be >= 1, got {value}")
    return value


def _database_url_from_env() -> tuple[Optional[str], List[str]]:
    # An explicit DATABASE_URL wins over the individual components
    if os.getenv("DATABASE_URL"):
        return os.getenv("DATABASE_URL"), []

    values = {name: os.getenv(name) for name in _POSTGRES_VARS}
    missing = [name for name, value in values.items() if not value]
    if missing:
        return None, missing
    return (
        "postgresql://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}".format(**values),
        [],
    )


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """Return the cached settings sourced from the environment."""
    database_url, missing = _database_url_from_env()
    return Settings(
        database_url=database_url,
        test_database_url=os.getenv("ZERO_IDENTITY_TEST_DB") or None,
        store_max_workers=_optional_positive_int("USER_STORE_MAX_WORKERS"),
        sql_echo=_normalize_bool(os.getenv("SQL_ECHO")),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
        missing_database_vars=tuple(missing),
    )


def reset_settings_cache() -> None:
    """Invalidate cached settings (useful for tests)."""
    get_settings.cache_clear()


def configure_logging(level: Optional[str] = None) -> None:
    """Apply ``logging.basicConfig`` using ``LOG_LEVEL`` unless a level is given."""
    level_name = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
