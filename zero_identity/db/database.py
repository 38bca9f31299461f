"""
Database engine and session management.

Builds the SQLAlchemy engine from environment configuration with an in-memory
SQLite fallback for tests, and exposes the session factory used by the
unit of work.
"""
import logging
import os
import sys
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from zero_identity.config import get_settings

logger = logging.getLogger(__name__)

SQLITE_MEMORY_URL = "sqlite+pysqlite:///:memory:"


def _is_pytest_runtime() -> bool:
    """Best-effort detection that we're executing under pytest.

    ``PYTEST_CURRENT_TEST`` is only set while a test runs, so module import
    during collection is detected through ``sys.modules`` instead. The
    ``PYTEST_RUNNING=1`` override allows explicit control.
    """
    if os.getenv("PYTEST_RUNNING") == "1":
        return True
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True
    return "pytest" in sys.modules


def resolve_database_url() -> str:
    """Pick the database URL.

    1. ``ZERO_IDENTITY_TEST_DB`` if set.
    2. ``TEST_DATABASE_URL`` (e2e runs against a real Postgres).
    3. Under pytest, in-memory SQLite.
    4. ``DATABASE_URL`` or the ``POSTGRES_*`` components.
    """
    settings = get_settings()
    if settings.test_database_url:
        return settings.test_database_url
    if os.getenv("TEST_DATABASE_URL"):
        return os.getenv("TEST_DATABASE_URL")
    if _is_pytest_runtime():
        return SQLITE_MEMORY_URL
    return settings.require_database_url()


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    kwargs = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in url or url.rstrip("/").endswith("sqlite:"):
        # Share the single in-memory connection across sessions and worker threads
        kwargs["poolclass"] = StaticPool
    return kwargs


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record):
    # SQLite ignores ON DELETE CASCADE unless enforcement is switched on per connection
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def build_engine(url: Optional[str] = None) -> Engine:
    url = url or resolve_database_url()
    kwargs = _engine_kwargs(url)
    if get_settings().sql_echo:
        kwargs["echo"] = True
    engine = create_engine(url, **kwargs)
    if url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    logger.debug("Created engine for %s", engine.url.render_as_string(hide_password=True))
    return engine


def build_session_factory(bind: Engine) -> sessionmaker:
    # expire_on_commit=False keeps entities readable after their unit of work closes
    return sessionmaker(bind=bind, autocommit=False, autoflush=False, expire_on_commit=False)


def init_schema(bind: Engine) -> None:
    """Create all tables on ``bind``; migrations own the schema outside tests."""
    from zero_identity.db import models  # local import to avoid circular import at module load
    models.Base.metadata.create_all(bind=bind)


engine = build_engine()

# In-memory SQLite has no migrations applied, so create the schema eagerly
if str(engine.url).startswith("sqlite") and ":memory:" in str(engine.url):
    init_schema(engine)

SessionLocal = build_session_factory(engine)


def get_db():
    """Yield a database session and close it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
