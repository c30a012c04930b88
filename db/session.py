"""
db/session.py

SQLAlchemy engine and session factory.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from db.config import resolve_database_url

_SUPPORTED_URL_PREFIXES = ("postgresql", "sqlite")


def _get_bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _validate_env() -> str:
    """Resolve and validate database configuration. Raises if env is misconfigured."""
    return resolve_database_url()


def _is_in_memory_sqlite(database_url: str) -> bool:
    return make_url(database_url).database in {None, "", ":memory:"}


def _install_sqlite_hooks(engine: Engine) -> None:
    """
    Emit BEGIN explicitly on pysqlite connections so SAVEPOINT works, and make
    LIKE case-sensitive to match PostgreSQL.

    Transactions start IMMEDIATE: concurrent writers wait on the busy timeout
    instead of failing with "database is locked".
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA case_sensitive_like = ON")
        finally:
            cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(connection: Any) -> None:
        connection.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(database_url: str | None = None) -> Engine:
    """
    Create an engine for PostgreSQL (psycopg) or SQLite.

    In-memory SQLite URLs share a single connection so every session sees the
    same database.
    """

    url = database_url or _validate_env()
    if not url.startswith(_SUPPORTED_URL_PREFIXES):
        raise RuntimeError("Only PostgreSQL and SQLite URLs are supported.")

    echo = _get_bool_env("SQL_ECHO", default=False)

    if url.startswith("sqlite"):
        options: dict[str, Any] = {
            "echo": echo,
            "connect_args": {"check_same_thread": False},
        }
        if _is_in_memory_sqlite(url):
            options["poolclass"] = StaticPool
        engine = create_engine(url, **options)
        _install_sqlite_hooks(engine)
        return engine

    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=_get_int_env("DB_POOL_RECYCLE", 1800),
        pool_size=_get_int_env("DB_POOL_SIZE", 5),
        max_overflow=_get_int_env("DB_MAX_OVERFLOW", 10),
    )


def shares_single_connection(engine: Engine) -> bool:
    """True when every session checks out the same DBAPI connection (in-memory SQLite)."""
    return isinstance(engine.pool, StaticPool)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        bind=engine,
        class_=Session,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


def create_schema(engine: Engine) -> None:
    """Create every table registered on Base.metadata (local SQLite files and tests)."""
    import db.models  # noqa: F401
    from db.base import Base

    Base.metadata.create_all(engine)


_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Return the shared engine, creating it on first call."""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())
    return _session_factory


def SessionLocal() -> Session:
    """Lazy session factory. Drop-in replacement for a sessionmaker() call."""
    return get_session_factory()()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def __getattr__(name: str) -> object:
    # Provides lazy access to `engine` for callers that import it directly
    # (e.g. `from db.session import engine`). The engine is not created until
    # the attribute is first accessed.
    if name == "engine":
        return get_engine()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
