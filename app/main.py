from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

_INT_SETTINGS = (
    "MEDICINES_IMPORT_MAX_WORKERS",
    "MEDICINES_IMPORT_BATCH_SIZE",
    "MEDICINES_IMPORT_ERROR_PREVIEW",
    "MEDICINES_DEFAULT_PAGE_SIZE",
    "MEDICINES_MAX_PAGE_SIZE",
    "MEDICINES_STATEMENT_TIMEOUT_MS",
)


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.
    """

    from db.config import load_env_files, resolve_database_url

    load_env_files()

    errors: list[str] = []

    try:
        resolve_database_url()
    except RuntimeError as exc:
        errors.append(str(exc))

    for name in _INT_SETTINGS:
        raw = os.getenv(name, "").strip()
        if not raw:
            continue
        try:
            int(raw)
        except ValueError:
            errors.append(f"{name}='{raw}' is not an integer.")

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    if not isinstance(getattr(logging, log_level, None), int):
        errors.append(f"LOG_LEVEL='{log_level}' is not a valid logging level.")

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    from app.config import get_log_level

    logging.basicConfig(
        level=getattr(logging, get_log_level(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Compare Base.metadata table names against the live DB schema.

    Every table registered on Base.metadata must exist in the database.
    If any are missing, log a critical error and abort startup so that
    the operator is forced to run migrations before serving traffic.

    Does NOT auto-migrate.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        log = logging.getLogger(__name__)
        log.critical(
            "Schema mismatch: %d table(s) defined in ORM metadata are absent from "
            "the database: %s. Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema on boot; dispose the engine on exit."""
    from db.session import get_engine

    _check_db()
    logging.getLogger(__name__).info("Database connectivity confirmed")
    _check_schema()
    logging.getLogger(__name__).info("Database schema validated")
    try:
        yield
    finally:
        get_engine().dispose()
        logging.getLogger(__name__).info("Database engine disposed")


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logging.getLogger(__name__).exception(
        "Unhandled error method=%s path=%s",
        request.method,
        request.url.path,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="EMA Medicines API",
        version="1.0.0",
        lifespan=_lifespan,
    )
    application.add_exception_handler(Exception, _unhandled_exception_handler)

    from app.api.routers import health_router, medicines_router

    application.include_router(health_router)
    application.include_router(medicines_router)

    return application


app = create_app()
