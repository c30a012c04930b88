"""
Database location for the medicines store.

The store is PostgreSQL (through psycopg) or a SQLite file. Settings come from
the process environment, topped up from ``.env`` / ``.env.local`` at the
project root.
"""

from __future__ import annotations

import os
from pathlib import Path

ENV_FILES = (".env", ".env.local")
CLOUD_ENVIRONMENTS = frozenset({"prod", "production", "staging", "cloud"})

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_POSTGRES_SCHEMES = ("postgres://", "postgresql://")
_PSYCOPG_SCHEME = "postgresql+psycopg://"


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None

    key, value = (part.strip() for part in line.split("=", 1))
    if not key:
        return None
    return key, value.strip('"').strip("'")


def load_env_files(project_root: Path = _PROJECT_ROOT) -> None:
    """
    Fill unset variables (DATABASE_URL, DB_FILE_NAME, MEDICINES_*, LOG_LEVEL)
    from the project's env files.

    ``.env`` is read before ``.env.local``; the first file to define a key
    wins, and neither overrides the process environment.
    """

    for filename in ENV_FILES:
        env_path = project_root / filename
        if not env_path.is_file():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            entry = _parse_env_line(raw_line)
            if entry is not None:
                os.environ.setdefault(*entry)


def normalize_postgres_url(url: str) -> str:
    """Point postgres URLs at the psycopg driver; other URLs pass through."""

    for scheme in _POSTGRES_SCHEMES:
        if url.startswith(scheme):
            return _PSYCOPG_SCHEME + url[len(scheme) :]
    return url


def sqlite_url_for_file(file_name: str) -> str:
    """
    Build a SQLite URL for a database file path (relative paths stay relative).
    """

    return f"sqlite:///{file_name}"


def _env(name: str) -> str:
    return (os.getenv(name) or "").strip()


def resolve_database_url() -> str:
    """
    Resolve the medicines store URL.

    Priority:
    1) DATABASE_URL
    2) CLOUD_DATABASE_URL when ENVIRONMENT is one of CLOUD_ENVIRONMENTS
    3) LOCAL_DATABASE_URL
    4) DB_FILE_NAME as a SQLite database file
    """

    load_env_files()

    candidates = [_env("DATABASE_URL")]
    if (_env("ENVIRONMENT") or "local").lower() in CLOUD_ENVIRONMENTS:
        candidates.append(_env("CLOUD_DATABASE_URL"))
    candidates.append(_env("LOCAL_DATABASE_URL"))

    for url in candidates:
        if url:
            return normalize_postgres_url(url)

    db_file_name = _env("DB_FILE_NAME")
    if db_file_name:
        return sqlite_url_for_file(db_file_name)

    raise RuntimeError(
        "No database URL configured. Set DATABASE_URL, configure "
        "LOCAL_DATABASE_URL / CLOUD_DATABASE_URL, or set DB_FILE_NAME."
    )
