"""
Shared pytest fixtures: an in-memory SQLite store built with the project's
own engine factory, plus small helpers for writing CSV content and seeding
medicines.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Callable, Iterator, Sequence
from typing import Any

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.domain.medicine import CanonicalField
from app.services.medicine_import_service import MedicineImportService
from app.validators.medicine_validator import MedicineRowValidator
from db.models.medicine import Medicine
from db.session import create_db_engine, create_schema, create_session_factory

REPORT_HEADERS: tuple[str, ...] = (
    "Category",
    "Name of medicine",
    "EMA product number",
    "Medicine status",
    "International non-proprietary name (INN) / common name",
    "Active substance",
    "Therapeutic area (MeSH)",
    "Generic or hybrid",
    "PRIME: priority medicine",
    "Marketing authorisation developer / applicant / holder",
    "Marketing authorisation date",
    "Last updated date",
)


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = create_db_engine("sqlite://")
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture()
def session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    with session_factory() as db:
        yield db


@pytest.fixture()
def import_service() -> MedicineImportService:
    """Single worker, small batches so multi-batch paths are exercised."""
    return MedicineImportService(
        max_workers=1,
        batch_size=2,
        error_preview_size=5,
        log_row_errors=False,
    )


@pytest.fixture()
def strict_import_service() -> MedicineImportService:
    """Like ``import_service`` but with category and name made mandatory."""
    return MedicineImportService(
        max_workers=1,
        batch_size=2,
        error_preview_size=5,
        log_row_errors=False,
        validator=MedicineRowValidator(
            required_fields=(CanonicalField.CATEGORY, CanonicalField.NAME_OF_MEDICINE),
        ),
    )


@pytest.fixture()
def make_csv() -> Callable[..., str]:
    def _make_csv(rows: Sequence[Sequence[str]], headers: Sequence[str] = REPORT_HEADERS) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(headers)
        writer.writerows(rows)
        return buffer.getvalue()

    return _make_csv


@pytest.fixture()
def add_medicines(session_factory: sessionmaker[Session]) -> Callable[..., list[int]]:
    """Insert medicines from ORM keyword dicts and return their ids."""

    def _add(*records: dict[str, Any]) -> list[int]:
        with session_factory() as db:
            models = [Medicine(**record) for record in records]
            db.add_all(models)
            db.commit()
            return [model.id for model in models]

    return _add
