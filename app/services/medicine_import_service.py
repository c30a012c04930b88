"""
app/services/medicine_import_service.py

Service layer for the medicines CSV import workflow.

Pipeline per data row:

    1. HeaderMapper.map_row          raw headers -> canonical fields
    2. MedicineRowValidator.validate normalized row -> MedicineInput
    3. MedicineRepository.add        one INSERT inside a row SAVEPOINT

Reading and parsing failures abort the run. Row failures are recorded and
never abort sibling rows. Rows are processed in batches by a bounded worker
pool, reduced to one worker when the engine shares a single connection.
Each batch owns one session and one transaction, and per-row results are
folded into an ``ImportOutcome`` once every batch has finished.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from os import PathLike
from typing import BinaryIO

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_medicine_import_settings
from app.domain.medicine import (
    ImportOutcome,
    RowFailure,
    RowFailureKind,
    RowResult,
    row_for_display,
)
from app.errors import CSVParseError, CSVReadError, PersistenceError, RowValidationError
from app.logging_utils import log_duration, log_event
from app.mappers.header_mapper import HeaderMapper
from app.repositories.medicine_repository import MedicineRepository
from app.validators.medicine_validator import MedicineRowValidator
from db.session import shares_single_connection

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]
RawRow = dict[str, str]
NumberedRow = tuple[int, RawRow]

_BOM = "\ufeff"


class MedicineImportService:
    """
    Coordinates CSV reading, parsing, mapping, validation, and persistence.
    """

    def __init__(
        self,
        *,
        max_workers: int,
        batch_size: int,
        error_preview_size: int,
        log_row_errors: bool,
        mapper: HeaderMapper | None = None,
        validator: MedicineRowValidator | None = None,
    ) -> None:
        self._max_workers = max(1, max_workers)
        self._batch_size = max(1, batch_size)
        self._error_preview_size = max(0, error_preview_size)
        self._log_row_errors = log_row_errors
        self._mapper = mapper or HeaderMapper()
        self._validator = validator or MedicineRowValidator()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def import_file(
        self,
        path: str | PathLike[str],
        *,
        session_factory: SessionFactory,
    ) -> ImportOutcome:
        """
        Import every data row of the CSV file at ``path``.

        Raises:
            CSVReadError:  the file cannot be opened or is not UTF-8.
            CSVParseError: the content is not well-formed CSV.
        """

        log_event(logger, logging.INFO, "medicines_import_read", source=str(path))
        try:
            with open(path, "rb") as handle:
                content = self.read_source(handle)
        except OSError as exc:
            raise CSVReadError(f"Cannot read CSV file {str(path)!r}: {exc.strerror or exc}") from exc
        return self.import_text(content, session_factory=session_factory)

    def import_stream(
        self,
        stream: BinaryIO,
        *,
        session_factory: SessionFactory,
    ) -> ImportOutcome:
        """
        Import CSV content from an open binary stream (e.g. an upload).
        """

        log_event(logger, logging.INFO, "medicines_import_read", source="stream")
        return self.import_text(self.read_source(stream), session_factory=session_factory)

    def import_text(
        self,
        content: str,
        *,
        session_factory: SessionFactory,
    ) -> ImportOutcome:
        log_event(logger, logging.INFO, "medicines_import_parse", characters=len(content))
        headers, rows = self.parse_csv(content)

        unmapped = self._mapper.unmapped_headers(headers)
        if unmapped:
            logger.debug("Ignoring unmapped CSV headers: %s", unmapped)

        with log_duration(logger, logging.INFO, "medicines_import_process", records=len(rows)):
            results = self.process_rows(rows, session_factory=session_factory)
        outcome = ImportOutcome.from_results(results, preview_size=self._error_preview_size)
        self._log_outcome(outcome)
        return outcome

    # ------------------------------------------------------------------
    # Reading and parsing
    # ------------------------------------------------------------------

    @staticmethod
    def read_source(stream: BinaryIO) -> str:
        """
        Read a whole binary source as UTF-8 text, tolerating a leading BOM.
        """

        try:
            raw = stream.read()
        except OSError as exc:
            raise CSVReadError(f"Cannot read CSV source: {exc}") from exc
        try:
            return raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise CSVReadError("CSV must be UTF-8 encoded.") from exc

    @staticmethod
    def parse_csv(content: str) -> tuple[list[str], list[NumberedRow]]:
        """
        Split CSV text into its header and numbered data rows.

        The first non-blank record is the header. Blank lines are skipped.
        Each data row is paired with the 1-based line on which it starts.

        Raises:
            CSVParseError: empty source, missing header, malformed quoting,
                or a row whose column count differs from the header.
        """

        if content.startswith(_BOM):
            content = content[len(_BOM):]
        if not content.strip():
            raise CSVParseError("CSV source is empty.", line_number=1)

        reader = csv.reader(io.StringIO(content, newline=""), strict=True)
        headers: list[str] | None = None
        rows: list[NumberedRow] = []
        next_line = 1

        try:
            for record in reader:
                start_line = next_line
                next_line = reader.line_num + 1
                if not record:
                    continue
                if headers is None:
                    headers = record
                    continue
                if len(record) != len(headers):
                    raise CSVParseError(
                        f"Expected {len(headers)} columns, found {len(record)}.",
                        line_number=start_line,
                    )
                rows.append((start_line, dict(zip(headers, record))))
        except csv.Error as exc:
            raise CSVParseError(f"Invalid CSV format: {exc}", line_number=reader.line_num) from exc

        if headers is None:
            raise CSVParseError("CSV header row is missing.", line_number=1)

        return headers, rows

    # ------------------------------------------------------------------
    # Row processing
    # ------------------------------------------------------------------

    def process_rows(
        self,
        rows: Sequence[NumberedRow],
        *,
        session_factory: SessionFactory,
    ) -> list[RowResult]:
        """
        Run every row through the pipeline and return one result per row,
        in input order.
        """

        if not rows:
            return []

        batches = [
            rows[start : start + self._batch_size]
            for start in range(0, len(rows), self._batch_size)
        ]
        workers = self._worker_count(len(batches), session_factory)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="medicines-import") as executor:
            batch_results = executor.map(
                lambda batch: self._process_batch(batch, session_factory=session_factory),
                batches,
            )
            return [result for results in batch_results for result in results]

    def _worker_count(self, batch_count: int, session_factory: SessionFactory) -> int:
        bind = getattr(session_factory, "kw", {}).get("bind")
        if isinstance(bind, Engine) and shares_single_connection(bind):
            # One connection cannot carry concurrent transactions.
            return 1
        return min(self._max_workers, batch_count)

    def _process_batch(
        self,
        batch: Sequence[NumberedRow],
        *,
        session_factory: SessionFactory,
    ) -> list[RowResult]:
        results: list[RowResult] = []

        with session_factory() as session:
            repository = MedicineRepository(session)
            try:
                for row_number, raw_row in batch:
                    results.append(self._process_row(session, repository, row_number, raw_row))
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.error(
                    "Medicines batch rolled back first_row=%s rows=%s error=%s",
                    batch[0][0],
                    len(batch),
                    exc.__class__.__name__,
                )
                results = self._fail_pending(batch, results, exc)

        for result in results:
            if result.failure is not None:
                self._record_failure(result.failure)
        return results

    def _process_row(
        self,
        session: Session,
        repository: MedicineRepository,
        row_number: int,
        raw_row: RawRow,
    ) -> RowResult:
        normalized = self._mapper.map_row(raw_row)

        try:
            record = self._validator.validate(normalized)
        except RowValidationError as exc:
            return RowResult(
                row_number=row_number,
                failure=RowFailure(
                    kind=RowFailureKind.VALIDATION,
                    row_number=row_number,
                    message=str(exc),
                    row=row_for_display(exc.row),
                ),
            )

        try:
            with session.begin_nested():
                repository.add(record)
        except PersistenceError as exc:
            return RowResult(
                row_number=row_number,
                failure=RowFailure(
                    kind=RowFailureKind.PERSISTENCE,
                    row_number=row_number,
                    message=str(exc),
                    row=exc.row or row_for_display(normalized),
                ),
            )

        return RowResult(row_number=row_number)

    def _fail_pending(
        self,
        batch: Sequence[NumberedRow],
        results: Sequence[RowResult],
        exc: SQLAlchemyError,
    ) -> list[RowResult]:
        """
        After a batch rollback, every row not already failed is a persistence failure.
        """

        already_failed = {result.row_number: result for result in results if not result.succeeded}
        message = f"Batch transaction failed: {exc.__class__.__name__}"
        failed: list[RowResult] = []
        for row_number, raw_row in batch:
            if row_number in already_failed:
                failed.append(already_failed[row_number])
                continue
            failed.append(
                RowResult(
                    row_number=row_number,
                    failure=RowFailure(
                        kind=RowFailureKind.PERSISTENCE,
                        row_number=row_number,
                        message=message,
                        row=row_for_display(self._mapper.map_row(raw_row)),
                    ),
                )
            )
        return failed

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _record_failure(self, failure: RowFailure) -> None:
        if self._log_row_errors:
            logger.warning(
                "Medicine row rejected row=%s kind=%s message=%s",
                failure.row_number,
                failure.kind,
                failure.message,
            )

    def _log_outcome(self, outcome: ImportOutcome) -> None:
        log_event(
            logger,
            logging.INFO,
            "medicines_import_complete",
            success_count=outcome.success_count,
            error_count=outcome.error_count,
        )
        if outcome.error_count == 0:
            return

        for failure in outcome.errors:
            logger.error(
                "Import error row=%s kind=%s message=%s row_data=%r",
                failure.row_number,
                failure.kind,
                failure.message,
                failure.row,
            )
        remaining = outcome.error_count - len(outcome.errors)
        if remaining > 0:
            logger.error("... and %s more errors", remaining)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_medicine_import_service() -> MedicineImportService:
    """
    Build and cache the import service with env-driven settings.
    """
    settings = get_medicine_import_settings()
    return MedicineImportService(
        max_workers=settings.max_workers,
        batch_size=settings.batch_size,
        error_preview_size=settings.error_preview_size,
        log_row_errors=settings.log_row_errors,
    )
