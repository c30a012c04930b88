"""
Shared exceptions for the medicines import and query flows.

Import-run errors (``CSVReadError``, ``CSVParseError``) abort a whole import.
Row errors (``RowValidationError``, ``PersistenceError`` raised while writing)
are folded into the import outcome. ``InvalidFieldError`` and
``MedicineNotFoundError`` are client errors on the query path.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any


class MedicinesError(Exception):
    """Base exception for medicines import and query failures."""


class CSVReadError(MedicinesError):
    """Raised when the CSV source cannot be read or decoded."""


class CSVParseError(MedicinesError, ValueError):
    """
    Raised when CSV content is syntactically malformed.
    """

    def __init__(self, message: str, *, line_number: int | None = None) -> None:
        super().__init__(message)
        self.line_number = line_number


@dataclass(frozen=True)
class FieldIssue:
    """
    One schema violation detected on a row.
    """

    field: str | None
    message: str


class RowValidationError(MedicinesError, ValueError):
    """
    Raised when a normalized row does not conform to the medicine schema.

    Carries the full offending row, not just the failing field.
    """

    def __init__(self, *, row: Mapping[Any, str | None], issues: Sequence[FieldIssue]) -> None:
        self.row = dict(row)
        self.issues = tuple(issues)
        super().__init__("; ".join(self._describe(issue) for issue in self.issues) or "Invalid row.")

    @staticmethod
    def _describe(issue: FieldIssue) -> str:
        if issue.field is None:
            return issue.message
        return f"{issue.field}: {issue.message}"


class PersistenceError(MedicinesError, RuntimeError):
    """
    Raised when the store rejects a write or a read fails.

    ``row`` is set for write failures during import.
    """

    def __init__(self, message: str, *, row: Mapping[Any, str | None] | None = None) -> None:
        super().__init__(message)
        self.row = dict(row) if row is not None else None


class InvalidFieldError(MedicinesError, ValueError):
    """Raised when a field name is not a recognized medicine field."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"Invalid field name: {field_name!r}")
        self.field_name = field_name


class MedicineNotFoundError(MedicinesError, LookupError):
    """Raised when no medicine exists for the requested identity."""

    def __init__(self, medicine_id: int) -> None:
        super().__init__(f"Medicine not found: {medicine_id}")
        self.medicine_id = medicine_id
