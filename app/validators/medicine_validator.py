"""
app/validators/medicine_validator.py

Row-level schema validation for medicine imports.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from app.domain.medicine import REQUIRED_FIELDS, CanonicalField, MedicineInput
from app.errors import FieldIssue, RowValidationError


class MedicineRowValidator:
    """
    Validates normalized rows against the medicine schema.

    Values stay opaque text of any length. Only shape (known field, text or
    absent) is checked by default; mandatory fields and a length cap are
    opt-in.
    """

    def __init__(
        self,
        *,
        required_fields: Sequence[CanonicalField] = REQUIRED_FIELDS,
        max_value_length: int | None = None,
    ) -> None:
        self._required_fields = tuple(required_fields)
        self._max_value_length = None if max_value_length is None else max(1, max_value_length)

    def validate(self, row: Mapping[Any, Any]) -> MedicineInput:
        """
        Return the validated record, or raise ``RowValidationError`` listing
        every issue found on the row.
        """

        issues: list[FieldIssue] = []
        values: dict[CanonicalField, str | None] = {}

        for key, value in row.items():
            if not isinstance(key, CanonicalField):
                issues.append(FieldIssue(field=str(key), message="Unknown field."))
                continue
            if value is not None and not isinstance(value, str):
                issues.append(
                    FieldIssue(
                        field=key.value,
                        message=f"Expected text, got {type(value).__name__}.",
                    )
                )
                continue
            if self._exceeds_length(value):
                issues.append(
                    FieldIssue(
                        field=key.value,
                        message=f"Value exceeds {self._max_value_length} characters.",
                    )
                )
                continue
            values[key] = value

        for required in self._required_fields:
            if self._is_blank(row.get(required)):
                issues.append(FieldIssue(field=required.value, message="Required value is missing."))

        if issues:
            raise RowValidationError(row=row, issues=issues)

        return MedicineInput(values=values)

    def _exceeds_length(self, value: str | None) -> bool:
        if value is None or self._max_value_length is None:
            return False
        return len(value) > self._max_value_length

    @staticmethod
    def _is_blank(value: Any) -> bool:
        if value is None:
            return True
        return str(value).strip() == ""
