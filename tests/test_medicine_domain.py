"""
tests/test_medicine_domain.py

Pytest unit tests for canonical fields and import outcome folding.
"""

from __future__ import annotations

import pytest

from app.domain.medicine import (
    CanonicalField,
    ImportOutcome,
    RowFailure,
    RowFailureKind,
    RowResult,
    row_for_display,
)
from db.models.medicine import Medicine


def _failure(row_number: int) -> RowResult:
    return RowResult(
        row_number=row_number,
        failure=RowFailure(
            kind=RowFailureKind.VALIDATION,
            row_number=row_number,
            message="category: Required value is missing.",
        ),
    )


class TestCanonicalField:
    def test_every_field_has_an_orm_attribute(self) -> None:
        for canonical_field in CanonicalField:
            assert hasattr(Medicine, canonical_field.attribute), canonical_field

    def test_identity_is_not_a_field(self) -> None:
        assert CanonicalField.from_name("id") is None

    def test_from_name(self) -> None:
        assert CanonicalField.from_name("therapeuticArea") is CanonicalField.THERAPEUTIC_AREA
        assert CanonicalField.from_name("therapeutic_area") is None

    def test_field_count(self) -> None:
        assert len(CanonicalField) == 39


class TestImportOutcome:
    def test_counts_are_exact_and_preview_is_capped(self) -> None:
        results = [RowResult(row_number=n) for n in range(2, 12)]
        results += [_failure(n) for n in range(12, 20)]

        outcome = ImportOutcome.from_results(results, preview_size=5)

        assert outcome.success_count == 10
        assert outcome.error_count == 8
        assert [error.row_number for error in outcome.errors] == [12, 13, 14, 15, 16]

    def test_counts_sum_to_rows(self) -> None:
        results = [RowResult(row_number=2), _failure(3), RowResult(row_number=4)]

        outcome = ImportOutcome.from_results(results, preview_size=5)

        assert outcome.success_count + outcome.error_count == len(results)

    def test_empty_run(self) -> None:
        outcome = ImportOutcome.from_results([], preview_size=5)

        assert (outcome.success_count, outcome.error_count, outcome.errors) == (0, 0, [])

    def test_zero_preview(self) -> None:
        outcome = ImportOutcome.from_results([_failure(2)], preview_size=0)

        assert outcome.error_count == 1
        assert outcome.errors == []

    def test_to_dict(self) -> None:
        outcome = ImportOutcome.from_results([_failure(7)], preview_size=5)

        payload = outcome.to_dict()

        assert payload["error_count"] == 1
        assert payload["errors"][0]["row_number"] == 7
        assert payload["errors"][0]["kind"] == "validation"

    def test_outcome_is_frozen(self) -> None:
        outcome = ImportOutcome(success_count=1, error_count=0)
        with pytest.raises((AttributeError, TypeError)):
            outcome.success_count = 2  # type: ignore[misc]


def test_row_for_display_uses_public_names() -> None:
    row = row_for_display({CanonicalField.NAME_OF_MEDICINE: "Abilify", "extra": None})

    assert row == {"nameOfMedicine": "Abilify", "extra": None}
