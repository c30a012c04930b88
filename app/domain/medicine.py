"""
app/domain/medicine.py

Domain models used by the medicines import and query flows.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CanonicalField(str, Enum):
    """
    Closed set of report attributes stored for one medicine.

    The member value is the public (camelCase) field name used by filters and
    responses; ``attribute`` is the matching ``Medicine`` ORM attribute.
    The store-assigned ``id`` is deliberately not a member.
    """

    CATEGORY = "category"
    NAME_OF_MEDICINE = "nameOfMedicine"
    EMA_PRODUCT_NUMBER = "emaProductNumber"
    MEDICINE_STATUS = "medicineStatus"
    OPINION_STATUS = "opinionStatus"
    LATEST_PROCEDURE = "latestProcedure"
    INN = "inn"
    ACTIVE_SUBSTANCE = "activeSubstance"
    THERAPEUTIC_AREA = "therapeuticArea"
    SPECIES_VETERINARY = "speciesVeterinary"
    PATIENT_SAFETY = "patientSafety"
    ATC_CODE_HUMAN = "atcCodeHuman"
    ATC_VET_CODE = "atcVetCode"
    PHARMACOTHERAPEUTIC_GROUP_HUMAN = "pharmacotherapeuticGroupHuman"
    PHARMACOTHERAPEUTIC_GROUP_VET = "pharmacotherapeuticGroupVet"
    THERAPEUTIC_INDICATION = "therapeuticIndication"
    ACCELERATED_ASSESSMENT = "acceleratedAssessment"
    ADDITIONAL_MONITORING = "additionalMonitoring"
    ADVANCED_THERAPY = "advancedTherapy"
    BIOSIMILAR = "biosimilar"
    CONDITIONAL_APPROVAL = "conditionalApproval"
    EXCEPTIONAL_CIRCUMSTANCES = "exceptionalCircumstances"
    GENERIC_OR_HYBRID = "genericOrHybrid"
    ORPHAN_MEDICINE = "orphanMedicine"
    PRIME_PRIORITY_MEDICINE = "primePriorityMedicine"
    MARKETING_AUTHORISATION_DEVELOPER = "marketingAuthorisationDeveloper"
    COMMISSION_DECISION_DATE = "commissionDecisionDate"
    START_ROLLING_REVIEW_DATE = "startRollingReviewDate"
    START_EVALUATION_DATE = "startEvaluationDate"
    OPINION_ADOPTED_DATE = "opinionAdoptedDate"
    WITHDRAWAL_APPLICATION_DATE = "withdrawalApplicationDate"
    MARKETING_AUTHORISATION_DATE = "marketingAuthorisationDate"
    REFUSAL_MARKETING_AUTHORISATION_DATE = "refusalMarketingAuthorisationDate"
    WITHDRAWAL_EXPIRY_REVOCATION_DATE = "withdrawalExpiryRevocationDate"
    SUSPENSION_MARKETING_AUTHORISATION_DATE = "suspensionMarketingAuthorisationDate"
    REVISION_NUMBER = "revisionNumber"
    FIRST_PUBLISHED_DATE = "firstPublishedDate"
    LAST_UPDATED_DATE = "lastUpdatedDate"
    MEDICINE_URL = "medicineUrl"

    @property
    def attribute(self) -> str:
        return self.name.lower()

    @classmethod
    def from_name(cls, name: str) -> CanonicalField | None:
        """
        Look up a field by its public name; ``None`` when unknown.
        """

        try:
            return cls(name)
        except ValueError:
            return None


# Every column is nullable; callers opt into mandatory fields on the validator.
REQUIRED_FIELDS: tuple[CanonicalField, ...] = ()

NormalizedRow = dict[CanonicalField, str | None]


@dataclass(frozen=True)
class MedicineInput:
    """
    A normalized row that passed validation and is ready for persistence.
    """

    values: Mapping[CanonicalField, str | None]

    def get(self, canonical_field: CanonicalField) -> str | None:
        return self.values.get(canonical_field)

    def to_model_kwargs(self) -> dict[str, str | None]:
        return {
            canonical_field.attribute: value
            for canonical_field, value in self.values.items()
        }


class RowFailureKind:
    VALIDATION = "validation"
    PERSISTENCE = "persistence"


@dataclass(frozen=True)
class RowFailure:
    """
    One row that could not be imported.
    """

    kind: str
    row_number: int
    message: str
    row: dict[str, str | None] = field(default_factory=dict)


@dataclass(frozen=True)
class RowResult:
    """
    Per-row import result: a success, or a failure carrying its detail.
    """

    row_number: int
    failure: RowFailure | None = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class ImportOutcome:
    """
    End-of-run import summary.

    ``error_count`` is exact; ``errors`` holds at most the preview sample.
    """

    success_count: int
    error_count: int
    errors: list[RowFailure] = field(default_factory=list)

    @classmethod
    def from_results(cls, results: Iterable[RowResult], *, preview_size: int) -> ImportOutcome:
        success_count = 0
        error_count = 0
        errors: list[RowFailure] = []
        for result in results:
            if result.succeeded:
                success_count += 1
                continue
            error_count += 1
            if result.failure is not None and len(errors) < preview_size:
                errors.append(result.failure)
        return cls(success_count=success_count, error_count=error_count, errors=errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success_count": self.success_count,
            "error_count": self.error_count,
            "errors": [
                {
                    "kind": error.kind,
                    "row_number": error.row_number,
                    "message": error.message,
                    "row": error.row,
                }
                for error in self.errors
            ],
        }


def row_for_display(row: Mapping[Any, str | None]) -> dict[str, str | None]:
    """
    Key a row by public field names (or the raw key) for logs and responses.
    """

    return {
        (key.value if isinstance(key, CanonicalField) else str(key)): value
        for key, value in row.items()
    }
