"""
app/mappers/header_mapper.py

Header normalization and report-column to canonical-field mapping.

The EMA report ships human-readable headers ("Name of medicine",
"International non-proprietary name (INN) / common name", ...). Each header
is normalized into a lookup key and resolved against a fixed table; columns
the table does not know are dropped so new report columns never break an
import.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from app.domain.medicine import CanonicalField, NormalizedRow

_SPACE_RUN = re.compile(r" +")
_STRIPPED_CHARACTERS = re.compile(r"[()/]")

# Keys are exactly what normalize_header() yields for the report headers,
# including the irregular ones ("non-proprietary", "prime:", doubled
# underscores left behind by removed slashes and parentheses).
HEADER_FIELD_MAP: dict[str, CanonicalField] = {
    "category": CanonicalField.CATEGORY,
    "name_of_medicine": CanonicalField.NAME_OF_MEDICINE,
    "ema_product_number": CanonicalField.EMA_PRODUCT_NUMBER,
    "medicine_status": CanonicalField.MEDICINE_STATUS,
    "opinion_status": CanonicalField.OPINION_STATUS,
    "latest_procedure_affecting_product_information": CanonicalField.LATEST_PROCEDURE,
    "international_non-proprietary_name_inn__common_name": CanonicalField.INN,
    "active_substance": CanonicalField.ACTIVE_SUBSTANCE,
    "therapeutic_area_mesh": CanonicalField.THERAPEUTIC_AREA,
    "species_veterinary": CanonicalField.SPECIES_VETERINARY,
    "patient_safety": CanonicalField.PATIENT_SAFETY,
    "atc_code_human": CanonicalField.ATC_CODE_HUMAN,
    "atcvet_code_veterinary": CanonicalField.ATC_VET_CODE,
    "pharmacotherapeutic_group_human": CanonicalField.PHARMACOTHERAPEUTIC_GROUP_HUMAN,
    "pharmacotherapeutic_group_veterinary": CanonicalField.PHARMACOTHERAPEUTIC_GROUP_VET,
    "therapeutic_indication": CanonicalField.THERAPEUTIC_INDICATION,
    "accelerated_assessment": CanonicalField.ACCELERATED_ASSESSMENT,
    "additional_monitoring": CanonicalField.ADDITIONAL_MONITORING,
    "advanced_therapy": CanonicalField.ADVANCED_THERAPY,
    "biosimilar": CanonicalField.BIOSIMILAR,
    "conditional_approval": CanonicalField.CONDITIONAL_APPROVAL,
    "exceptional_circumstances": CanonicalField.EXCEPTIONAL_CIRCUMSTANCES,
    "generic_or_hybrid": CanonicalField.GENERIC_OR_HYBRID,
    "orphan_medicine": CanonicalField.ORPHAN_MEDICINE,
    "prime:_priority_medicine": CanonicalField.PRIME_PRIORITY_MEDICINE,
    "marketing_authorisation_developer__applicant__holder": (
        CanonicalField.MARKETING_AUTHORISATION_DEVELOPER
    ),
    "european_commission_decision_date": CanonicalField.COMMISSION_DECISION_DATE,
    "start_of_rolling_review_date": CanonicalField.START_ROLLING_REVIEW_DATE,
    "start_of_evaluation_date": CanonicalField.START_EVALUATION_DATE,
    "opinion_adopted_date": CanonicalField.OPINION_ADOPTED_DATE,
    "withdrawal_of_application_date": CanonicalField.WITHDRAWAL_APPLICATION_DATE,
    "marketing_authorisation_date": CanonicalField.MARKETING_AUTHORISATION_DATE,
    "refusal_of_marketing_authorisation_date": CanonicalField.REFUSAL_MARKETING_AUTHORISATION_DATE,
    "withdrawal__expiry__revocation__lapse_of_marketing_authorisation_date": (
        CanonicalField.WITHDRAWAL_EXPIRY_REVOCATION_DATE
    ),
    "suspension_of_marketing_authorisation_date": (
        CanonicalField.SUSPENSION_MARKETING_AUTHORISATION_DATE
    ),
    "revision_number": CanonicalField.REVISION_NUMBER,
    "first_published_date": CanonicalField.FIRST_PUBLISHED_DATE,
    "last_updated_date": CanonicalField.LAST_UPDATED_DATE,
    "medicine_url": CanonicalField.MEDICINE_URL,
}


def _check_table_covers_fields(table: Mapping[str, CanonicalField]) -> None:
    mapped = list(table.values())
    missing = [item.value for item in CanonicalField if item not in mapped]
    duplicated = sorted({item.value for item in mapped if mapped.count(item) > 1})
    if missing or duplicated:
        raise RuntimeError(
            f"Header table is inconsistent: missing={missing} duplicated={duplicated}"
        )


_check_table_covers_fields(HEADER_FIELD_MAP)


def normalize_header(header: str) -> str:
    """
    Canonicalize a raw report header into a lookup key.

    Trims, turns newlines into spaces, collapses space runs into one
    underscore, drops parentheses and slashes, lowercases. The trailing trim
    keeps the function idempotent when punctuation removal exposes other
    whitespace at either end.
    """

    key = header.strip().replace("\n", " ")
    key = _SPACE_RUN.sub("_", key)
    key = _STRIPPED_CHARACTERS.sub("", key)
    return key.lower().strip()


class HeaderMapper:
    """
    Resolves report headers to canonical fields and maps raw rows.
    """

    def __init__(self, table: Mapping[str, CanonicalField] | None = None) -> None:
        self._table: dict[str, CanonicalField] = dict(table or HEADER_FIELD_MAP)

    def map_header(self, header: str) -> CanonicalField | None:
        """
        Return the canonical field for a raw or normalized header, if any.
        """

        return self._table.get(normalize_header(header))

    def unmapped_headers(self, headers: list[str]) -> list[str]:
        return [header for header in headers if self.map_header(header) is None]

    def map_row(self, raw_row: Mapping[str, str | None]) -> NormalizedRow:
        """
        Map one raw CSV row onto canonical fields.

        Empty strings become ``None``; every other value is kept verbatim.
        """

        normalized: NormalizedRow = {}
        for raw_header, raw_value in raw_row.items():
            canonical_field = self.map_header(raw_header)
            if canonical_field is None:
                continue
            normalized[canonical_field] = None if raw_value == "" else raw_value
        return normalized
