"""
app/domain package marker.
"""

from app.domain.medicine import (
    REQUIRED_FIELDS,
    CanonicalField,
    ImportOutcome,
    MedicineInput,
    NormalizedRow,
    RowFailure,
    RowFailureKind,
    RowResult,
)

__all__ = [
    "REQUIRED_FIELDS",
    "CanonicalField",
    "ImportOutcome",
    "MedicineInput",
    "NormalizedRow",
    "RowFailure",
    "RowFailureKind",
    "RowResult",
]
