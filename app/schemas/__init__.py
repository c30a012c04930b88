"""
app/schemas package marker.
"""

from app.schemas.medicines import (
    FieldValuesResponse,
    HealthResponse,
    ImportErrorResponse,
    ImportOutcomeResponse,
    MedicineResponse,
    PaginatedMedicinesResponse,
    PaginationMetadataResponse,
    StatsResponse,
)

__all__ = [
    "FieldValuesResponse",
    "HealthResponse",
    "ImportErrorResponse",
    "ImportOutcomeResponse",
    "MedicineResponse",
    "PaginatedMedicinesResponse",
    "PaginationMetadataResponse",
    "StatsResponse",
]
