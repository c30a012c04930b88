"""
app/schemas/medicines.py

Response schemas for medicines endpoints.

Fields are declared in snake_case and serialized with camelCase aliases, so
public keys match the filter parameter names (``nameOfMedicine`` etc.).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MedicineResponse(CamelModel):
    """
    API response model for one stored medicine.
    """

    id: int = Field(..., ge=1)
    category: str | None = None
    name_of_medicine: str | None = None
    ema_product_number: str | None = None
    medicine_status: str | None = None
    opinion_status: str | None = None
    latest_procedure: str | None = None
    inn: str | None = None
    active_substance: str | None = None
    therapeutic_area: str | None = None
    species_veterinary: str | None = None
    patient_safety: str | None = None
    atc_code_human: str | None = None
    atc_vet_code: str | None = None
    pharmacotherapeutic_group_human: str | None = None
    pharmacotherapeutic_group_vet: str | None = None
    therapeutic_indication: str | None = None
    accelerated_assessment: str | None = None
    additional_monitoring: str | None = None
    advanced_therapy: str | None = None
    biosimilar: str | None = None
    conditional_approval: str | None = None
    exceptional_circumstances: str | None = None
    generic_or_hybrid: str | None = None
    orphan_medicine: str | None = None
    prime_priority_medicine: str | None = None
    marketing_authorisation_developer: str | None = None
    commission_decision_date: str | None = None
    start_rolling_review_date: str | None = None
    start_evaluation_date: str | None = None
    opinion_adopted_date: str | None = None
    withdrawal_application_date: str | None = None
    marketing_authorisation_date: str | None = None
    refusal_marketing_authorisation_date: str | None = None
    withdrawal_expiry_revocation_date: str | None = None
    suspension_marketing_authorisation_date: str | None = None
    revision_number: str | None = None
    first_published_date: str | None = None
    last_updated_date: str | None = None
    medicine_url: str | None = None


class PaginationMetadataResponse(CamelModel):
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    total_records: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=1)
    has_next_page: bool
    has_previous_page: bool


class PaginatedMedicinesResponse(CamelModel):
    """
    API response model for one page of filtered medicines.
    """

    data: list[MedicineResponse] = Field(default_factory=list)
    pagination: PaginationMetadataResponse


class FieldValuesResponse(CamelModel):
    field: str
    values: list[str] = Field(default_factory=list)


class CategoryCountsResponse(CamelModel):
    human: int = Field(..., ge=0)
    veterinary: int = Field(..., ge=0)


class StatusCountsResponse(CamelModel):
    authorised: int = Field(..., ge=0)
    withdrawn: int = Field(..., ge=0)
    refused: int = Field(..., ge=0)


class StatsResponse(CamelModel):
    """
    API response model for medicine summary statistics.
    """

    total_medicines: int = Field(..., ge=0)
    by_category: CategoryCountsResponse
    by_status: StatusCountsResponse


class HealthResponse(CamelModel):
    status: str
    timestamp: datetime


class ImportErrorResponse(CamelModel):
    """
    API response model for one rejected CSV row.
    """

    kind: str
    row_number: int = Field(..., ge=1)
    message: str
    row: dict[str, str | None] = Field(default_factory=dict)


class ImportOutcomeResponse(CamelModel):
    """
    API response model for a medicines CSV import.
    """

    success_count: int = Field(..., ge=0)
    error_count: int = Field(..., ge=0)
    errors: list[ImportErrorResponse] = Field(default_factory=list)
