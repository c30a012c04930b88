"""
app/api/routers/medicines.py

Medicines query and import HTTP endpoints.

Static paths (``/stats``, ``/fields/...``, ``/import``) are declared before
``/{medicine_id}`` so they are not captured as ids.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, UploadFile, status
from sqlalchemy.orm import Session, sessionmaker

from app.api.dependencies import get_csv_upload, get_medicine_query_service
from app.errors import (
    CSVParseError,
    CSVReadError,
    InvalidFieldError,
    MedicineNotFoundError,
    PersistenceError,
)
from app.schemas.medicines import (
    FieldValuesResponse,
    ImportOutcomeResponse,
    MedicineResponse,
    PaginatedMedicinesResponse,
    PaginationMetadataResponse,
    StatsResponse,
)
from app.services.medicine_import_service import MedicineImportService, get_medicine_import_service
from app.services.medicine_query_service import MedicineQueryService
from app.services.pagination import DEFAULT_PAGE, MAX_PAGE_SIZE
from db.session import get_session_factory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/medicines", tags=["medicines"])

DATABASE_ERROR_DETAIL = "Database error occurred"
MAX_MEDICINE_ID = 2**63 - 1


def _parse_medicine_id(raw: str) -> int | None:
    """Plain ASCII digits within the signed 64-bit range, else ``None``."""
    if not (raw.isascii() and raw.isdigit()):
        return None
    identity = int(raw)
    return identity if identity <= MAX_MEDICINE_ID else None


def _database_error(exc: PersistenceError) -> HTTPException:
    logger.error("Medicines request failed: %s", exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=DATABASE_ERROR_DETAIL,
    )


@router.get("", response_model=PaginatedMedicinesResponse)
def list_medicines(
    request: Request,
    page: int = Query(default=DEFAULT_PAGE, ge=1, description="1-based page number"),
    page_size: int | None = Query(
        default=None,
        alias="pageSize",
        ge=1,
        le=MAX_PAGE_SIZE,
        description="Rows per page",
    ),
    query_service: MedicineQueryService = Depends(get_medicine_query_service),
) -> PaginatedMedicinesResponse:
    """
    List medicines filtered by any field name, date bounds, or a global search.
    """

    try:
        result = query_service.list_medicines(
            dict(request.query_params),
            page=page,
            page_size=page_size,
        )
    except PersistenceError as exc:
        raise _database_error(exc) from exc

    metadata = result.pagination
    return PaginatedMedicinesResponse(
        data=[MedicineResponse.model_validate(item) for item in result.items],
        pagination=PaginationMetadataResponse(
            page=metadata.page,
            page_size=metadata.page_size,
            total_records=metadata.total_records,
            total_pages=metadata.total_pages,
            has_next_page=metadata.has_next_page,
            has_previous_page=metadata.has_previous_page,
        ),
    )


@router.get("/stats", response_model=StatsResponse)
def medicine_stats(
    query_service: MedicineQueryService = Depends(get_medicine_query_service),
) -> StatsResponse:
    try:
        stats = query_service.stats()
    except PersistenceError as exc:
        raise _database_error(exc) from exc

    return StatsResponse.model_validate(
        {
            "total_medicines": stats.total_medicines,
            "by_category": stats.by_category,
            "by_status": stats.by_status,
        }
    )


@router.get("/fields/{field_name}", response_model=FieldValuesResponse)
def field_values(
    field_name: str,
    query_service: MedicineQueryService = Depends(get_medicine_query_service),
) -> FieldValuesResponse:
    """
    Distinct non-empty values of one field, sorted, for building filter pickers.
    """

    try:
        values = query_service.distinct_values(field_name)
    except InvalidFieldError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid field name",
        ) from exc
    except PersistenceError as exc:
        raise _database_error(exc) from exc

    return FieldValuesResponse(field=field_name, values=values)


@router.post("/import", response_model=ImportOutcomeResponse)
def import_medicines(
    file: UploadFile = Depends(get_csv_upload),
    session_factory: sessionmaker[Session] = Depends(get_session_factory),
    import_service: MedicineImportService = Depends(get_medicine_import_service),
) -> ImportOutcomeResponse:
    """
    Import one EMA medicines CSV report. Rejected rows are reported, not fatal.
    """

    try:
        outcome = import_service.import_stream(file.file, session_factory=session_factory)
    except CSVParseError as exc:
        detail = str(exc) if exc.line_number is None else f"{exc} (line {exc.line_number})"
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        ) from exc
    except CSVReadError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    finally:
        file.file.close()

    return ImportOutcomeResponse.model_validate(outcome.to_dict())


@router.get("/{medicine_id}", response_model=MedicineResponse)
def get_medicine(
    medicine_id: str,
    query_service: MedicineQueryService = Depends(get_medicine_query_service),
) -> MedicineResponse:
    identity = _parse_medicine_id(medicine_id)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid ID",
        )

    try:
        medicine = query_service.get_medicine(identity)
    except MedicineNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Medicine not found",
        ) from exc
    except PersistenceError as exc:
        raise _database_error(exc) from exc

    return MedicineResponse.model_validate(medicine)
