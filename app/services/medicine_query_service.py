"""
app/services/medicine_query_service.py

Read-side service: filtered pages, single lookups, distinct field values,
and summary statistics over stored medicines.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Sequence

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_medicine_query_settings
from app.domain.medicine import CanonicalField
from app.errors import InvalidFieldError, MedicineNotFoundError, PersistenceError
from app.repositories.medicine_repository import MedicineRepository
from app.services.filter_builder import MedicineFilterBuilder, medicine_column
from app.services.pagination import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    PageMetadata,
    clamp_page_size,
    paginate,
)
from db.models.medicine import Medicine

logger = logging.getLogger(__name__)

# PostgreSQL query_canceled; raised when statement_timeout fires.
_QUERY_CANCELED_SQLSTATE = "57014"


@dataclass(frozen=True)
class MedicinePage:
    items: Sequence[Medicine]
    pagination: PageMetadata


@dataclass(frozen=True)
class MedicineStats:
    total_medicines: int
    by_category: dict[str, int]
    by_status: dict[str, int]


class MedicineQueryService:
    """
    Composes filter building, pagination, and repository reads.

    Store failures surface as ``PersistenceError``; bad client input as
    ``InvalidFieldError`` or ``MedicineNotFoundError``.
    """

    def __init__(
        self,
        session: Session,
        *,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
        statement_timeout_ms: int = 0,
        filter_builder: MedicineFilterBuilder | None = None,
    ) -> None:
        self._repository = MedicineRepository(session, statement_timeout_ms=statement_timeout_ms)
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size
        self._filter_builder = filter_builder or MedicineFilterBuilder()

    def list_medicines(
        self,
        params: Mapping[str, str | None],
        *,
        page: int = DEFAULT_PAGE,
        page_size: int | None = None,
    ) -> MedicinePage:
        """
        Return one page of medicines matching the filter parameters.

        The count and the page read share the same predicate, so the
        metadata describes exactly the filtered set.
        """

        size = clamp_page_size(page_size, default=self._default_page_size, upper=self._max_page_size)
        page = max(DEFAULT_PAGE, page)
        predicate = self._filter_builder.build(params).to_sql()

        try:
            total = self._repository.count(predicate)
            metadata = paginate(page, size, total)
            items = self._repository.list_page(predicate, offset=metadata.offset, limit=size)
        except SQLAlchemyError as exc:
            raise self._persistence_error("list medicines", exc) from exc

        return MedicinePage(items=items, pagination=metadata)

    def get_medicine(self, medicine_id: int) -> Medicine:
        try:
            medicine = self._repository.get(medicine_id)
        except SQLAlchemyError as exc:
            raise self._persistence_error("load medicine", exc) from exc
        if medicine is None:
            raise MedicineNotFoundError(medicine_id)
        return medicine

    def distinct_values(self, field_name: str) -> list[str]:
        """
        Sorted distinct non-empty values stored for one public field name.
        """

        canonical_field = CanonicalField.from_name(field_name)
        if canonical_field is None:
            raise InvalidFieldError(field_name)
        try:
            return self._repository.distinct_values(medicine_column(canonical_field))
        except SQLAlchemyError as exc:
            raise self._persistence_error("list field values", exc) from exc

    def stats(self) -> MedicineStats:
        try:
            counts = self._repository.counts()
        except SQLAlchemyError as exc:
            raise self._persistence_error("compute stats", exc) from exc

        return MedicineStats(
            total_medicines=counts.total,
            by_category={
                "human": counts.human,
                "veterinary": counts.veterinary,
            },
            by_status={
                "authorised": counts.authorised,
                "withdrawn": counts.withdrawn,
                "refused": counts.refused,
            },
        )

    @staticmethod
    def _persistence_error(action: str, exc: SQLAlchemyError) -> PersistenceError:
        if _is_statement_timeout(exc):
            logger.warning("Medicines query timed out action=%s", action)
            return PersistenceError(f"Timed out while trying to {action}.")
        logger.exception("Medicines query failed action=%s", action)
        return PersistenceError(f"Failed to {action}.")


def _is_statement_timeout(exc: SQLAlchemyError) -> bool:
    if not isinstance(exc, DBAPIError):
        return False
    return getattr(exc.orig, "sqlstate", None) == _QUERY_CANCELED_SQLSTATE


def get_medicine_query_service(session: Session) -> MedicineQueryService:
    """
    Build a query service bound to ``session`` with env-driven settings.
    """
    settings = get_medicine_query_settings()
    return MedicineQueryService(
        session,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
        statement_timeout_ms=settings.statement_timeout_ms,
    )
