"""
app/repositories/medicine_repository.py

Persistence layer for medicine records.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import ColumnElement, Text, case, func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.medicine import MedicineInput, row_for_display
from app.errors import PersistenceError
from db.models.medicine import Medicine, MedicineCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MedicineCounts:
    total: int
    human: int
    veterinary: int
    authorised: int
    withdrawn: int
    refused: int


class MedicineRepository:
    """
    Repository for append-only writes and filtered reads of medicines.

    Read methods take an already-compiled boolean predicate and leave error
    translation to the caller; ``add`` wraps store failures itself so a
    rejected row can be reported with its payload.
    """

    def __init__(self, session: Session, *, statement_timeout_ms: int = 0) -> None:
        self._session = session
        self._statement_timeout_ms = max(0, statement_timeout_ms)

    def add(self, record: MedicineInput) -> Medicine:
        """
        Insert one validated record and flush it so constraint errors surface here.
        """

        model = Medicine(**record.to_model_kwargs())
        try:
            self._session.add(model)
            self._session.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"Failed to insert medicine: {exc.__class__.__name__}",
                row=row_for_display(record.values),
            ) from exc
        return model

    def count(self, predicate: ColumnElement[bool]) -> int:
        self._apply_statement_timeout()
        stmt = select(func.count()).select_from(Medicine).where(predicate)
        return int(self._session.scalar(stmt) or 0)

    def list_page(
        self,
        predicate: ColumnElement[bool],
        *,
        offset: int,
        limit: int,
    ) -> Sequence[Medicine]:
        self._apply_statement_timeout()
        stmt = (
            select(Medicine)
            .where(predicate)
            .order_by(Medicine.id)
            .offset(offset)
            .limit(limit)
        )
        return self._session.scalars(stmt).all()

    def get(self, medicine_id: int) -> Medicine | None:
        self._apply_statement_timeout()
        return self._session.get(Medicine, medicine_id)

    def distinct_values(self, column: ColumnElement[str]) -> list[str]:
        """
        Sorted distinct non-empty values of one column.
        """

        self._apply_statement_timeout()
        stmt = (
            select(column)
            .where(column.is_not(None), column != "")
            .distinct()
            .order_by(column)
        )
        return [value for value in self._session.scalars(stmt).all() if value is not None]

    def counts(self) -> MedicineCounts:
        """
        Total plus category and status breakdowns in a single scan.
        """

        self._apply_statement_timeout()
        status = func.lower(Medicine.medicine_status, type_=Text)
        stmt = select(
            func.count(Medicine.id),
            func.count(case((Medicine.category == MedicineCategory.HUMAN, 1))),
            func.count(case((Medicine.category == MedicineCategory.VETERINARY, 1))),
            func.count(case((status.like("authorised%"), 1))),
            func.count(case((status.like("%withdrawn%"), 1))),
            func.count(case((status.like("%refused%"), 1))),
        )
        total, human, veterinary, authorised, withdrawn, refused = self._session.execute(stmt).one()
        return MedicineCounts(
            total=int(total or 0),
            human=int(human or 0),
            veterinary=int(veterinary or 0),
            authorised=int(authorised or 0),
            withdrawn=int(withdrawn or 0),
            refused=int(refused or 0),
        )

    def _apply_statement_timeout(self) -> None:
        if self._statement_timeout_ms <= 0:
            return
        if self._session.get_bind().dialect.name != "postgresql":
            return
        # Transaction-local; reset when the read transaction ends.
        self._session.execute(
            text("SELECT set_config('statement_timeout', :timeout, true)"),
            {"timeout": f"{self._statement_timeout_ms}ms"},
        )
