"""
app/services/filter_builder.py

Builds medicine list filters from an open set of request parameters.

Composition (all clauses AND-ed, in this order):

    1. ``<field>=value``        literal, case-sensitive substring match on
                                that canonical field
    2. ``<date>From / <date>To`` inclusive lexical bounds on the two date
                                fields exposed for range filtering
    3. ``search=value``         OR of substring matches across the
                                free-text search fields

Reserved parameter names never act as field filters, unknown names and
blank values are ignored, and an empty predicate means "match all".
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Union

from sqlalchemy import ColumnElement, and_, or_, true

from app.domain.medicine import CanonicalField
from db.models.medicine import Medicine

PAGE_PARAMETER = "page"
PAGE_SIZE_PARAMETER = "pageSize"
SEARCH_PARAMETER = "search"


class FilterOperator(str, Enum):
    CONTAINS = "contains"
    GTE = "gte"
    LTE = "lte"


DATE_RANGE_PARAMETERS: dict[str, tuple[CanonicalField, FilterOperator]] = {
    "marketingAuthorisationDateFrom": (CanonicalField.MARKETING_AUTHORISATION_DATE, FilterOperator.GTE),
    "marketingAuthorisationDateTo": (CanonicalField.MARKETING_AUTHORISATION_DATE, FilterOperator.LTE),
    "lastUpdatedDateFrom": (CanonicalField.LAST_UPDATED_DATE, FilterOperator.GTE),
    "lastUpdatedDateTo": (CanonicalField.LAST_UPDATED_DATE, FilterOperator.LTE),
}

RESERVED_PARAMETERS: frozenset[str] = frozenset(
    {PAGE_PARAMETER, PAGE_SIZE_PARAMETER, SEARCH_PARAMETER, *DATE_RANGE_PARAMETERS}
)

SEARCH_FIELDS: tuple[CanonicalField, ...] = (
    CanonicalField.NAME_OF_MEDICINE,
    CanonicalField.INN,
    CanonicalField.ACTIVE_SUBSTANCE,
    CanonicalField.THERAPEUTIC_AREA,
    CanonicalField.THERAPEUTIC_INDICATION,
    CanonicalField.MARKETING_AUTHORISATION_DEVELOPER,
    CanonicalField.EMA_PRODUCT_NUMBER,
)


def medicine_column(canonical_field: CanonicalField) -> ColumnElement[str]:
    return getattr(Medicine, canonical_field.attribute)


@dataclass(frozen=True)
class FieldCondition:
    """
    One ``(field, operator, value)`` leaf of a filter predicate.
    """

    field: CanonicalField
    operator: FilterOperator
    value: str

    def to_sql(self) -> ColumnElement[bool]:
        column = medicine_column(self.field)
        if self.operator is FilterOperator.CONTAINS:
            return column.contains(self.value, autoescape=True)
        if self.operator is FilterOperator.GTE:
            return column >= self.value
        return column <= self.value


@dataclass(frozen=True)
class AnyOf:
    """
    OR-group of conditions.
    """

    conditions: tuple[FieldCondition, ...]

    def to_sql(self) -> ColumnElement[bool]:
        return or_(*(condition.to_sql() for condition in self.conditions))


Clause = Union[FieldCondition, AnyOf]


@dataclass(frozen=True)
class FilterPredicate:
    """
    AND of clauses; no clauses matches every row.
    """

    clauses: tuple[Clause, ...] = ()

    @property
    def is_match_all(self) -> bool:
        return not self.clauses

    def to_sql(self) -> ColumnElement[bool]:
        if self.is_match_all:
            return true()
        return and_(*(clause.to_sql() for clause in self.clauses))


class MedicineFilterBuilder:
    """
    Folds request parameters into a ``FilterPredicate``.
    """

    def __init__(self, *, search_fields: tuple[CanonicalField, ...] = SEARCH_FIELDS) -> None:
        self._search_fields = search_fields

    def build(self, params: Mapping[str, str | None]) -> FilterPredicate:
        clauses: list[Clause] = []

        for name, value in params.items():
            if name in RESERVED_PARAMETERS or not value:
                continue
            canonical_field = CanonicalField.from_name(name)
            if canonical_field is None:
                continue
            clauses.append(FieldCondition(canonical_field, FilterOperator.CONTAINS, value))

        for name, (canonical_field, operator) in DATE_RANGE_PARAMETERS.items():
            bound = params.get(name)
            if bound:
                clauses.append(FieldCondition(canonical_field, operator, bound))

        search = params.get(SEARCH_PARAMETER)
        if search:
            clauses.append(
                AnyOf(
                    tuple(
                        FieldCondition(canonical_field, FilterOperator.CONTAINS, search)
                        for canonical_field in self._search_fields
                    )
                )
            )

        return FilterPredicate(clauses=tuple(clauses))


def build_medicine_filter(params: Mapping[str, str | None]) -> FilterPredicate:
    return MedicineFilterBuilder().build(params)
