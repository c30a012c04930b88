"""
tests/test_medicine_query_service.py

Pytest tests for list, lookup, distinct-values, and stats reads.
"""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.errors import InvalidFieldError, MedicineNotFoundError, PersistenceError
from app.repositories.medicine_repository import MedicineRepository
from app.services.medicine_query_service import MedicineQueryService


@pytest.fixture()
def ids(add_medicines) -> list[int]:
    return add_medicines(
        {"category": "Human", "name_of_medicine": "Abilify", "medicine_status": "Authorised",
         "therapeutic_area": "Schizophrenia"},
        {"category": "Human", "name_of_medicine": "Zyprexa", "medicine_status": "authorised",
         "therapeutic_area": "Bipolar Disorder"},
        {"category": "Veterinary", "name_of_medicine": "Bravecto", "medicine_status": "Authorised",
         "therapeutic_area": ""},
        {"category": "Human", "name_of_medicine": "Nexavar", "medicine_status": "Withdrawn",
         "therapeutic_area": "Carcinoma, Hepatocellular"},
        {"category": "Human", "name_of_medicine": "Refusex", "medicine_status": "Refused",
         "therapeutic_area": None},
        {"category": "Veterinary", "name_of_medicine": "Oldvet", "medicine_status": "Application withdrawn",
         "therapeutic_area": "Schizophrenia"},
    )


@pytest.fixture()
def service(session: Session) -> MedicineQueryService:
    return MedicineQueryService(session, default_page_size=50, max_page_size=100)


@pytest.mark.usefixtures("ids")
class TestListMedicines:
    def test_page_and_metadata(self, service: MedicineQueryService) -> None:
        page = service.list_medicines({}, page=2, page_size=4)

        assert [item.name_of_medicine for item in page.items] == ["Refusex", "Oldvet"]
        assert page.pagination.total_records == 6
        assert page.pagination.total_pages == 2
        assert page.pagination.has_previous_page is True
        assert page.pagination.has_next_page is False

    def test_defaults(self, service: MedicineQueryService) -> None:
        page = service.list_medicines({})

        assert page.pagination.page == 1
        assert page.pagination.page_size == 50
        assert len(page.items) == 6

    def test_page_size_is_clamped(self, service: MedicineQueryService) -> None:
        assert service.list_medicines({}, page_size=1000).pagination.page_size == 100

    def test_filters_apply_to_count_and_page(self, service: MedicineQueryService) -> None:
        page = service.list_medicines({"category": "Veterinary"}, page_size=1)

        assert [item.name_of_medicine for item in page.items] == ["Bravecto"]
        assert page.pagination.total_records == 2
        assert page.pagination.has_next_page is True

    def test_no_matches_still_reports_one_page(self, service: MedicineQueryService) -> None:
        page = service.list_medicines({"nameOfMedicine": "Nothing"})

        assert list(page.items) == []
        assert page.pagination.total_records == 0
        assert page.pagination.total_pages == 1

    def test_results_are_ordered_by_identity(self, service: MedicineQueryService, ids: list[int]) -> None:
        page = service.list_medicines({})

        assert [item.id for item in page.items] == sorted(ids)


class TestGetMedicine:
    def test_found(self, service: MedicineQueryService, ids: list[int]) -> None:
        assert service.get_medicine(ids[2]).name_of_medicine == "Bravecto"

    def test_missing(self, service: MedicineQueryService, ids: list[int]) -> None:
        with pytest.raises(MedicineNotFoundError) as exc_info:
            service.get_medicine(max(ids) + 100)

        assert exc_info.value.medicine_id == max(ids) + 100


@pytest.mark.usefixtures("ids")
class TestDistinctValues:
    def test_sorted_distinct_non_empty(self, service: MedicineQueryService) -> None:
        assert service.distinct_values("therapeuticArea") == [
            "Bipolar Disorder",
            "Carcinoma, Hepatocellular",
            "Schizophrenia",
        ]

    def test_category_values(self, service: MedicineQueryService) -> None:
        assert service.distinct_values("category") == ["Human", "Veterinary"]

    @pytest.mark.parametrize("field_name", ["id", "therapeutic_area", "doesNotExist", ""])
    def test_invalid_field(self, service: MedicineQueryService, field_name: str) -> None:
        with pytest.raises(InvalidFieldError):
            service.distinct_values(field_name)


class TestStats:
    def test_counts(self, service: MedicineQueryService, ids: list[int]) -> None:
        stats = service.stats()

        assert stats.total_medicines == 6
        assert stats.by_category == {"human": 4, "veterinary": 2}
        assert stats.by_status == {"authorised": 3, "withdrawn": 2, "refused": 1}

    def test_empty_store(self, service: MedicineQueryService) -> None:
        stats = service.stats()

        assert stats.total_medicines == 0
        assert stats.by_category == {"human": 0, "veterinary": 0}
        assert stats.by_status == {"authorised": 0, "withdrawn": 0, "refused": 0}


def test_store_failure_becomes_persistence_error(
    service: MedicineQueryService,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def broken_count(self, predicate):
        raise OperationalError("SELECT count(*)", {}, Exception("no such table: medicines"))

    monkeypatch.setattr(MedicineRepository, "count", broken_count)

    with pytest.raises(PersistenceError):
        service.list_medicines({})
