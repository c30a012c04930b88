"""
tests/test_medicines_router.py

HTTP contract tests for the medicines and health routers, served from a
bare FastAPI app wired to the in-memory SQLite store.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from app.api.routers import health_router, medicines_router
from app.repositories.medicine_repository import MedicineRepository
from app.services.medicine_import_service import MedicineImportService, get_medicine_import_service
from db.session import get_db, get_session_factory


@pytest.fixture()
def client(session_factory: sessionmaker[Session]) -> Iterator[TestClient]:
    application = FastAPI()
    application.include_router(health_router)
    application.include_router(medicines_router)

    def override_get_db() -> Iterator[Session]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_session_factory] = lambda: session_factory
    application.dependency_overrides[get_medicine_import_service] = lambda: MedicineImportService(
        max_workers=1,
        batch_size=50,
        error_preview_size=5,
        log_row_errors=False,
    )

    with TestClient(application) as test_client:
        yield test_client


@pytest.fixture()
def ids(add_medicines) -> list[int]:
    return add_medicines(
        {
            "category": "Human",
            "name_of_medicine": "Abilify",
            "medicine_status": "Authorised",
            "therapeutic_area": "Schizophrenia",
            "generic_or_hybrid": "no",
        },
        {
            "category": "Veterinary",
            "name_of_medicine": "Bravecto",
            "medicine_status": "Authorised",
            "active_substance": "fluralaner",
        },
        {
            "category": "Human",
            "name_of_medicine": "Nexavar",
            "medicine_status": "Withdrawn",
        },
    )


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["timestamp"]


@pytest.mark.usefixtures("ids")
class TestListEndpoint:
    def test_response_shape_uses_camel_case(self, client: TestClient) -> None:
        response = client.get("/medicines")

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"] == {
            "page": 1,
            "pageSize": 50,
            "totalRecords": 3,
            "totalPages": 1,
            "hasNextPage": False,
            "hasPreviousPage": False,
        }
        first = body["data"][0]
        assert first["nameOfMedicine"] == "Abilify"
        assert first["genericOrHybrid"] == "no"
        assert first["biosimilar"] is None
        assert isinstance(first["id"], int)

    def test_field_filter(self, client: TestClient) -> None:
        body = client.get("/medicines", params={"category": "Veterinary"}).json()

        assert [item["nameOfMedicine"] for item in body["data"]] == ["Bravecto"]

    def test_search(self, client: TestClient) -> None:
        body = client.get("/medicines", params={"search": "fluralaner"}).json()

        assert body["pagination"]["totalRecords"] == 1

    def test_unknown_parameters_are_ignored(self, client: TestClient) -> None:
        body = client.get("/medicines", params={"colour": "blue"}).json()

        assert body["pagination"]["totalRecords"] == 3

    def test_paging(self, client: TestClient) -> None:
        body = client.get("/medicines", params={"page": 2, "pageSize": 2}).json()

        assert [item["nameOfMedicine"] for item in body["data"]] == ["Nexavar"]
        assert body["pagination"]["hasPreviousPage"] is True
        assert body["pagination"]["hasNextPage"] is False

    @pytest.mark.parametrize(
        "params",
        [{"pageSize": 0}, {"pageSize": 101}, {"page": 0}, {"page": "first"}],
    )
    def test_out_of_range_paging_is_rejected(self, client: TestClient, params: dict) -> None:
        assert client.get("/medicines", params=params).status_code == 422

    def test_store_failure_is_generic_500(self, client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
        def broken_count(self, predicate):
            raise OperationalError("SELECT count(*)", {}, Exception("connection lost"))

        monkeypatch.setattr(MedicineRepository, "count", broken_count)

        response = client.get("/medicines")

        assert response.status_code == 500
        assert response.json() == {"detail": "Database error occurred"}


class TestLookupEndpoints:
    def test_get_by_id(self, client: TestClient, ids: list[int]) -> None:
        response = client.get(f"/medicines/{ids[1]}")

        assert response.status_code == 200
        assert response.json()["nameOfMedicine"] == "Bravecto"

    @pytest.mark.parametrize(
        "raw_id",
        ["abc", "1_0", "+5", "-1", " 7", "\u0661", "99999999999999999999", "9223372036854775808"],
    )
    def test_malformed_id_is_rejected(self, client: TestClient, raw_id: str) -> None:
        response = client.get(f"/medicines/{raw_id}")

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid ID"}

    def test_largest_id_is_a_lookup(self, client: TestClient) -> None:
        response = client.get("/medicines/9223372036854775807")

        assert response.status_code == 404

    def test_missing_id(self, client: TestClient, ids: list[int]) -> None:
        response = client.get(f"/medicines/{max(ids) + 1}")

        assert response.status_code == 404
        assert response.json() == {"detail": "Medicine not found"}

    def test_field_values(self, client: TestClient, ids: list[int]) -> None:
        response = client.get("/medicines/fields/medicineStatus")

        assert response.status_code == 200
        assert response.json() == {"field": "medicineStatus", "values": ["Authorised", "Withdrawn"]}

    def test_invalid_field(self, client: TestClient) -> None:
        response = client.get("/medicines/fields/medicine_status")

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid field name"}

    def test_stats(self, client: TestClient, ids: list[int]) -> None:
        response = client.get("/medicines/stats")

        assert response.status_code == 200
        assert response.json() == {
            "totalMedicines": 3,
            "byCategory": {"human": 2, "veterinary": 1},
            "byStatus": {"authorised": 2, "withdrawn": 1, "refused": 0},
        }


class TestImportEndpoint:
    def test_upload_imports_rows(self, client: TestClient) -> None:
        content = (
            "Category,Name of medicine,Medicine status\n"
            "Human,Abilify,Authorised\n"
            ",Nameless,Authorised\n"
        )

        response = client.post(
            "/medicines/import",
            files={"file": ("medicines.csv", content.encode("utf-8"), "text/csv")},
        )

        assert response.status_code == 200
        assert response.json() == {"successCount": 2, "errorCount": 0, "errors": []}
        assert client.get("/medicines").json()["pagination"]["totalRecords"] == 2

    def test_upload_reports_row_failures(self, client: TestClient, strict_import_service) -> None:
        client.app.dependency_overrides[get_medicine_import_service] = lambda: strict_import_service
        content = (
            "Category,Name of medicine,Medicine status\n"
            "Human,Abilify,Authorised\n"
            ",Nameless,Authorised\n"
        )

        response = client.post(
            "/medicines/import",
            files={"file": ("medicines.csv", content.encode("utf-8"), "text/csv")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["successCount"] == 1
        assert body["errorCount"] == 1
        assert body["errors"][0]["rowNumber"] == 3
        assert body["errors"][0]["kind"] == "validation"
        assert body["errors"][0]["row"]["nameOfMedicine"] == "Nameless"

    def test_malformed_csv_is_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/medicines/import",
            files={"file": ("medicines.csv", b"Category,Name of medicine\nHuman\n", "text/csv")},
        )

        assert response.status_code == 400
        assert "line 2" in response.json()["detail"]

    def test_non_csv_upload_is_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/medicines/import",
            files={"file": ("medicines.json", b"{}", "application/json")},
        )

        assert response.status_code == 400
