"""
app/services package marker.
"""

from app.services.medicine_import_service import (
    MedicineImportService,
    get_medicine_import_service,
)
from app.services.medicine_query_service import (
    MedicinePage,
    MedicineQueryService,
    MedicineStats,
    get_medicine_query_service,
)

__all__ = [
    "MedicineImportService",
    "get_medicine_import_service",
    "MedicinePage",
    "MedicineQueryService",
    "MedicineStats",
    "get_medicine_query_service",
]
