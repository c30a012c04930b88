"""
app/repositories package marker.
"""

from app.repositories.medicine_repository import MedicineCounts, MedicineRepository

__all__ = [
    "MedicineCounts",
    "MedicineRepository",
]
