"""
app/validators package marker.
"""

from app.validators.medicine_validator import MedicineRowValidator

__all__ = [
    "MedicineRowValidator",
]
