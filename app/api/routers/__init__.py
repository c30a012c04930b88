"""
app/api/routers package marker.
"""

from app.api.routers.health import router as health_router
from app.api.routers.medicines import router as medicines_router

__all__ = [
    "health_router",
    "medicines_router",
]
