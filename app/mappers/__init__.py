"""
app/mappers package marker.
"""

from app.mappers.header_mapper import HEADER_FIELD_MAP, HeaderMapper, normalize_header

__all__ = [
    "HEADER_FIELD_MAP",
    "HeaderMapper",
    "normalize_header",
]
