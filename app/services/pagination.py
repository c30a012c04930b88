"""
app/services/pagination.py

Offset/limit arithmetic and page metadata for list endpoints.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 50
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageMetadata:
    """
    Pagination metadata returned alongside one page of results.
    """

    page: int
    page_size: int
    total_records: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool

    @property
    def offset(self) -> int:
        return offset_for(self.page, self.page_size)


def clamp_page_size(
    page_size: int | None,
    *,
    default: int = DEFAULT_PAGE_SIZE,
    upper: int = MAX_PAGE_SIZE,
) -> int:
    """
    Apply the default when absent and bound the size to [1, upper].
    """

    if page_size is None:
        page_size = default
    return max(MIN_PAGE_SIZE, min(page_size, max(MIN_PAGE_SIZE, upper)))


def offset_for(page: int, page_size: int) -> int:
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if page_size < MIN_PAGE_SIZE:
        raise ValueError(f"page_size must be >= {MIN_PAGE_SIZE}, got {page_size}")
    return (page - 1) * page_size


def paginate(page: int, page_size: int, total: int) -> PageMetadata:
    """
    Compute page metadata. An empty result still has one (empty) page.
    """

    if total < 0:
        raise ValueError(f"total must be >= 0, got {total}")
    offset_for(page, page_size)

    total_pages = max(1, math.ceil(total / page_size))
    return PageMetadata(
        page=page,
        page_size=page_size,
        total_records=total,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_previous_page=page > 1,
    )
