"""
Pagination helpers shared by every list endpoint.

``calculate_pagination`` derives the page metadata returned to clients
from a collection size and the requested page parameters.  ``paginate``
applies the same bounds to an in-memory sequence.  Out-of-range pages
are not an error: they simply produce an empty slice.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True)
class Pagination:
    """Page metadata for a paginated collection.

    Attributes:
        page: 1-indexed page number that was requested.
        page_size: Number of items per page.
        total: Size of the full (filtered) collection.
        total_pages: ``ceil(total / page_size)``; 0 for an empty collection.
        has_next_page: True when items exist past this page.
        has_previous_page: True for every page after the first.
        start_index: Slice start, clamped to ``[0, total]``.
        end_index: Slice end, clamped to ``[start_index, total]``.
    """

    page: int
    page_size: int
    total: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool
    start_index: int
    end_index: int

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the metadata the way list endpoints expose it."""
        return {
            "page": self.page,
            "page_size": self.page_size,
            "total": self.total,
            "total_pages": self.total_pages,
            "has_next_page": self.has_next_page,
            "has_previous_page": self.has_previous_page,
        }


def _positive_int(value: Any, default: int) -> int:
    # bool is an int subclass; True must not turn into page 1 silently
    if isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


def calculate_pagination(
    total: int,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
) -> Pagination:
    """Compute page metadata for a collection of ``total`` items.

    Args:
        total: Number of items in the collection.
        page: 1-indexed page number. Missing or non-positive values fall
            back to ``DEFAULT_PAGE``.
        page_size: Items per page. Missing or non-positive values fall
            back to ``DEFAULT_PAGE_SIZE``.

    Returns:
        A ``Pagination`` instance.
    """
    total = max(int(total), 0)
    page = _positive_int(page, DEFAULT_PAGE)
    page_size = _positive_int(page_size, DEFAULT_PAGE_SIZE)

    start_index = (page - 1) * page_size
    end_index = start_index + page_size

    return Pagination(
        page=page,
        page_size=page_size,
        total=total,
        total_pages=(total + page_size - 1) // page_size,
        has_next_page=end_index < total,
        has_previous_page=page > 1,
        start_index=min(start_index, total),
        end_index=min(end_index, total),
    )


def paginate(
    items: Sequence[T],
    page: Optional[int] = None,
    page_size: Optional[int] = None,
) -> Tuple[List[T], Pagination]:
    """Return the requested page of ``items`` along with its metadata."""
    pagination = calculate_pagination(len(items), page, page_size)
    return list(items[pagination.start_index:pagination.end_index]), pagination
