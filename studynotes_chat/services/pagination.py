"""
Offset pagination over the live message window.
"""

import math
from dataclasses import dataclass
from typing import Any

from ..core.constants import DEFAULT_PAGE, MAX_QUERY_INT
from ..schemas.chat import PaginationInfo


def coerce_positive_int(value: Any, default: int, maximum: int = MAX_QUERY_INT) -> int:
    """
    Parse ``value`` as an integer in [1, maximum], falling back to ``default``.

    Missing values, non-numeric strings, booleans and numbers outside the
    range are all treated as absent.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        number = value
    else:
        try:
            number = int(str(value).strip())
        except (TypeError, ValueError):
            return default
    return number if 1 <= number <= maximum else default


@dataclass(frozen=True)
class PageRequest:
    page: int
    page_size: int

    @classmethod
    def from_params(cls, page: Any, page_size: Any, default_page_size: int) -> "PageRequest":
        size = coerce_positive_int(page_size, default_page_size)
        # skip = (page - 1) * size must stay within MAX_QUERY_INT
        return cls(
            page=coerce_positive_int(page, DEFAULT_PAGE, maximum=MAX_QUERY_INT // size + 1),
            page_size=size,
        )

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size


def build_pagination(request: PageRequest, total: int) -> PaginationInfo:
    total_pages = math.ceil(total / request.page_size) if total else 0
    return PaginationInfo(
        current_page=request.page,
        total_pages=total_pages,
        total_messages=total,
        has_next=request.page < total_pages,
        has_prev=request.page > 1,
    )
