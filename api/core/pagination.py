"""
Pagination metadata for list results.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class Pagination:
    current_page: int
    items_per_page: int
    next_page: int | None
    prev_page: int | None
    total_pages: int
    total_records: int

    def as_dict(self) -> dict:
        return asdict(self)


def build_pagination(total_records: int, current_page: int, items_per_page: int) -> Pagination:
    """
    Requested page and page size are echoed back as-is, even past the last
    page; only next/prev links are nulled out there.
    """
    total_pages = math.ceil(total_records / items_per_page)
    out_of_range = total_pages == 0 or current_page > total_pages

    next_page = None if out_of_range or current_page == total_pages else current_page + 1
    prev_page = None if out_of_range or current_page == 1 else current_page - 1

    return Pagination(
        current_page=current_page,
        items_per_page=items_per_page,
        next_page=next_page,
        prev_page=prev_page,
        total_pages=total_pages,
        total_records=total_records,
    )
