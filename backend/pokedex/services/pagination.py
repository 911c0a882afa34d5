"""
Pokedex Backend — Pagination Calculator
========================================

What:  Turns page/limit query values and a total count into skip/limit
       and the navigation envelope.

    skip        = (page - 1) * limit
    total_pages = ceil(total / limit)      (0 for an empty store)
    has_next    = page < total_pages
    has_prev    = page > 1

Query values arrive as raw strings. Anything that is not a positive integer
falls back to the default instead of failing the request. A limit above
settings.max_page_size also falls back to the default. A page past the
last one is allowed and simply yields an empty data list.
Such a page is answered without querying the store, so an arbitrarily
large page number never becomes an OFFSET.
"""

import math
from dataclasses import dataclass
from typing import Any, Optional

from pokedex.config import settings
from pokedex.schemas.pokemon import PaginationInfo

DEFAULT_PAGE = 1


def coerce_positive_int(raw: Any, default: int, maximum: Optional[int] = None) -> int:
    """Parse `raw` as an integer >= 1 (and <= `maximum` if given), else return `default`."""
    if raw is None or isinstance(raw, bool):
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    if value < 1 or (maximum is not None and value > maximum):
        return default
    return value


@dataclass(frozen=True)
class PageWindow:
    page: int
    limit: int
    total: int
    skip: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool

    @property
    def is_past_end(self) -> bool:
        """True when the window starts at or after the last record."""
        return self.skip >= self.total

    def to_info(self) -> PaginationInfo:
        return PaginationInfo(
            current_page=self.page,
            total_pages=self.total_pages,
            total_pokemons=self.total,
            limit=self.limit,
            has_next_page=self.has_next_page,
            has_prev_page=self.has_prev_page,
        )


def paginate(page: Any = None, limit: Any = None, total: int = 0,
             default_limit: Optional[int] = None) -> PageWindow:
    """Compute the window for (page, limit) over `total` records."""
    page = coerce_positive_int(page, DEFAULT_PAGE)
    limit = coerce_positive_int(
        limit, default_limit or settings.default_page_size, maximum=settings.max_page_size
    )
    total = max(int(total), 0)
    total_pages = math.ceil(total / limit)
    return PageWindow(
        page=page,
        limit=limit,
        total=total,
        skip=(page - 1) * limit,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )
