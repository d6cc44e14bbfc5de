from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of an ordered result set (1-based page numbers)."""

    items: Sequence[T]
    page: int
    per_page: int
    total: int

    @property
    def pages(self) -> int:
        if self.per_page <= 0:
            return 0
        return int(math.ceil(self.total / self.per_page))

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


def normalize_page(page, per_page, *, default_per_page: int) -> tuple[int, int]:
    """Clamp page/per_page to sane positive values."""

    try:
        page = int(page)
    except (TypeError, ValueError):
        page = 1
    try:
        per_page = int(per_page) if per_page is not None else default_per_page
    except (TypeError, ValueError):
        per_page = default_per_page

    page = page if page > 0 else 1
    per_page = per_page if per_page > 0 else default_per_page
    return page, per_page


def offset_for(page: int, per_page: int) -> int:
    return (page - 1) * per_page
