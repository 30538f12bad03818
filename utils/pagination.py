"""Page/limit arithmetic for admin listings."""

from __future__ import annotations

import math
from dataclasses import dataclass

from core.constants import PaginationDefaults
from core.exceptions import InvalidArgumentError


@dataclass(frozen=True)
class Pagination:
    page: int = 1
    per_page: int = PaginationDefaults.REQUESTS_PAGE_SIZE

    def __post_init__(self) -> None:
        if self.page < 1:
            raise InvalidArgumentError(f"page must be >= 1, got {self.page}")
        if not 1 <= self.per_page <= PaginationDefaults.MAX_PAGE_SIZE:
            raise InvalidArgumentError(
                f"page size must be between 1 and {PaginationDefaults.MAX_PAGE_SIZE}, got {self.per_page}"
            )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    def total_pages(self, total: int) -> int:
        return math.ceil(total / self.per_page)

    def slice(self, items: list) -> list:
        return items[self.offset:self.offset + self.per_page]
