"""
Paging parameters as they arrive from an HTTP layer (page/limit/sort/order).

``Request`` normalizes them and turns them into a ``Query``. Unlike
``Query.sort``, the request-side order is normalized: anything other than
``asc``/``desc`` becomes ``desc``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .interface import Query

DEFAULT_PAGE_SIZE = 20
DEFAULT_CURRENT_PAGE = 1

ASC = "asc"
DESC = "desc"


@dataclass
class Request:
    id: int = 0
    page: int = 0
    limit: int = 0
    # sort field
    sort: str = ""
    order: str = ""

    def default(self) -> None:
        """A missing limit means "return everything"."""
        if self.limit <= 0:
            self.limit = -1
            self.page = 1

    def handle_query_param(self, total: int) -> int:
        """Clamp page/limit against ``total`` rows and return the page count."""
        total_pages = 1
        if self.limit < 0:
            self.page = total_pages
            self.limit = total
            return total_pages
        if self.page <= 0:
            self.page = DEFAULT_CURRENT_PAGE
        if self.limit <= 0:
            self.limit = DEFAULT_PAGE_SIZE
        if total > self.limit:
            total_pages = -(-total // self.limit)
        if self.page > total_pages:
            self.page = total_pages
        if self.order not in (DESC, ASC):
            self.order = DESC
        return total_pages

    def to_query(self, **extra: Any) -> Query:
        order = self.order if self.order in (DESC, ASC) else DESC
        sort = {self.sort: order} if self.sort else {}
        return Query(page=self.page, size=self.limit, sort=sort, **extra)
