from __future__ import annotations

import math
from dataclasses import dataclass

from listings_hub.core.config import settings
from listings_hub.core.errors import BadRequest


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def page_params(page: int | None, limit: int | None, *, default_limit: int | None = None) -> PageParams:
    page = 1 if page is None else page
    limit = (default_limit or settings.default_page_limit) if limit is None else limit

    if page < 1:
        raise BadRequest("page must be >= 1")
    if limit < 1 or limit > settings.max_page_limit:
        raise BadRequest(f"limit must be between 1 and {settings.max_page_limit}")
    return PageParams(page=page, limit=limit)


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


def page_meta(total: int, params: PageParams) -> dict:
    return {
        "total": total,
        "page": params.page,
        "limit": params.limit,
        "totalPages": total_pages(total, params.limit),
    }
