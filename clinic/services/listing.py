"""
Pagination helpers shared by the list endpoints and the pages.

Lists take ``page``, ``pageSize`` and ``query`` from the query string.
Unparseable or non-positive values fall back to the defaults and a page
size above :data:`MAX_PAGE_SIZE` is clamped.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50


@dataclass
class PageParams:
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    query: str = ''

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def _positive_int(value, default: int) -> int:
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def parse_pagination(params) -> PageParams:
    page = _positive_int(params.get('page'), 1)
    page_size = min(_positive_int(params.get('pageSize'), DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)
    query = (params.get('query') or '').strip()
    return PageParams(page=page, page_size=page_size, query=query)


def paginate(qs, params: PageParams):
    """Slice ``qs`` for the requested page and build the ``meta`` block."""
    total = qs.count()
    rows = list(qs[params.offset:params.offset + params.page_size])
    meta = {
        'page': params.page,
        'pageSize': params.page_size,
        'totalCount': total,
        'totalPages': max(1, math.ceil(total / params.page_size)),
        'query': params.query,
    }
    return rows, meta
