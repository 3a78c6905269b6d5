"""
Paged queries: a count query followed by a bounded, offset-based fetch.

The requested page is normalised against the total row count in a single
pass:

- `total == 0` returns page 1 with no data and skips the fetch query
- an offset past the total moves to page `total // size + 1`
- an offset exactly at the total steps back to page `total // size`

>>> compute_page(25, 3, 10)
(3, 20)
>>> compute_page(20, 3, 10)
(2, 10)
>>> compute_page(20, 5, 10)
(3, 20)
>>> compute_page(0, 7, 10)
(1, 0)
"""
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from recordsql.connection import ConnectionWrapper
from recordsql.query import select_records, select_scalar
from recordsql.record import Record
from recordsql.sql import paginate_sql

R = TypeVar('R', bound=Record)

logger = logging.getLogger(__name__)

__all__ = [
    'PageRequest',
    'PageResult',
    'compute_page',
    'select_page',
]


@dataclass
class PageRequest:
    """Requested page and page size, both clamped to at least 1.
    """
    page: int = 1
    size: int = 10

    def __post_init__(self):
        self.page = max(1, int(self.page))
        self.size = max(1, int(self.size))


@dataclass
class PageResult(Generic[R]):
    """One page of records plus the total row count.
    """
    page: int = 1
    total: int = 0
    data: list[R] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Render as `{page, total, data}` with each record's full column map.
        """
        return {
            'page': self.page,
            'total': self.total,
            'data': [r.column_map(all=True) for r in self.data],
        }


def compute_page(total: int, page: int, size: int) -> tuple[int, int]:
    """Return the normalised `(page, offset)` for a result of `total` rows.

    `page` and `size` are clamped to at least 1 first. The page is
    re-clamped at most once and is not re-checked after that.
    """
    size = max(1, size)
    page = max(1, page)
    if total <= 0:
        return 1, 0
    offset = (page - 1) * size
    if offset > total:
        page = total // size + 1
    elif offset == total:
        page = total // size
    return page, (page - 1) * size


def select_page(cn: ConnectionWrapper, record_type: type[R], count_sql: str,
                count_params: Sequence[Any] | None, sql: str,
                params: Sequence[Any] | None, page: int = 1,
                size: int = 10) -> PageResult[R]:
    """Run a count query and, when rows exist, the paged data query.

    The data query receives `params` followed by `[offset, size]`; the
    caller's parameter list is left untouched.
    """
    request = PageRequest(page, size)
    total = select_scalar(cn, count_sql, count_params) or 0
    total = int(total)
    if total == 0:
        logger.debug(f'Page query for {record_type.__name__} matched no rows')
        return PageResult(page=1, total=0, data=[])

    page, offset = compute_page(total, request.page, request.size)
    data_params = [*(params or ()), offset, request.size]
    data = select_records(cn, record_type, paginate_sql(sql), data_params)
    logger.debug(f'Page {page} of {record_type.__name__}: {len(data)} of {total} rows')
    return PageResult(page=page, total=total, data=data)
