"""
Statement execution against a connection handle.

Writes require an open, writable handle; reads require an open handle of
either kind. Parameters bind strictly by position and may be None.
"""
import logging
from collections.abc import Sequence
from functools import wraps
from typing import Any, TypeVar

from recordsql.connection import ConnectionWrapper, require_open, require_writable
from recordsql.cursor import Cursor
from recordsql.record import Record

from libb import attrdict

SqlParams = Sequence[Any] | None
R = TypeVar('R', bound=Record)

logger = logging.getLogger(__name__)

__all__ = [
    'execute_update',
    'execute_update_return_id',
    'execute_query',
    'select_records',
    'select_record',
    'select_scalar',
    'select_column',
    'select_row',
]


def check_connection(writable: bool = False):
    """Validate the handle passed as the first argument before executing.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(cn, *args, **kwargs):
            if writable:
                require_writable(cn)
            else:
                require_open(cn)
            return func(cn, *args, **kwargs)
        return wrapper
    return decorator


@check_connection(writable=True)
def execute_update(cn: ConnectionWrapper, sql: str, params: SqlParams = None) -> int:
    """Execute an INSERT/UPDATE/DELETE and return the affected row count.

    The statement joins the handle's open transaction; it is committed when
    the handle is closed.
    """
    with cn.cursor() as cursor:
        rowcount = cursor.execute(sql, params)
    logger.debug(f'Update affected {rowcount} rows')
    return rowcount


@check_connection(writable=True)
def execute_update_return_id(cn: ConnectionWrapper, sql: str, params: SqlParams = None) -> int:
    """Execute an INSERT and return the generated key, or 0 if none.
    """
    with cn.cursor() as cursor:
        cursor.execute(sql, params)
        generated = cn.strategy.generated_key(cursor)
    logger.debug(f'Insert generated key {generated}')
    return generated


@check_connection()
def execute_query(cn: ConnectionWrapper, sql: str, params: SqlParams = None) -> Cursor:
    """Execute a SELECT and return its live cursor.

    The caller owns the cursor and must close it (or consume it in a `with`
    block) before the handle is released.
    """
    cursor = cn.cursor()
    try:
        cursor.execute(sql, params)
    except Exception:
        cursor.close()
        raise
    return cursor


def select_records(cn: ConnectionWrapper, record_type: type[R], sql: str,
                   params: SqlParams = None) -> list[R]:
    """Map every result row to `record_type`, in result order.
    """
    with execute_query(cn, sql, params) as cursor:
        records = [record_type.from_row(row) for row in cursor]
    logger.debug(f'Mapped {len(records)} {record_type.__name__} rows')
    return records


def select_record(cn: ConnectionWrapper, record_type: type[R], sql: str,
                  params: SqlParams = None) -> R | None:
    """Map the first result row to `record_type`, or None when empty.
    """
    with execute_query(cn, sql, params) as cursor:
        row = cursor.fetchone()
    return record_type.from_row(row) if row is not None else None


def select_row(cn: ConnectionWrapper, sql: str, params: SqlParams = None) -> attrdict | None:
    with execute_query(cn, sql, params) as cursor:
        return cursor.fetchone()


def select_scalar(cn: ConnectionWrapper, sql: str, params: SqlParams = None) -> Any:
    """First column of the first row, or None when the result is empty.

    Used for `COUNT(1)` and single-value lookups.
    """
    with execute_query(cn, sql, params) as cursor:
        values = cursor.fetchvalues()
        return values[0] if values is not None else None


def select_column(cn: ConnectionWrapper, sql: str, params: SqlParams = None) -> list[Any]:
    """First column of every row."""
    with execute_query(cn, sql, params) as cursor:
        return [values[0] for values in iter(cursor.fetchvalues, None)]
