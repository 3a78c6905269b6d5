"""
Record-oriented SQL access over pooled MySQL and SQLite connections.

Records are dataclasses bound to one table; `Dao` builds parameterized
INSERT/UPDATE/DELETE/SELECT statements from their non-null columns and maps
result rows back into records. Connections come from a master/slave
`ConnectionPool`.

Ad hoc statements can be run with the module functions:
- db.execute(cn, sql, params)
- db.select(cn, User, sql, params)
- db.select_page(cn, User, count_sql, count_params, sql, params, page, size)
"""
__version__ = '0.1.0'

from collections.abc import Sequence
from typing import Any

from recordsql.connection import ConnectionWrapper
from recordsql.cursor import Cursor
from recordsql.dao import Dao
from recordsql.exceptions import ConnectionStateError, DatabaseError
from recordsql.exceptions import DbConnectionError, IntegrityError
from recordsql.exceptions import OperationalError, ProgrammingError, QueryError
from recordsql.exceptions import TypeConversionError, UniqueViolation
from recordsql.exceptions import ValidationError
from recordsql.options import DatabaseOptions, PoolConfig
from recordsql.paging import PageRequest, PageResult, compute_page, select_page
from recordsql.pool import ConnectionPool, get_pool, init, shutdown
from recordsql.query import execute_query, execute_update
from recordsql.query import execute_update_return_id, select_column
from recordsql.query import select_record, select_records, select_row
from recordsql.query import select_scalar
from recordsql.record import Column, Record, column
from recordsql.types import ColumnType


def execute(cn: ConnectionWrapper, sql: str, params: Sequence[Any] | None = None) -> int:
    """Execute an INSERT/UPDATE/DELETE and return the affected row count.
    """
    return execute_update(cn, sql, params)


delete = execute
insert = execute
update = execute


def insert_return_id(cn: ConnectionWrapper, sql: str,
                     params: Sequence[Any] | None = None) -> int:
    """Execute an INSERT and return the generated key, or 0.
    """
    return execute_update_return_id(cn, sql, params)


def select(cn: ConnectionWrapper, record_type: type[Record], sql: str,
           params: Sequence[Any] | None = None) -> list[Record]:
    """Execute a SELECT and map every row to `record_type`.
    """
    return select_records(cn, record_type, sql, params)


def transaction() -> Any:
    """Write handle from the process-wide pool, committed on success.
    """
    return get_pool().transaction()


def reader(pool_name: str | None = None) -> Any:
    """Read handle from the process-wide pool, released on exit.
    """
    return get_pool().reader(pool_name)


__all__ = [
    '__version__',
    'Column',
    'ColumnType',
    'ConnectionPool',
    'ConnectionWrapper',
    'Cursor',
    'Dao',
    'DatabaseOptions',
    'PageRequest',
    'PageResult',
    'PoolConfig',
    'Record',
    'column',
    'compute_page',
    'delete',
    'execute',
    'execute_query',
    'execute_update',
    'execute_update_return_id',
    'get_pool',
    'init',
    'insert',
    'insert_return_id',
    'reader',
    'select',
    'select_column',
    'select_page',
    'select_record',
    'select_records',
    'select_row',
    'select_scalar',
    'shutdown',
    'transaction',
    'update',
    'ConnectionStateError',
    'DatabaseError',
    'DbConnectionError',
    'IntegrityError',
    'OperationalError',
    'ProgrammingError',
    'QueryError',
    'TypeConversionError',
    'UniqueViolation',
    'ValidationError',
]
