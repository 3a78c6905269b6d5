"""
Result cursor wrapper.

Implements the subset of Python DB-API 2.0 (PEP-249) used by the executor,
returning rows as attribute dictionaries keyed by column name.
"""
import logging
import time
from collections.abc import Iterator, Sequence
from functools import wraps
from typing import Any, Self

from recordsql.sql import make_log_sql
from recordsql.types import TypeConverter

from libb import attrdict

logger = logging.getLogger(__name__)


def dumpsql(func):
    """Decorator for logging SQL statements and their parameters.

    On failure the statement is logged with parameters substituted, then the
    driver exception propagates unchanged.
    """
    @wraps(func)
    def wrapper(self, sql: str, params: Sequence[Any] | None = None):
        start = time.time()
        if self.connwrapper.print_sql:
            logger.info(make_log_sql(sql, params))
        else:
            logger.debug(f'SQL:\n{sql}\nargs: {params}')
        try:
            return func(self, sql, params)
        except Exception:
            logger.error(f'Error with query:\n{make_log_sql(sql, params)}')
            raise
        finally:
            elapsed = time.time() - start
            self.connwrapper.addcall(elapsed)
            logger.debug(f'Query time: {elapsed:.4f}s')
    return wrapper


class Cursor:
    """Cursor over one statement's results.

    The cursor is owned by the statement that produced it and must be
    consumed or closed before its connection is reused or released.
    """

    def __init__(self, cursor: Any, connection_wrapper: Any) -> None:
        self.dbapi_cursor = cursor
        self.connwrapper = connection_wrapper
        self._names: list[str] | None = None
        self.closed = False

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    def __iter__(self) -> Iterator[attrdict]:
        while True:
            row = self.fetchone()
            if row is None:
                break
            yield row

    @property
    def description(self) -> list[tuple] | None:
        """Column descriptions for last query."""
        return self.dbapi_cursor.description

    @property
    def rowcount(self) -> int:
        """Number of rows affected by last operation."""
        return self.dbapi_cursor.rowcount

    @property
    def lastrowid(self) -> Any:
        return self.dbapi_cursor.lastrowid

    @property
    def columns(self) -> list[str]:
        """Column names of the current result set."""
        if self._names is None:
            self._names = [d[0] for d in (self.description or [])]
        return self._names

    def _make_row(self, values: Sequence[Any]) -> attrdict:
        return attrdict(zip(self.columns, values))

    @dumpsql
    def execute(self, sql: str, params: Sequence[Any] | None = None) -> int:
        """Execute one statement, binding parameters positionally."""
        strategy = self.connwrapper.strategy
        self._names = None
        self.dbapi_cursor.execute(strategy.standardize_sql(sql),
                                  TypeConverter.convert_params(params))
        return self.dbapi_cursor.rowcount

    def fetchone(self) -> attrdict | None:
        """Fetch next row."""
        values = self.dbapi_cursor.fetchone()
        if values is None:
            return None
        return self._make_row(values)

    def fetchvalues(self) -> tuple | None:
        """Fetch next row as a positional tuple."""
        values = self.dbapi_cursor.fetchone()
        return tuple(values) if values is not None else None

    def fetchall(self) -> list[attrdict]:
        """Fetch all remaining rows."""
        return [self._make_row(values) for values in self.dbapi_cursor.fetchall()]

    def close(self) -> None:
        """Close cursor."""
        if not self.closed:
            self.dbapi_cursor.close()
            self.closed = True
