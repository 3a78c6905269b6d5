"""
Connection handles over pooled DBAPI connections.

A `ConnectionWrapper` is what every executor call receives. It is handed out
by `ConnectionPool` as either a write handle (master pool, auto-commit off)
or a read handle (slave pool, read-only), and is exclusively owned by the
logical operation that acquired it until it is released back to the pool.
"""
import logging
from typing import TYPE_CHECKING, Any, Self

from recordsql.cursor import Cursor
from recordsql.exceptions import ConnectionStateError
from recordsql.strategy import get_strategy

if TYPE_CHECKING:
    from recordsql.strategy import DatabaseStrategy

__all__ = [
    'ConnectionWrapper',
    'require_open',
    'require_writable',
]

logger = logging.getLogger(__name__)


class ConnectionWrapper:
    """Wraps a pooled DBAPI connection to track calls and execution time

    This class provides a thin wrapper around pooled connections that:
    1. Records whether the handle is read-only or writable
    2. Tracks query execution counts and timing
    3. Returns the underlying connection to its pool on close
    4. Supports the context manager protocol (commit on success for write
       handles, rollback on error)
    """

    def __init__(self, dbapi_connection: Any, drivername: str, read_only: bool = False,
                 pool_name: str | None = None, print_sql: bool = False) -> None:
        self.dbapi_connection = dbapi_connection
        self.drivername = drivername
        self.read_only = read_only
        self.pool_name = pool_name
        self.print_sql = print_sql
        self.closed = False
        self.calls = 0
        self.time = 0.0
        self._borrowed: 'ConnectionWrapper | None' = None

    def __repr__(self) -> str:
        mode = 'read' if self.read_only else 'write'
        state = 'closed' if self.closed else 'open'
        return f'<ConnectionWrapper {self.pool_name} {mode} {state}>'

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        if self.closed:
            return
        if exc_type is not None:
            self.rollback_and_close()
        else:
            self.close()

    @property
    def strategy(self) -> 'DatabaseStrategy':
        return get_strategy(self.drivername)

    @property
    def target(self) -> Any:
        """The DBAPI connection statements actually run on."""
        if self._borrowed is not None:
            return self._borrowed.dbapi_connection
        return self.dbapi_connection

    def cursor(self) -> Cursor:
        """Get a wrapped cursor for this connection
        """
        require_open(self)
        if self._borrowed is not None:
            require_open(self._borrowed)
        return Cursor(self.target.cursor(), self)

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics
        """
        self.time += elapsed
        self.calls += 1

    def use_write(self, write_cn: 'ConnectionWrapper') -> None:
        """Route this read handle's queries through a write handle.

        Reads issued after this call see rows written, but not yet committed,
        on `write_cn`. The read handle's own connection is returned to its
        pool immediately.
        """
        require_open(self)
        require_writable(write_cn)
        if not self.read_only or self._borrowed is write_cn:
            return
        self._release()
        self.closed = False
        self._borrowed = write_cn
        logger.debug(f'Read handle {self.pool_name} now uses write handle {write_cn.pool_name}')

    def commit(self) -> None:
        require_open(self)
        if not self.read_only:
            self.dbapi_connection.commit()

    def rollback(self) -> None:
        require_open(self)
        if not self.read_only:
            self.dbapi_connection.rollback()

    def close(self) -> None:
        """Commit write handles, then return the connection to the pool.

        The connection is released even when the commit fails.
        """
        if self.closed:
            return
        try:
            if not self.read_only:
                self.dbapi_connection.commit()
        finally:
            self._release()
        logger.debug(f'Connection closed: {self.calls} queries in {self.time:.2f}s (avg: {self.time/max(1,self.calls):.3f}s per query)')

    def rollback_and_close(self) -> None:
        """Roll back write handles, then return the connection to the pool.
        """
        if self.closed:
            return
        try:
            if not self.read_only:
                self.dbapi_connection.rollback()
                logger.warning(f'Rolled back transaction on {self.pool_name}')
        finally:
            self._release()

    def _release(self) -> None:
        if self._borrowed is None and self.dbapi_connection is not None:
            self.dbapi_connection.close()
        self._borrowed = None
        self.closed = True


def require_open(cn: ConnectionWrapper | None) -> ConnectionWrapper:
    """Raise ConnectionStateError unless `cn` is an open handle."""
    if cn is None:
        raise ConnectionStateError('connection must not be None')
    if cn.closed:
        raise ConnectionStateError(f'connection {cn!r} is closed')
    return cn


def require_writable(cn: ConnectionWrapper | None) -> ConnectionWrapper:
    """Raise ConnectionStateError unless `cn` is an open, writable handle."""
    require_open(cn)
    if cn.read_only:
        raise ConnectionStateError(f'connection {cn!r} is read-only')
    return cn
