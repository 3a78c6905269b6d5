"""
SQLite strategy implementation.

SQLite accepts the generated SQL unchanged: it binds `?` placeholders and
understands the `LIMIT offset, count` form. What it lacks is native support
for Decimal and datetime parameters, and a read-only session mode, which
this strategy provides through adapters and `PRAGMA query_only`.
"""
import datetime
import decimal
import logging
import sqlite3
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from recordsql.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from recordsql.options import DatabaseOptions

logger = logging.getLogger(__name__)


def adapt_datetime(value: datetime.datetime) -> str:
    return value.isoformat(' ')


@register_strategy('sqlite')
class SQLiteStrategy(DatabaseStrategy):
    """SQLite-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        return 'sqlite'

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for SQLite."""
        return sa.URL.create(drivername='sqlite', database=options.database)

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Pooled SQLite connections may be released from another thread."""
        return {'connect_args': {'check_same_thread': False}}

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for SQLite connections."""
        return ['database']

    def register_type_adapters(self) -> None:
        """Register Decimal and datetime adapters (Python -> SQLite)."""
        sqlite3.register_adapter(decimal.Decimal, str)
        sqlite3.register_adapter(datetime.datetime, adapt_datetime)

    def set_read_only(self, dbapi_connection: Any, read_only: bool) -> None:
        flag = 'ON' if read_only else 'OFF'
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute(f'PRAGMA query_only = {flag}')
        finally:
            cursor.close()
        logger.debug(f'SQLite query_only set to {flag}')
