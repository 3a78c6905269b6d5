"""
MySQL strategy implementation for the PyMySQL driver.

PyMySQL uses the `format` paramstyle, so `?` placeholders outside string
literals become `%s` and every literal `%` is doubled before the statement
reaches `cursor.execute`.
"""
import logging
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from recordsql.sql import tokenize_sql
from recordsql.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from recordsql.options import DatabaseOptions

logger = logging.getLogger(__name__)


@register_strategy('mysql')
class MySQLStrategy(DatabaseStrategy):
    """MySQL-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        return 'mysql'

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for MySQL."""
        query = {'charset': 'utf8mb4'}
        if options.timeout:
            query['connect_timeout'] = str(options.timeout)
        return sa.URL.create(
            drivername='mysql+pymysql',
            username=options.username,
            password=options.password,
            host=options.hostname,
            port=options.port or None,
            database=options.database,
            query=query,
        )

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for MySQL connections."""
        return ['hostname', 'username', 'database']

    def standardize_sql(self, sql: str) -> str:
        """Rewrite `?` to `%s` and escape `%` for PyMySQL interpolation."""
        parts = []
        for kind, text in tokenize_sql(sql):
            if kind == 'qmark':
                parts.append('%s')
            else:
                parts.append(text.replace('%', '%%'))
        return ''.join(parts)

    def set_read_only(self, dbapi_connection: Any, read_only: bool) -> None:
        mode = 'READ ONLY' if read_only else 'READ WRITE'
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute(f'SET SESSION TRANSACTION {mode}')
        finally:
            cursor.close()
        logger.debug(f'MySQL session set to {mode}')
