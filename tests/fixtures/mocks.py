"""
Mock engines and DBAPI connections for pool tests.

Usage:
    def test_default_slave(mock_engine_factory):
        pool = ConnectionPool(config, engine_factory=mock_engine_factory)
        master, slave = mock_engine_factory.engines
"""
from unittest.mock import MagicMock

import pytest
from recordsql import ConnectionWrapper


def _create_mock_dbapi_connection():
    """DBAPI connection double whose cursor records executed statements."""
    conn = MagicMock(name='dbapi_connection')
    cursor = MagicMock(name='dbapi_cursor')
    cursor.description = [('value',)]
    cursor.rowcount = 1
    cursor.lastrowid = 7
    cursor.fetchone.return_value = None
    cursor.fetchall.return_value = []
    conn.cursor.return_value = cursor
    return conn


class MockEngineFactory:
    """Stand-in for `sqlalchemy.create_engine` that records each engine built.
    """

    def __init__(self):
        self.engines = []
        self.calls = []

    def __call__(self, url, **kwargs):
        engine = MagicMock(name=f'engine{len(self.engines)}')
        engine.raw_connection.side_effect = _create_mock_dbapi_connection
        self.engines.append(engine)
        self.calls.append((url, kwargs))
        return engine


@pytest.fixture
def mock_engine_factory():
    return MockEngineFactory()


@pytest.fixture
def mock_dbapi_connection():
    return _create_mock_dbapi_connection()


@pytest.fixture
def write_handle(mock_dbapi_connection):
    """Open write handle over a mock DBAPI connection."""
    return ConnectionWrapper(mock_dbapi_connection, 'sqlite', read_only=False,
                             pool_name='master')


@pytest.fixture
def read_handle():
    """Open read handle over a mock DBAPI connection."""
    return ConnectionWrapper(_create_mock_dbapi_connection(), 'sqlite',
                             read_only=True, pool_name='slave')
