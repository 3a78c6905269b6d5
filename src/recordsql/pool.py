"""
Connection pool wrapper with one master and named slave pools.

This module provides:
1. `ConnectionPool`, built from an explicit `PoolConfig`, handing out write
   handles from the master pool and read handles from slave pools
2. Commit-on-close for write handles, plain release for read handles and
   rollback-and-close on failure
3. A process-wide default pool installed once by `init()`

Each datasource is a SQLAlchemy engine backed by a `QueuePool`; handles wrap
the engine's pooled DBAPI connections, and SQLAlchemy's pool is the only
object shared between threads.
"""
import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

import sqlalchemy as sa
from recordsql.connection import ConnectionWrapper
from recordsql.exceptions import ConnectionStateError
from recordsql.options import DatabaseOptions, PoolConfig
from recordsql.strategy import get_strategy
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool

__all__ = [
    'ConnectionPool',
    'create_engine_for_options',
    'init',
    'get_pool',
    'shutdown',
]

logger = logging.getLogger(__name__)

_default_pool: 'ConnectionPool | None' = None
_default_pool_lock = threading.RLock()


def create_engine_for_options(options: DatabaseOptions,
                              engine_factory: Callable[..., Engine] = sa.create_engine,
                              **kwargs: Any) -> Engine:
    """Create a pooled SQLAlchemy engine for one datasource.
    """
    strategy = get_strategy(options.drivername)
    strategy.register_type_adapters()
    url = strategy.build_connection_url(options)

    engine_kwargs: dict[str, Any] = {
        'echo': False,
        'poolclass': QueuePool,
        'pool_size': options.pool_size,
        'max_overflow': options.max_overflow,
        'pool_recycle': options.pool_recycle,
        'pool_timeout': options.pool_timeout,
        'pool_pre_ping': True,
        'pool_reset_on_return': 'rollback',
    }
    engine_kwargs.update(strategy.get_engine_kwargs(options))
    engine_kwargs.update(kwargs)

    engine = engine_factory(url, **engine_kwargs)
    logger.debug(f'Created engine for pool {options.pool_name} ({options.drivername})')
    return engine


class ConnectionPool:
    """Master/slave connection pools.

    Writes go to the master pool. Reads go to the slave pool named by the
    caller, or to the default slave pool when the name is None or unknown.
    The first configured slave is the default; with no slaves, the master
    serves reads as well.

    Examples
        pool = ConnectionPool(PoolConfig(master=master_opts, slaves=[slave_opts]))
        with pool.transaction() as cn:
            dao.insert(cn, user)
    """

    def __init__(self, config: PoolConfig,
                 engine_factory: Callable[..., Engine] = sa.create_engine) -> None:
        self.config = config
        self.master = create_engine_for_options(config.master, engine_factory)
        self._engines: dict[str, tuple[Engine, DatabaseOptions]] = {
            config.master.pool_name: (self.master, config.master),
        }
        self.default_slave_name = config.master.pool_name
        for options in config.slaves:
            engine = create_engine_for_options(options, engine_factory)
            self._engines[options.pool_name] = (engine, options)
            if self.default_slave_name == config.master.pool_name:
                self.default_slave_name = options.pool_name
        logger.debug(f'Connection pool ready: master={config.master.pool_name} '
                     f'default_slave={self.default_slave_name} pools={list(self._engines)}')

    @property
    def pool_names(self) -> list[str]:
        return list(self._engines)

    def _acquire(self, engine: Engine, options: DatabaseOptions,
                 read_only: bool) -> ConnectionWrapper:
        dbapi_connection = engine.raw_connection()
        try:
            get_strategy(options.drivername).set_read_only(dbapi_connection, read_only)
        except Exception:
            dbapi_connection.close()
            raise
        return ConnectionWrapper(dbapi_connection, options.drivername,
                                 read_only=read_only, pool_name=options.pool_name,
                                 print_sql=options.print_sql)

    def get_write_connection(self) -> ConnectionWrapper:
        """Acquire a writable handle from the master pool (auto-commit off).
        """
        cn = self._acquire(self.master, self.config.master, read_only=False)
        logger.debug(f'Acquired write connection from {cn.pool_name}')
        return cn

    def get_read_connection(self, pool_name: str | None = None) -> ConnectionWrapper:
        """Acquire a read-only handle from the named or default slave pool.
        """
        if pool_name not in self._engines:
            if pool_name is not None:
                logger.debug(f'Unknown pool {pool_name}, using {self.default_slave_name}')
            pool_name = self.default_slave_name
        engine, options = self._engines[pool_name]
        cn = self._acquire(engine, options, read_only=True)
        logger.debug(f'Acquired read connection from {cn.pool_name}')
        return cn

    def close(self, cn: ConnectionWrapper | None) -> None:
        """Commit (write handles only) and return the handle to its pool.
        """
        if cn is not None:
            cn.close()

    def rollback(self, cn: ConnectionWrapper | None) -> None:
        """Roll back (write handles only) and return the handle to its pool.
        """
        if cn is not None:
            cn.rollback_and_close()

    @contextmanager
    def transaction(self) -> Iterator[ConnectionWrapper]:
        """Write handle committed on success, rolled back on error.
        """
        cn = self.get_write_connection()
        try:
            yield cn
        except BaseException:
            self.rollback(cn)
            raise
        self.close(cn)

    @contextmanager
    def reader(self, pool_name: str | None = None) -> Iterator[ConnectionWrapper]:
        """Read handle released on exit.
        """
        cn = self.get_read_connection(pool_name)
        try:
            yield cn
        finally:
            self.close(cn)

    def dispose(self) -> None:
        """Dispose all engines.
        """
        for engine, _ in self._engines.values():
            engine.dispose()
        logger.debug('All pool engines disposed')


def init(config: PoolConfig, **kwargs: Any) -> ConnectionPool:
    """Install the process-wide pool once; later calls return it unchanged.
    """
    global _default_pool
    with _default_pool_lock:
        if _default_pool is None:
            _default_pool = ConnectionPool(config, **kwargs)
        else:
            logger.debug('Connection pool already initialized, ignoring init()')
        return _default_pool


def get_pool() -> ConnectionPool:
    """Return the process-wide pool installed by `init()`.
    """
    pool = _default_pool
    if pool is None:
        raise ConnectionStateError('connection pool is not initialized, call init() first')
    return pool


def shutdown() -> None:
    """Dispose and forget the process-wide pool.
    """
    global _default_pool
    with _default_pool_lock:
        if _default_pool is not None:
            _default_pool.dispose()
            _default_pool = None
