"""
Driver strategy lookup.
"""
from functools import lru_cache

from recordsql.strategy.base import _STRATEGY_REGISTRY
from recordsql.strategy.base import DatabaseStrategy as DatabaseStrategy
from recordsql.strategy.base import register_strategy as register_strategy
from recordsql.strategy.mysql import MySQLStrategy as MySQLStrategy
from recordsql.strategy.sqlite import SQLiteStrategy as SQLiteStrategy


def get_strategy_class(drivername: str) -> type[DatabaseStrategy]:
    """Registered strategy class for `drivername`; ValueError when unknown."""
    try:
        return _STRATEGY_REGISTRY[drivername]
    except KeyError:
        raise ValueError(f'drivername must be one of: {sorted(_STRATEGY_REGISTRY)}, '
                         f'got {drivername!r}') from None


@lru_cache(maxsize=8)
def get_strategy(drivername: str) -> DatabaseStrategy:
    """Shared strategy instance for a driver name."""
    return get_strategy_class(drivername)()
