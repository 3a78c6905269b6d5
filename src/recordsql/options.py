from dataclasses import dataclass, field
from typing import Any

from recordsql.strategy import get_strategy_class

from libb import ConfigOptions, load_options

__all__ = [
    'DatabaseOptions',
    'PoolConfig',
    'resolve_options',
]


@dataclass
class DatabaseOptions(ConfigOptions):
    """Options for one pooled datasource

    supported driver names: `mysql`, `sqlite`

    Pooling options (SQLAlchemy QueuePool):
    - pool_name: Name used to pick a slave pool for reads (default: drivername)
    - pool_size: Connections kept open in the pool (default: 5)
    - max_overflow: Extra connections allowed under load (default: 10)
    - pool_recycle: Seconds before a connection is recycled (default: 300)
    - pool_timeout: Seconds to wait for a free connection (default: 30)
    - print_sql: Log every statement with its parameters substituted
    """
    drivername: str = 'mysql'
    hostname: str = None
    username: str = None
    password: str = None
    database: str = None
    port: int = 0
    timeout: int = 0
    pool_name: str = None
    pool_size: int = 5
    max_overflow: int = 10
    pool_recycle: int = 300
    pool_timeout: int = 30
    print_sql: bool = False

    def __post_init__(self):
        strategy_cls = get_strategy_class(self.drivername)
        self.pool_name = self.pool_name or self.drivername
        strategy_cls.validate_options(self)


def resolve_options(options: DatabaseOptions | dict[str, Any] | str,
                    config: Any | None = None, **kw: Any) -> DatabaseOptions:
    """Turn a DatabaseOptions, dict or config name into DatabaseOptions.
    """
    if isinstance(options, DatabaseOptions):
        return options
    options_func = load_options(cls=DatabaseOptions)(lambda o, c: o)
    return options_func(options, config, **kw)


@dataclass
class PoolConfig:
    """Process-wide pool configuration: one master and any number of slaves.

    Built once at start-up and handed to `ConnectionPool`. The first slave
    is the default read pool; with no slaves the master serves reads too.
    """
    master: DatabaseOptions
    slaves: list[DatabaseOptions] = field(default_factory=list)

    def __post_init__(self):
        self.master = resolve_options(self.master)
        self.slaves = [resolve_options(s) for s in self.slaves]
        names = [self.master.pool_name] + [s.pool_name for s in self.slaves]
        if len(set(names)) != len(names):
            raise ValueError(f'pool_name must be distinct across pools: {names}')
