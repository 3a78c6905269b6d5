"""
Base strategy interface for DBAPI driver adaptation.

All generated SQL is written once, with `?` placeholders and the
offset-first `LIMIT ?, ?` suffix. A strategy adapts that text and the
connection session to the driver behind a pool: placeholder style, type
adapters, read-only session state and generated key retrieval. It is not a
SQL dialect layer.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa

if TYPE_CHECKING:
    from recordsql.options import DatabaseOptions

# Registry of driver name -> strategy class
# Defined here to avoid circular imports (concrete strategies import from base)
_STRATEGY_REGISTRY: dict[str, type['DatabaseStrategy']] = {}


def register_strategy(drivername: str):
    """Decorator to register a strategy class for a driver name.

    Usage:
        @register_strategy('mysql')
        class MySQLStrategy(DatabaseStrategy):
            ...
    """
    def decorator(cls: type['DatabaseStrategy']) -> type['DatabaseStrategy']:
        _STRATEGY_REGISTRY[drivername] = cls
        return cls
    return decorator


class DatabaseStrategy(ABC):
    """Base class for driver-specific behavior.
    """

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the driver identifier (e.g., 'mysql', 'sqlite')."""

    @abstractmethod
    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for these options.
        """

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return extra SQLAlchemy create_engine kwargs for this driver.
        """
        return {}

    @classmethod
    @abstractmethod
    def get_required_options(cls) -> list[str]:
        """Return option field names that must be set for this driver.
        """

    @classmethod
    def validate_options(cls, options: 'DatabaseOptions') -> None:
        """Validate options for this driver.

        Raises
            ValueError: If any required field is None or 0
        """
        for field in cls.get_required_options():
            if not getattr(options, field):
                raise ValueError(f'field {field} cannot be None or 0')

    def register_type_adapters(self) -> None:
        """Register driver-level adapters for Decimal and datetime parameters.
        """

    def standardize_sql(self, sql: str) -> str:
        """Convert `?` placeholders to the driver's paramstyle.

        Default is a no-op for qmark drivers.
        """
        return sql

    @abstractmethod
    def set_read_only(self, dbapi_connection: Any, read_only: bool) -> None:
        """Put a freshly acquired connection into read-only or read-write mode.
        """

    def generated_key(self, cursor: Any) -> int:
        """Return the auto-generated key of the last INSERT, 0 when none.
        """
        return cursor.lastrowid or 0
