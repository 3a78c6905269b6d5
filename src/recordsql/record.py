"""
Record base class: column maps and row mapping.

Records are dataclasses bound to exactly one table. Persisted attributes are
declared with `column()`, which attaches a `Column` descriptor to the field
metadata; the descriptor table drives both column-map extraction and row
mapping, so no per-record boilerplate is needed.

    @dataclass
    class User(Record):
        __table__ = 'tb_user'

        user_id: int | None = column(ColumnType.INTEGER, primary_key=True)
        user_name: str | None = column(ColumnType.TEXT)
        is_valid: int | None = column(ColumnType.INTEGER)
"""
import dataclasses
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Self

from recordsql.exceptions import QueryError, ValidationError
from recordsql.types import ColumnType

logger = logging.getLogger(__name__)

COLUMN_KEY = 'recordsql.column'


@dataclass(frozen=True, slots=True)
class Column:
    """Descriptor of one persisted attribute."""
    name: str
    attr: str
    kind: ColumnType
    primary_key: bool = False
    gid: bool = False


@dataclass(frozen=True, slots=True)
class _ColumnSpec:
    kind: ColumnType
    name: str | None
    primary_key: bool
    gid: bool


def column(kind: ColumnType, name: str | None = None, *, primary_key: bool = False,
           gid: bool = False, default: Any = None) -> Any:
    """Declare a persisted dataclass field.

    Args:
        kind: native column type used when reading rows
        name: column name, defaults to the attribute name
        primary_key: mark the primary key column
        gid: mark the application-level alternate key column
        default: field default, None unless given
    """
    spec = _ColumnSpec(kind, name, primary_key, gid)
    return dataclasses.field(default=default, metadata={COLUMN_KEY: spec})


class Record:
    """Base class for table-bound dataclasses.
    """
    __table__: str = ''
    __soft_delete__: str = 'is_valid'

    @classmethod
    def table_name(cls) -> str:
        if not cls.__table__:
            raise ValidationError(f'{cls.__name__} does not declare __table__')
        return cls.__table__

    @classmethod
    def columns(cls) -> tuple[Column, ...]:
        """Column descriptors in declaration order.
        """
        cached = cls.__dict__.get('_columns')
        if cached is not None:
            return cached
        if not dataclasses.is_dataclass(cls):
            raise ValidationError(f'{cls.__name__} must be a dataclass')
        columns = []
        for f in dataclasses.fields(cls):
            spec = f.metadata.get(COLUMN_KEY)
            if spec is None:
                continue
            columns.append(Column(spec.name or f.name, f.name, spec.kind,
                                  spec.primary_key, spec.gid))
        columns = tuple(columns)
        cls._columns = columns
        return columns

    @classmethod
    def primary_key(cls) -> Column:
        keys = [c for c in cls.columns() if c.primary_key]
        if len(keys) != 1:
            raise ValidationError(f'{cls.__name__} must declare exactly one primary key, found {len(keys)}')
        return keys[0]

    @classmethod
    def gid_column(cls) -> Column | None:
        for c in cls.columns():
            if c.gid:
                return c
        return None

    @classmethod
    def require_gid_column(cls) -> Column:
        gid = cls.gid_column()
        if gid is None:
            raise ValidationError(f'{cls.__name__} does not declare a gid column')
        return gid

    @property
    def primary_value(self) -> Any:
        return getattr(self, self.primary_key().attr)

    @property
    def gid_value(self) -> Any:
        return getattr(self, self.require_gid_column().attr)

    def column_map(self, all: bool = False) -> dict[str, Any]:
        """Column name to value mapping in declaration order.

        With `all` False only non-null attributes are included; with `all`
        True every declared column is present, None included.
        """
        result = {}
        for c in self.columns():
            value = getattr(self, c.attr)
            if all or value is not None:
                result[c.name] = value
        return result

    def update_map(self, all: bool = False) -> dict[str, Any]:
        """Column map for an UPDATE payload: the primary key is never included.
        """
        result = self.column_map(all)
        result.pop(self.primary_key().name, None)
        return result

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Self:
        """Build one instance from a result row by reading every declared column.

        Raises QueryError if the row lacks a declared column and
        TypeConversionError if a value cannot be read as its declared type.
        """
        values = {}
        for c in cls.columns():
            try:
                raw = row[c.name]
            except KeyError:
                raise QueryError(f'Column {c.name} of {cls.table_name()} missing from result row') from None
            values[c.attr] = c.kind.read(raw, c.name)
        return cls(**values)
