"""
Column value kinds and parameter conversion.

This module provides:
- ColumnType: the closed set of column kinds a record may declare
- TypeConverter: normalise Python values before they are bound
- format_value: render a parameter for diagnostic SQL
"""
import datetime
import decimal
import logging
from enum import Enum
from typing import Any

import dateutil.parser
from recordsql.exceptions import TypeConversionError

logger = logging.getLogger(__name__)


def _read_integer(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, (float, decimal.Decimal)):
        if value == int(value):
            return int(value)
        raise ValueError(f'{value!r} has a fractional part')
    if isinstance(value, (str, bytes)):
        return int(value.strip())
    raise TypeError(f'unsupported type {type(value).__name__}')


def _read_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode('utf-8')
    if isinstance(value, datetime.datetime):
        return value.isoformat(' ')
    return str(value)


def _read_decimal(value: Any) -> decimal.Decimal:
    if isinstance(value, decimal.Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError('bool is not a decimal')
    if isinstance(value, (int, float, str)):
        try:
            return decimal.Decimal(str(value).strip())
        except decimal.InvalidOperation as e:
            raise ValueError(f'{value!r} is not a decimal') from e
    raise TypeError(f'unsupported type {type(value).__name__}')


def _read_timestamp(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    if isinstance(value, bytes):
        value = value.decode('utf-8')
    if isinstance(value, str):
        return dateutil.parser.parse(value)
    raise TypeError(f'unsupported type {type(value).__name__}')


class ColumnType(Enum):
    """Native kind of a persisted column.

    `None` is SQL NULL for every kind.
    """
    INTEGER = 'integer'
    TEXT = 'text'
    DECIMAL = 'decimal'
    TIMESTAMP = 'timestamp'

    def read(self, value: Any, column: str | None = None) -> Any:
        """Coerce a raw driver value to this kind's Python type.

        Raises TypeConversionError when the value cannot be read as this kind.
        """
        if value is None:
            return None
        try:
            return _READERS[self](value)
        except (TypeError, ValueError, OverflowError) as e:
            where = f' in column {column}' if column else ''
            raise TypeConversionError(
                f'Cannot read {value!r}{where} as {self.value}: {e}') from e


_READERS = {
    ColumnType.INTEGER: _read_integer,
    ColumnType.TEXT: _read_text,
    ColumnType.DECIMAL: _read_decimal,
    ColumnType.TIMESTAMP: _read_timestamp,
}


class TypeConverter:
    """Conversion of Python values into bindable parameters.
    """

    @staticmethod
    def convert_value(value: Any) -> Any:
        """Convert a single value to a database-compatible format."""
        if isinstance(value, bool):
            return int(value)
        return value

    @staticmethod
    def convert_params(params: Any) -> tuple:
        """Convert an ordered parameter list into a tuple for the driver."""
        if params is None:
            return ()
        return tuple(TypeConverter.convert_value(v) for v in params)


def format_value(value: Any) -> str:
    """Render a parameter the way it appears in diagnostic SQL."""
    if value is None:
        return 'NULL'
    return f"'{value}'"
