"""Unit tests for column value kinds and parameter conversion."""
import datetime
import decimal

import pytest
from recordsql import ColumnType, TypeConversionError
from recordsql.types import TypeConverter, format_value


class TestRead:

    @pytest.mark.parametrize(('kind', 'raw', 'expected'), [
        (ColumnType.INTEGER, 42, 42),
        (ColumnType.INTEGER, True, 1),
        (ColumnType.INTEGER, 3.0, 3),
        (ColumnType.INTEGER, decimal.Decimal('12'), 12),
        (ColumnType.INTEGER, ' 17 ', 17),
        (ColumnType.TEXT, 'abc', 'abc'),
        (ColumnType.TEXT, b'caf\xc3\xa9', 'café'),
        (ColumnType.TEXT, 5, '5'),
        (ColumnType.DECIMAL, '10.50', decimal.Decimal('10.50')),
        (ColumnType.DECIMAL, 3, decimal.Decimal('3')),
        (ColumnType.DECIMAL, 0.25, decimal.Decimal('0.25')),
        (ColumnType.TIMESTAMP, '2024-01-02 03:04:05', datetime.datetime(2024, 1, 2, 3, 4, 5)),
        (ColumnType.TIMESTAMP, datetime.date(2024, 1, 2), datetime.datetime(2024, 1, 2)),
    ])
    def test_coerces(self, kind, raw, expected):
        value = kind.read(raw)
        assert value == expected
        assert type(value) is type(expected)

    @pytest.mark.parametrize('kind', list(ColumnType))
    def test_null_for_every_kind(self, kind):
        assert kind.read(None) is None

    @pytest.mark.parametrize(('kind', 'raw'), [
        (ColumnType.INTEGER, 'abc'),
        (ColumnType.INTEGER, 1.5),
        (ColumnType.INTEGER, object()),
        (ColumnType.DECIMAL, 'ten'),
        (ColumnType.DECIMAL, True),
        (ColumnType.TIMESTAMP, 'not a date'),
        (ColumnType.TIMESTAMP, 12345),
    ])
    def test_unreadable_value(self, kind, raw):
        with pytest.raises(TypeConversionError):
            kind.read(raw, 'some_column')

    def test_error_names_column(self):
        with pytest.raises(TypeConversionError, match='user_id'):
            ColumnType.INTEGER.read('x', 'user_id')


class TestConverter:

    def test_bool_becomes_int(self):
        assert TypeConverter.convert_value(True) == 1
        assert TypeConverter.convert_value(False) == 0
        assert type(TypeConverter.convert_value(True)) is int

    def test_params_tuple(self):
        assert TypeConverter.convert_params(None) == ()
        assert TypeConverter.convert_params([1, True, None, 'x']) == (1, 1, None, 'x')


def test_format_value():
    assert format_value(None) == 'NULL'
    assert format_value(5) == "'5'"
    assert format_value(decimal.Decimal('1.10')) == "'1.10'"


if __name__ == '__main__':
    __import__('pytest').main([__file__])
