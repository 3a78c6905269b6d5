"""
SQL assembly from column maps.

Every builder returns a `Statement` whose parameter list is filled in
lock-step with the SQL text: the i-th `?` in `Statement.sql` binds the i-th
element of `Statement.params`. Builders are pure, so calling one twice with
the same input gives identical SQL and an equal parameter list.

Generated SQL uses `?` placeholders and the offset-first pagination suffix
`LIMIT ?, ?`. The driver strategy converts placeholders where the driver
needs another paramstyle.
"""
import logging
import re
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, NamedTuple

from recordsql.exceptions import ValidationError
from recordsql.types import format_value

if TYPE_CHECKING:
    from recordsql.record import Record

logger = logging.getLogger(__name__)

__all__ = [
    'Statement',
    'make_column_param_sql',
    'make_in_clause',
    'make_placeholders',
    'build_insert_sql',
    'build_batch_insert_sql',
    'build_update_sql',
    'build_update_in_sql',
    'build_update_where_sql',
    'build_soft_delete_sql',
    'build_delete_sql',
    'build_select_sql',
    'build_select_by_key_sql',
    'build_count_sql',
    'build_exists_sql',
    'paginate_sql',
    'make_log_sql',
    'has_placeholders',
    'count_placeholders',
    'tokenize_sql',
]

# String literal or a bare placeholder
_TOKENIZE = re.compile(r"""
    (?P<string>'(?:[^'\\]|\\.|'')*'|"(?:[^"\\]|\\.|"")*")
    |(?P<qmark>\?)
""", re.VERBOSE)


class Statement(NamedTuple):
    """SQL text and its ordered parameter list."""
    sql: str
    params: list[Any]


def tokenize_sql(sql: str) -> list[tuple[str, str]]:
    """Split SQL into ('text' | 'string' | 'qmark', fragment) pairs.
    """
    tokens = []
    last_end = 0
    for match in _TOKENIZE.finditer(sql):
        start, end = match.span()
        if start > last_end:
            tokens.append(('text', sql[last_end:start]))
        tokens.append(('string' if match.group('string') else 'qmark', match.group(0)))
        last_end = end
    if last_end < len(sql):
        tokens.append(('text', sql[last_end:]))
    return tokens


def count_placeholders(sql: str) -> int:
    """Count `?` placeholders outside string literals."""
    return sum(1 for kind, _ in tokenize_sql(sql) if kind == 'qmark')


def has_placeholders(sql: str) -> bool:
    """Check if SQL has placeholders outside string literals."""
    return count_placeholders(sql) > 0


def make_placeholders(count: int) -> str:
    """Generate `count` placeholders separated by `, `."""
    return ', '.join(['?'] * count)


def make_column_param_sql(column_map: Mapping[str, Any], params: list[Any],
                          separator: str) -> str:
    """Build `c1 = ?<separator>c2 = ?` and append each value to `params`.

    Values are appended in the same order the column names are emitted.
    """
    parts = []
    for name, value in column_map.items():
        parts.append(f'{name} = ?')
        params.append(value)
    return separator.join(parts)


def make_in_clause(values: Sequence[Any]) -> str:
    """Build ` IN(?, ?, ...)` with one placeholder per value.

    The values themselves are not consumed; callers append them to the
    parameter list in the same order.
    """
    if not values:
        raise ValidationError('IN clause requires at least one value')
    return f' IN({make_placeholders(len(values))})'


def _key_predicate(key: str, key_values: Sequence[Any], params: list[Any]) -> str:
    if isinstance(key_values, (str, bytes)) or not isinstance(key_values, Sequence):
        params.append(key_values)
        return f'{key} = ?'
    clause = make_in_clause(key_values)
    params.extend(key_values)
    return f'{key}{clause}'


def _where(where_map: Mapping[str, Any] | None, params: list[Any]) -> str:
    if not where_map:
        return ''
    return ' WHERE ' + make_column_param_sql(where_map, params, ' AND ')


def build_insert_sql(table: str, column_map: Mapping[str, Any]) -> Statement:
    """INSERT INTO t(c1, c2) VALUES (?, ?)
    """
    if not column_map:
        raise ValidationError(f'Cannot insert into {table} without columns')
    params = list(column_map.values())
    columns = ', '.join(column_map)
    sql = f'INSERT INTO {table}({columns}) VALUES ({make_placeholders(len(params))})'
    return Statement(sql, params)


def build_batch_insert_sql(records: Sequence['Record']) -> Statement:
    """Multi-row INSERT for records of one table.

    The column set is fixed by the first record using every declared column
    except the primary key; each record then supplies a value, None
    included, for every one of those columns.
    """
    if not records:
        raise ValidationError('Batch insert requires at least one record')
    first = records[0]
    table = first.table_name()
    key = first.primary_key().name
    declared = list(first.column_map(all=True))
    columns = [name for name in declared if name != key]
    if not columns:
        raise ValidationError(f'Cannot insert into {table} without columns')

    params: list[Any] = []
    group = f'({make_placeholders(len(columns))})'
    for record in records:
        if record.table_name() != table:
            raise ValidationError(f'Batch mixes tables {table} and {record.table_name()}')
        column_map = record.column_map(all=True)
        if list(column_map) != declared:
            raise ValidationError(f'Batch mixes column sets of {type(first).__name__} '
                                  f'and {type(record).__name__} on {table}')
        params.extend(column_map[name] for name in columns)

    values = ', '.join([group] * len(records))
    sql = f"INSERT INTO {table}({', '.join(columns)}) VALUES {values}"
    return Statement(sql, params)


def build_update_sql(table: str, column_map: Mapping[str, Any], key: str,
                     key_value: Any) -> Statement:
    """UPDATE t SET c1 = ?, c2 = ? WHERE key = ?
    """
    if not column_map:
        raise ValidationError(f'Cannot update {table} without columns')
    params: list[Any] = []
    assignments = make_column_param_sql(column_map, params, ', ')
    params.append(key_value)
    return Statement(f'UPDATE {table} SET {assignments} WHERE {key} = ?', params)


def build_update_in_sql(table: str, column_map: Mapping[str, Any], key: str,
                        key_values: Sequence[Any]) -> Statement:
    """UPDATE t SET c1 = ?, c2 = ? WHERE key IN(?, ?)
    """
    if not column_map:
        raise ValidationError(f'Cannot update {table} without columns')
    params: list[Any] = []
    assignments = make_column_param_sql(column_map, params, ', ')
    clause = make_in_clause(key_values)
    params.extend(key_values)
    return Statement(f'UPDATE {table} SET {assignments} WHERE {key}{clause}', params)


def build_update_where_sql(table: str, column_map: Mapping[str, Any],
                           where_map: Mapping[str, Any] | None,
                           limit_one: bool = False) -> Statement:
    """UPDATE t SET c1 = ? [WHERE a = ? AND b = ?] [LIMIT 1]

    SET parameters precede WHERE parameters.
    """
    if not column_map:
        raise ValidationError(f'Cannot update {table} without columns')
    params: list[Any] = []
    assignments = make_column_param_sql(column_map, params, ', ')
    sql = f'UPDATE {table} SET {assignments}{_where(where_map, params)}'
    if limit_one:
        sql += ' LIMIT 1'
    return Statement(sql, params)


def build_soft_delete_sql(table: str, flag: str, key: str, key_values: Any) -> Statement:
    """UPDATE t SET flag = 0 WHERE key = ? | key IN(...)

    A scalar `key_values` targets one row, a sequence targets many.
    """
    params: list[Any] = []
    predicate = _key_predicate(key, key_values, params)
    return Statement(f'UPDATE {table} SET {flag} = 0 WHERE {predicate}', params)


def build_delete_sql(table: str, key: str, key_values: Any) -> Statement:
    """DELETE FROM t WHERE key = ? | key IN(...)
    """
    params: list[Any] = []
    predicate = _key_predicate(key, key_values, params)
    return Statement(f'DELETE FROM {table} WHERE {predicate}', params)


def build_select_sql(table: str, where_map: Mapping[str, Any] | None = None) -> Statement:
    """SELECT * FROM t [WHERE a = ? AND b = ?]

    An empty `where_map` selects every row; callers decide whether that is
    acceptable.
    """
    params: list[Any] = []
    return Statement(f'SELECT * FROM {table}{_where(where_map, params)}', params)


def build_select_by_key_sql(table: str, key: str, key_values: Any) -> Statement:
    """SELECT * FROM t WHERE key = ? | key IN(...)
    """
    params: list[Any] = []
    predicate = _key_predicate(key, key_values, params)
    return Statement(f'SELECT * FROM {table} WHERE {predicate}', params)


def build_count_sql(table: str, where_map: Mapping[str, Any] | None = None) -> Statement:
    """SELECT COUNT(1) FROM t [WHERE ...]
    """
    params: list[Any] = []
    return Statement(f'SELECT COUNT(1) FROM {table}{_where(where_map, params)}', params)


def build_exists_sql(table: str, where_map: Mapping[str, Any] | None = None) -> Statement:
    """SELECT 1 FROM t [WHERE ...] LIMIT 1
    """
    params: list[Any] = []
    return Statement(f'SELECT 1 FROM {table}{_where(where_map, params)} LIMIT 1', params)


def paginate_sql(sql: str) -> str:
    """Append the offset-first pagination suffix; binds (offset, size)."""
    return f'{sql} LIMIT ?, ?'


def make_log_sql(sql: str, params: Sequence[Any] | None) -> str:
    """Substitute parameters into SQL text for diagnostics only.

    The result is never executed; statements are always bound with real
    parameters.
    """
    if not params:
        return sql
    values = iter(params)
    parts = []
    for kind, text in tokenize_sql(sql):
        if kind == 'qmark':
            try:
                text = format_value(next(values))
            except StopIteration:
                pass
        parts.append(text)
    return ''.join(parts)
