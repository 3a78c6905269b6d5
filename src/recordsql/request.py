"""
Typed access to inbound request parameters.

The helpers accept any mapping of parameter names to values, such as a
plain dict of query-string values or a Werkzeug/Django MultiDict. Missing,
blank or unparseable values give the supplied default.

>>> get_int({'page': ' 3 '}, 'page')
3
>>> get_int({'page': 'x'}, 'page', 1)
1
>>> get_int_values({'id': ['1', 'a', '3']}, 'id')
[1, 3]
"""
import datetime
import decimal
import logging
from collections.abc import Mapping
from typing import Any

import dateutil.parser
from recordsql.paging import PageRequest

logger = logging.getLogger(__name__)

__all__ = [
    'get_string',
    'get_int',
    'get_decimal',
    'get_bool',
    'get_timestamp',
    'get_string_values',
    'get_int_values',
    'page_request_from_params',
]

TRUE_VALUES = {'true', '1', 'yes', 'on'}


def _first(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def get_string(params: Mapping[str, Any], key: str, default: str | None = None) -> str | None:
    """Trimmed string value, or `default` when missing or blank.
    """
    value = _first(params.get(key))
    if value is None:
        return default
    value = str(value).strip()
    return value or default


def get_int(params: Mapping[str, Any], key: str, default: int | None = None) -> int | None:
    value = get_string(params, key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def get_decimal(params: Mapping[str, Any], key: str,
                default: decimal.Decimal | None = None) -> decimal.Decimal | None:
    value = get_string(params, key)
    if value is None:
        return default
    try:
        return decimal.Decimal(value)
    except decimal.InvalidOperation:
        return default


def get_bool(params: Mapping[str, Any], key: str, default: bool = False) -> bool:
    """True for `true`, `1`, `yes` or `on` (any case), False for any other value.
    """
    value = get_string(params, key)
    if value is None:
        return default
    return value.lower() in TRUE_VALUES


def get_timestamp(params: Mapping[str, Any], key: str, pattern: str | None = None,
                  default: datetime.datetime | None = None) -> datetime.datetime | None:
    """Parse a timestamp with a `strptime` pattern, or with dateutil when None.
    """
    value = get_string(params, key)
    if value is None:
        return default
    try:
        if pattern is not None:
            return datetime.datetime.strptime(value, pattern)
        return dateutil.parser.parse(value)
    except (ValueError, OverflowError):
        logger.debug(f'Cannot parse {key}={value!r} as timestamp')
        return default


def get_string_values(params: Mapping[str, Any], key: str) -> list[str]:
    """Every value given for `key`, in request order.
    """
    getlist = getattr(params, 'getlist', None)
    if callable(getlist):
        values = getlist(key)
    else:
        values = params.get(key)
        if values is None:
            return []
        if not isinstance(values, (list, tuple)):
            values = [values]
    return [str(v) for v in values if v is not None]


def get_int_values(params: Mapping[str, Any], key: str) -> list[int]:
    """Every all-digit value given for `key`; other values are skipped.
    """
    return [int(v) for v in get_string_values(params, key) if v.isdecimal()]


def page_request_from_params(params: Mapping[str, Any], size_key: str = 'limit',
                             default_size: int = 10) -> PageRequest:
    """Build a `PageRequest` from `page` and `size_key` parameters.
    """
    page = get_int(params, 'page', 1)
    size = get_int(params, size_key, default_size)
    return PageRequest(page, size)
