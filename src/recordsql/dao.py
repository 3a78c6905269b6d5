"""
Generic table access for `Record` types.

`Dao(User)` provides inserts, updates, soft and hard deletes, counts, lookups
and paged queries for the table bound to `User`. Lookups key on either the
primary key or the gid column; list variants accept any sequence of keys.

Empty key lists are answered without touching the database: list readers
return `[]` and list writers return 0. Updates whose payload has no columns
also return 0.
"""
import logging
from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from recordsql.connection import ConnectionWrapper
from recordsql.exceptions import ValidationError
from recordsql.paging import PageResult, select_page
from recordsql.query import execute_update, execute_update_return_id
from recordsql.query import select_record, select_records, select_scalar
from recordsql.record import Record
from recordsql.sql import build_batch_insert_sql, build_count_sql
from recordsql.sql import build_delete_sql, build_exists_sql, build_insert_sql
from recordsql.sql import build_select_by_key_sql, build_select_sql
from recordsql.sql import build_soft_delete_sql, build_update_in_sql
from recordsql.sql import build_update_sql, build_update_where_sql

R = TypeVar('R', bound=Record)

logger = logging.getLogger(__name__)

__all__ = ['Dao']


class Dao(Generic[R]):
    """Table operations for one record type.

    Examples
        users = Dao(User)
        with pool.transaction() as cn:
            user_id = users.insert_return_id(cn, User(user_name='alice', is_valid=1))
        with pool.reader() as cn:
            user = users.select_by_id(cn, user_id)
    """

    def __init__(self, record_type: type[R]) -> None:
        self.record_type = record_type
        self.table = record_type.table_name()
        self.key = record_type.primary_key().name

    def __repr__(self) -> str:
        return f'Dao({self.record_type.__name__})'

    @property
    def gid(self) -> str:
        return self.record_type.require_gid_column().name

    def _check(self, record: Record) -> None:
        if not isinstance(record, self.record_type):
            raise ValidationError(f'{self!r} cannot handle {type(record).__name__}')

    #
    # inserts
    #

    def insert(self, cn: ConnectionWrapper, record: R) -> int:
        """Insert the non-null columns of `record`; returns the row count.
        """
        self._check(record)
        stmt = build_insert_sql(self.table, record.column_map())
        return execute_update(cn, stmt.sql, stmt.params)

    def insert_return_id(self, cn: ConnectionWrapper, record: R) -> int:
        """Insert the non-null columns of `record`; returns the generated key.
        """
        self._check(record)
        stmt = build_insert_sql(self.table, record.column_map())
        return execute_update_return_id(cn, stmt.sql, stmt.params)

    def batch_insert(self, cn: ConnectionWrapper, records: Sequence[R]) -> int:
        """Insert many records in one statement.

        Every declared column except the primary key is written, None
        included. An empty batch raises ValidationError.
        """
        for record in records:
            self._check(record)
        stmt = build_batch_insert_sql(records)
        return execute_update(cn, stmt.sql, stmt.params)

    #
    # updates
    #

    def update_by_id(self, cn: ConnectionWrapper, record: R, all: bool = False) -> int:
        """Update the row whose primary key equals `record`'s.

        With `all` False only non-null attributes are written.
        """
        self._check(record)
        if record.primary_value is None:
            raise ValidationError(f'{self.record_type.__name__}.{self.key} is required for update')
        payload = record.update_map(all)
        if not payload:
            return 0
        stmt = build_update_sql(self.table, payload, self.key, record.primary_value)
        return execute_update(cn, stmt.sql, stmt.params)

    def update_by_gid(self, cn: ConnectionWrapper, record: R, all: bool = False) -> int:
        self._check(record)
        gid = self.gid
        value = record.gid_value
        if value is None:
            raise ValidationError(f'{self.record_type.__name__}.{gid} is required for update')
        payload = record.update_map(all)
        payload.pop(gid, None)
        if not payload:
            return 0
        stmt = build_update_sql(self.table, payload, gid, value)
        return execute_update(cn, stmt.sql, stmt.params)

    def update_by_id_list(self, cn: ConnectionWrapper, record: R, ids: Sequence[Any],
                          all: bool = False) -> int:
        """Apply `record`'s columns to every row whose key is in `ids`.
        """
        self._check(record)
        payload = record.update_map(all)
        if not ids or not payload:
            return 0
        stmt = build_update_in_sql(self.table, payload, self.key, list(ids))
        return execute_update(cn, stmt.sql, stmt.params)

    def update_by_gid_list(self, cn: ConnectionWrapper, record: R, gids: Sequence[Any],
                           all: bool = False) -> int:
        self._check(record)
        gid = self.gid
        payload = record.update_map(all)
        payload.pop(gid, None)
        if not gids or not payload:
            return 0
        stmt = build_update_in_sql(self.table, payload, gid, list(gids))
        return execute_update(cn, stmt.sql, stmt.params)

    def update_where(self, cn: ConnectionWrapper, param_record: R, new_record: R,
                     insert_when_not_exist: bool = False, update_multi: bool = False,
                     all: bool = False) -> int:
        """Update the rows matching the non-null columns of `param_record`.

        Args:
            param_record: match criteria, every non-null column must be equal
            new_record: values to write
            insert_when_not_exist: insert `new_record` when nothing matches
            update_multi: update every match; otherwise `LIMIT 1` is appended
            all: write every column of `new_record`, None included

        Returns
            count of updated (or inserted) rows
        """
        self._check(param_record)
        self._check(new_record)
        payload = new_record.update_map(all)
        if not payload:
            return 0
        where_map = param_record.column_map()
        if insert_when_not_exist:
            stmt = build_exists_sql(self.table, where_map)
            if select_scalar(cn, stmt.sql, stmt.params) is None:
                logger.debug(f'No {self.table} row matches {where_map}, inserting')
                return self.insert(cn, new_record)
        stmt = build_update_where_sql(self.table, payload, where_map, limit_one=not update_multi)
        return execute_update(cn, stmt.sql, stmt.params)

    #
    # deletes
    #

    def _soft_delete(self, cn: ConnectionWrapper, key: str, values: Any) -> int:
        flag = self.record_type.__soft_delete__
        stmt = build_soft_delete_sql(self.table, flag, key, values)
        return execute_update(cn, stmt.sql, stmt.params)

    def soft_delete_by_id(self, cn: ConnectionWrapper, id: Any) -> int:
        """Mark one row invalid by setting the soft-delete flag to 0.
        """
        return self._soft_delete(cn, self.key, id)

    def soft_delete_by_id_list(self, cn: ConnectionWrapper, ids: Sequence[Any]) -> int:
        if not ids:
            return 0
        return self._soft_delete(cn, self.key, list(ids))

    def soft_delete_by_gid(self, cn: ConnectionWrapper, gid: Any) -> int:
        return self._soft_delete(cn, self.gid, gid)

    def soft_delete_by_gid_list(self, cn: ConnectionWrapper, gids: Sequence[Any]) -> int:
        if not gids:
            return 0
        return self._soft_delete(cn, self.gid, list(gids))

    def _delete(self, cn: ConnectionWrapper, key: str, values: Any) -> int:
        stmt = build_delete_sql(self.table, key, values)
        return execute_update(cn, stmt.sql, stmt.params)

    def delete_by_id(self, cn: ConnectionWrapper, id: Any) -> int:
        return self._delete(cn, self.key, id)

    def delete_by_id_list(self, cn: ConnectionWrapper, ids: Sequence[Any]) -> int:
        if not ids:
            return 0
        return self._delete(cn, self.key, list(ids))

    def delete_by_gid(self, cn: ConnectionWrapper, gid: Any) -> int:
        return self._delete(cn, self.gid, gid)

    def delete_by_gid_list(self, cn: ConnectionWrapper, gids: Sequence[Any]) -> int:
        if not gids:
            return 0
        return self._delete(cn, self.gid, list(gids))

    #
    # reads
    #

    def count(self, cn: ConnectionWrapper, record: R | None = None) -> int:
        """Count rows matching the non-null columns of `record` (all rows if None).
        """
        where_map = record.column_map() if record is not None else None
        stmt = build_count_sql(self.table, where_map)
        return int(select_scalar(cn, stmt.sql, stmt.params) or 0)

    def select_by_id(self, cn: ConnectionWrapper, id: Any) -> R | None:
        stmt = build_select_by_key_sql(self.table, self.key, id)
        return select_record(cn, self.record_type, stmt.sql, stmt.params)

    def select_by_gid(self, cn: ConnectionWrapper, gid: Any) -> R | None:
        stmt = build_select_by_key_sql(self.table, self.gid, gid)
        return select_record(cn, self.record_type, stmt.sql, stmt.params)

    def select_by_id_list(self, cn: ConnectionWrapper, ids: Sequence[Any]) -> list[R]:
        if not ids:
            return []
        stmt = build_select_by_key_sql(self.table, self.key, list(ids))
        return select_records(cn, self.record_type, stmt.sql, stmt.params)

    def select_by_gid_list(self, cn: ConnectionWrapper, gids: Sequence[Any]) -> list[R]:
        if not gids:
            return []
        stmt = build_select_by_key_sql(self.table, self.gid, list(gids))
        return select_records(cn, self.record_type, stmt.sql, stmt.params)

    def select_one(self, cn: ConnectionWrapper, record: R) -> R | None:
        """First row matching every non-null column of `record`.
        """
        self._check(record)
        stmt = build_select_sql(self.table, record.column_map())
        return select_record(cn, self.record_type, f'{stmt.sql} LIMIT 1', stmt.params)

    def select_many(self, cn: ConnectionWrapper, record: R) -> list[R]:
        """Every row matching every non-null column of `record`.
        """
        self._check(record)
        stmt = build_select_sql(self.table, record.column_map())
        return select_records(cn, self.record_type, stmt.sql, stmt.params)

    def select_all(self, cn: ConnectionWrapper) -> list[R]:
        return select_records(cn, self.record_type, f'SELECT * FROM {self.table}')

    def select_page(self, cn: ConnectionWrapper, record: R, page: int = 1,
                    size: int = 10) -> PageResult[R]:
        """One page of the rows matching every non-null column of `record`.
        """
        self._check(record)
        where_map = record.column_map()
        count = build_count_sql(self.table, where_map)
        stmt = build_select_sql(self.table, where_map)
        return select_page(cn, self.record_type, count.sql, count.params,
                           stmt.sql, stmt.params, page, size)
