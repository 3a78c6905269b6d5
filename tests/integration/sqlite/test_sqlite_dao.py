"""
Dao round trips against a file-backed SQLite pool.
"""
import datetime
import decimal

import pytest
from recordsql import Dao, IntegrityError, ValidationError
from tests.fixtures.records import Order, User


@pytest.fixture
def users():
    return Dao(User)


def test_insert_and_select_by_id(sqlite_pool, users, make_user):
    with sqlite_pool.transaction() as cn:
        user_id = users.insert_return_id(cn, make_user('alice'))
    assert user_id == 1

    with sqlite_pool.reader() as cn:
        user = users.select_by_id(cn, user_id)

    assert user.user_id == 1
    assert user.user_name == 'alice'
    assert user.balance == decimal.Decimal('10.50')
    assert user.created_at == datetime.datetime(2024, 1, 2, 3, 4, 5)
    assert user.is_valid == 1


def test_insert_returns_row_count(sqlite_pool, users):
    with sqlite_pool.transaction() as cn:
        assert users.insert(cn, User(user_name='bob')) == 1
    with sqlite_pool.reader() as cn:
        bob = users.select_one(cn, User(user_name='bob'))
    assert bob.is_valid == 1
    assert bob.user_gid is None


def test_select_missing_row(sqlite_pool, users):
    with sqlite_pool.reader() as cn:
        assert users.select_by_id(cn, 99) is None
        assert users.select_by_gid(cn, 'nope') is None
        assert users.select_one(cn, User(user_name='ghost')) is None


def test_batch_insert(seeded_pool, users):
    with seeded_pool.reader() as cn:
        assert users.count(cn) == 25
        found = users.select_by_id_list(cn, [3, 1, 2])
    assert sorted(u.user_name for u in found) == ['user-01', 'user-02', 'user-03']


def test_batch_insert_empty(sqlite_pool, users):
    with pytest.raises(ValidationError):
        with sqlite_pool.transaction() as cn:
            users.batch_insert(cn, [])


def test_lookup_by_gid(seeded_pool, users):
    with seeded_pool.reader() as cn:
        user = users.select_by_gid(cn, 'gid-user-07')
        many = users.select_by_gid_list(cn, ['gid-user-07', 'gid-user-08'])
    assert user.user_id == 7
    assert {u.user_id for u in many} == {7, 8}


def test_update_by_id_sparse(seeded_pool, users):
    with seeded_pool.transaction() as cn:
        assert users.update_by_id(cn, User(user_id=2, user_name='renamed')) == 1
    with seeded_pool.reader() as cn:
        user = users.select_by_id(cn, 2)
    assert user.user_name == 'renamed'
    assert user.balance == decimal.Decimal('10.50')


def test_update_by_id_all_writes_nulls(seeded_pool, users):
    with seeded_pool.transaction() as cn:
        users.update_by_id(cn, User(user_id=2, user_name='only', is_valid=1), all=True)
    with seeded_pool.reader() as cn:
        user = users.select_by_id(cn, 2)
    assert user.balance is None
    assert user.user_gid is None


def test_update_by_id_requires_key(seeded_pool, users):
    with pytest.raises(ValidationError):
        with seeded_pool.transaction() as cn:
            users.update_by_id(cn, User(user_name='x'))


def test_update_with_empty_payload(seeded_pool, users):
    with seeded_pool.transaction() as cn:
        assert users.update_by_id(cn, User(user_id=1)) == 0
        assert users.update_by_id_list(cn, User(), [1, 2]) == 0


def test_update_by_gid(seeded_pool, users):
    with seeded_pool.transaction() as cn:
        count = users.update_by_gid(cn, User(user_gid='gid-user-03', user_name='third'))
    assert count == 1
    with seeded_pool.reader() as cn:
        assert users.select_by_id(cn, 3).user_name == 'third'


def test_update_lists(seeded_pool, users):
    with seeded_pool.transaction() as cn:
        assert users.update_by_id_list(cn, User(balance=decimal.Decimal('1.00')), [1, 2, 3]) == 3
        assert users.update_by_gid_list(cn, User(user_name='x'), ['gid-user-04']) == 1
        assert users.update_by_id_list(cn, User(user_name='y'), []) == 0
        assert users.update_by_gid_list(cn, User(user_name='y'), []) == 0
    with seeded_pool.reader() as cn:
        assert users.count(cn, User(balance=decimal.Decimal('1.00'))) == 3
        assert users.select_by_id(cn, 4).user_name == 'x'


def test_update_where_multi(seeded_pool, users):
    with seeded_pool.transaction() as cn:
        count = users.update_where(cn, User(is_valid=1), User(balance=decimal.Decimal('0')),
                                   update_multi=True)
    assert count == 25


def test_update_where_inserts_when_missing(seeded_pool, users):
    with seeded_pool.transaction() as cn:
        count = users.update_where(cn, User(user_name='newcomer'),
                                   User(user_name='newcomer', user_gid='gid-new'),
                                   insert_when_not_exist=True, update_multi=True)
    assert count == 1
    with seeded_pool.reader() as cn:
        assert users.count(cn) == 26
        assert users.select_by_gid(cn, 'gid-new').user_name == 'newcomer'


def test_update_where_existing_row_is_updated(seeded_pool, users):
    with seeded_pool.transaction() as cn:
        count = users.update_where(cn, User(user_name='user-05'), User(user_name='five'),
                                   insert_when_not_exist=True, update_multi=True)
    assert count == 1
    with seeded_pool.reader() as cn:
        assert users.count(cn) == 25
        assert users.select_by_id(cn, 5).user_name == 'five'


def test_soft_delete(seeded_pool, users):
    with seeded_pool.transaction() as cn:
        assert users.soft_delete_by_id(cn, 1) == 1
        assert users.soft_delete_by_id_list(cn, [2, 3]) == 2
        assert users.soft_delete_by_gid(cn, 'gid-user-04') == 1
        assert users.soft_delete_by_gid_list(cn, ['gid-user-05', 'gid-user-06']) == 2
        assert users.soft_delete_by_id_list(cn, []) == 0
    with seeded_pool.reader() as cn:
        assert users.count(cn, User(is_valid=0)) == 6
        assert users.count(cn) == 25


def test_delete(seeded_pool, users):
    with seeded_pool.transaction() as cn:
        assert users.delete_by_id(cn, 1) == 1
        assert users.delete_by_id_list(cn, [2, 3, 99]) == 2
        assert users.delete_by_gid(cn, 'gid-user-04') == 1
        assert users.delete_by_gid_list(cn, ['gid-user-05']) == 1
        assert users.delete_by_gid_list(cn, ()) == 0
    with seeded_pool.reader() as cn:
        assert users.count(cn) == 20
        assert users.select_by_id_list(cn, [1, 2, 3]) == []


def test_empty_lists_return_nothing(seeded_pool, users):
    with seeded_pool.reader() as cn:
        assert users.select_by_id_list(cn, []) == []
        assert users.select_by_gid_list(cn, []) == []


def test_select_many_and_all(seeded_pool, users):
    with seeded_pool.transaction() as cn:
        users.soft_delete_by_id_list(cn, [1, 2])
    with seeded_pool.reader() as cn:
        valid = users.select_many(cn, User(is_valid=1))
        everyone = users.select_all(cn)
    assert len(valid) == 23
    assert len(everyone) == 25


def test_unique_violation(seeded_pool, users, make_user):
    with pytest.raises(IntegrityError):
        with seeded_pool.transaction() as cn:
            users.insert(cn, make_user('dup', gid='gid-user-01'))
    with seeded_pool.reader() as cn:
        assert users.count(cn) == 25


def test_wrong_record_type(sqlite_pool, users):
    with pytest.raises(ValidationError):
        with sqlite_pool.transaction() as cn:
            users.insert(cn, Order(amount=1))


if __name__ == '__main__':
    __import__('pytest').main([__file__])
