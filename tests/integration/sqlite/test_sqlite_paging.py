"""
Paged queries against 25 seeded users.
"""
import pytest
import recordsql as db
from recordsql import Dao
from tests.fixtures.records import User


@pytest.fixture
def users():
    return Dao(User)


def names(result):
    return [u.user_name for u in result.data]


def test_partial_last_page(seeded_pool, users):
    with seeded_pool.reader() as cn:
        result = users.select_page(cn, User(is_valid=1), page=3, size=10)
    assert (result.page, result.total) == (3, 25)
    assert names(result) == [f'user-{i:02d}' for i in range(21, 26)]


def test_page_at_exact_end_steps_back(seeded_pool, users):
    with seeded_pool.transaction() as cn:
        users.delete_by_id_list(cn, [21, 22, 23, 24, 25])
    with seeded_pool.reader() as cn:
        result = users.select_page(cn, User(), page=3, size=10)
    assert (result.page, result.total) == (2, 20)
    assert names(result) == [f'user-{i:02d}' for i in range(11, 21)]


def test_page_past_end_single_reclamp(seeded_pool, users):
    with seeded_pool.transaction() as cn:
        users.delete_by_id_list(cn, [21, 22, 23, 24, 25])
    with seeded_pool.reader() as cn:
        result = users.select_page(cn, User(), page=5, size=10)
    assert (result.page, result.total) == (3, 20)
    assert result.data == []


def test_no_rows(seeded_pool, users):
    with seeded_pool.reader() as cn:
        result = users.select_page(cn, User(user_name='nobody'), page=4, size=10)
    assert result.to_dict() == {'page': 1, 'total': 0, 'data': []}


@pytest.mark.parametrize('page', [0, -5])
def test_non_positive_page(seeded_pool, users, page):
    with seeded_pool.reader() as cn:
        result = users.select_page(cn, User(), page=page, size=10)
    assert result.page == 1
    assert names(result)[0] == 'user-01'


def test_zero_size_is_one(seeded_pool, users):
    with seeded_pool.reader() as cn:
        result = users.select_page(cn, User(), page=2, size=0)
    assert names(result) == ['user-02']


def test_custom_queries_keep_caller_params(seeded_pool):
    params = [1]
    with seeded_pool.reader() as cn:
        result = db.select_page(
            cn, User,
            'SELECT COUNT(1) FROM tb_user WHERE is_valid = ?', params,
            'SELECT * FROM tb_user WHERE is_valid = ? ORDER BY user_id DESC', params,
            page=1, size=3)
    assert params == [1]
    assert [u.user_id for u in result.data] == [25, 24, 23]


def test_wire_contract(seeded_pool, users):
    with seeded_pool.reader() as cn:
        rendered = users.select_page(cn, User(), page=9, size=20).to_dict()
    assert rendered['page'] == 2
    assert rendered['total'] == 25
    assert len(rendered['data']) == 5
    assert set(rendered['data'][0]) == {
        'user_id', 'user_gid', 'user_name', 'balance', 'created_at', 'is_valid'}


if __name__ == '__main__':
    __import__('pytest').main([__file__])
