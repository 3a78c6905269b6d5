import pathlib
import site

import pytest
from recordsql.pool import shutdown

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture(autouse=True)
def reset_default_pool():
    """Forget the process-wide pool after each test to keep tests isolated."""
    yield
    shutdown()


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.records',
    'tests.fixtures.sqlite',
]
