import os

import pytest
from fastapi.testclient import TestClient

from skeleton.app import create_app
from skeleton.core.config import Settings
from skeleton.db.core import Database


@pytest.fixture
def sqlite_dsn(tmp_path):
    """DSN for a throwaway sqlite file, one per test."""
    return f"sqlite://file:{tmp_path / 'test.db'}"


@pytest.fixture
def settings(sqlite_dsn):
    return Settings(DSN=sqlite_dsn, PORT=":8080")


@pytest.fixture
async def db(sqlite_dsn):
    """Open a database for the tests and dispose the pool afterwards."""
    database = Database.open(sqlite_dsn)
    yield database
    await database.close()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """Client with the lifespan running, so the schema is already initialized."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def postgres_dsn():
    dsn = os.environ.get("SKELETON_TEST_POSTGRES_DSN")
    if not dsn:
        pytest.skip("SKELETON_TEST_POSTGRES_DSN is not set")
    return dsn
