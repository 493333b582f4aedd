import pytest
import pytest_asyncio

import sqleasy
from sqleasy import connection

SCHEMA = "CREATE TABLE test (id INTEGER PRIMARY KEY, name TEXT);"


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Point config at an empty tmp location and reset module caches.

    Tests that open file databases must close them (close_all() or Driver.close()).
    """
    monkeypatch.setenv("SQLEASY_CONFIG", str(tmp_path / "sqleasy.yaml"))
    monkeypatch.delenv("SQLEASY_DB_PATH", raising=False)
    connection._reset_for_testing()
    yield tmp_path
    connection._reset_for_testing()


@pytest_asyncio.fixture
async def db():
    """In-memory database with the `test` table, closed on teardown."""
    connect = await sqleasy.initialize(":memory:", SCHEMA)
    async with connect() as driver:
        yield driver


class FakeCursor:
    """Stand-in for aiosqlite.Cursor recording fetch and close calls."""

    def __init__(self, rows, fail_at=None, error=None):
        self.rows = list(rows)
        self.fail_at = fail_at
        self.error = error or RuntimeError("disk I/O error")
        self.fetches = 0
        self.closes = 0
        self.gate = None

    async def fetchone(self):
        if self.closes:
            raise AssertionError("fetch after finalize")
        index = self.fetches
        self.fetches += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_at is not None and index == self.fail_at:
            raise self.error
        if index < len(self.rows):
            return self.rows[index]
        return None

    async def close(self):
        self.closes += 1


@pytest.fixture
def fake_cursor():
    def make(rows=(), **kwargs):
        return FakeCursor(rows, **kwargs)

    return make
