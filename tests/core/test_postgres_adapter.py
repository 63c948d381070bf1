"""
Tests for the PostgreSQL key-value adapter.

asyncpg is replaced with an in-memory pool so the SQL the adapter sends and
the way it reads results can be checked without a server.
"""

from types import SimpleNamespace

import pytest


class FakePostgresError(Exception):
    pass


class FakeConnection:
    def __init__(self, rows, statements):
        self.rows = rows
        self.statements = statements

    async def execute(self, query, *args):
        self.statements.append((" ".join(query.split()), args))
        if "CREATE TABLE" in query:
            return "CREATE TABLE"
        if query.lstrip().startswith("INSERT"):
            key, value, written_at = args
            self.rows[key] = (value, written_at)
            return "INSERT 0 1"
        if query.lstrip().startswith("DELETE"):
            removed = self.rows.pop(args[0], None)
            return f"DELETE {0 if removed is None else 1}"
        raise AssertionError(f"unexpected statement: {query}")

    async def fetchval(self, query, key):
        self.statements.append((" ".join(query.split()), (key,)))
        row = self.rows.get(key)
        return row[0] if row else None

    async def fetch(self, query):
        self.statements.append((" ".join(query.split()), ()))
        return [{"key": key} for key in sorted(self.rows)]


class FakeAcquire:
    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        return self.conn

    async def __aexit__(self, *exc):
        return False


class FakePool:
    def __init__(self, fail_close=False):
        self.rows = {}
        self.statements = []
        self.closed = False
        self.terminated = False
        self.fail_close = fail_close

    def acquire(self):
        return FakeAcquire(FakeConnection(self.rows, self.statements))

    async def close(self):
        if self.fail_close:
            raise FakePostgresError("connection reset")
        self.closed = True

    def terminate(self):
        self.terminated = True


@pytest.fixture
def fake_asyncpg(monkeypatch):
    """Install a fake asyncpg module and record the pools it creates."""
    from assistr.db import postgres

    pools = []
    calls = []

    async def create_pool(url, **kwargs):
        calls.append((url, kwargs))
        pool = FakePool()
        pools.append(pool)
        return pool

    monkeypatch.setattr(postgres, "HAS_ASYNCPG", True)
    monkeypatch.setattr(
        postgres,
        "asyncpg",
        SimpleNamespace(create_pool=create_pool, PostgresError=FakePostgresError),
    )
    return SimpleNamespace(pools=pools, calls=calls)


def test_requires_asyncpg(monkeypatch):
    from assistr.db import postgres

    monkeypatch.setattr(postgres, "HAS_ASYNCPG", False)

    with pytest.raises(RuntimeError) as exc:
        postgres.PostgresAdapter("postgresql://localhost/assistr")

    assert "pip install assistr[postgres]" in str(exc.value)


@pytest.mark.asyncio
async def test_connect_creates_pool_and_table(fake_asyncpg):
    from assistr.db.postgres import PostgresAdapter

    adapter = PostgresAdapter("postgresql://localhost/assistr", pool_size=3)
    await adapter.connect()
    await adapter.connect()

    assert len(fake_asyncpg.pools) == 1
    url, kwargs = fake_asyncpg.calls[0]
    assert url == "postgresql://localhost/assistr"
    assert kwargs == {"min_size": 1, "max_size": 3, "statement_cache_size": 0}
    assert fake_asyncpg.pools[0].statements[0][0].startswith(
        "CREATE TABLE IF NOT EXISTS assistr_store"
    )


@pytest.mark.asyncio
async def test_put_get_delete_keys(fake_asyncpg):
    from assistr.db.postgres import PostgresAdapter

    adapter = PostgresAdapter("postgresql://localhost/assistr")

    await adapter.put("b", "two", "2024-06-15T12:00:00")
    await adapter.put("a", "one", "2024-06-15T12:00:00")
    await adapter.put("a", "uno", "2024-06-15T12:01:00")

    assert await adapter.get("a") == "uno"
    assert await adapter.get("missing") is None
    assert await adapter.keys() == ["a", "b"]
    assert await adapter.delete("a") is True
    assert await adapter.delete("a") is False

    upsert = [s for s, _ in fake_asyncpg.pools[0].statements if s.startswith("INSERT")][0]
    assert "VALUES ($1, $2, $3)" in upsert
    assert "ON CONFLICT (key) DO UPDATE" in upsert


@pytest.mark.asyncio
async def test_close(fake_asyncpg):
    from assistr.db.postgres import PostgresAdapter

    adapter = PostgresAdapter("postgresql://localhost/assistr")
    await adapter.connect()
    pool = fake_asyncpg.pools[0]

    await adapter.close()
    await adapter.close()

    assert pool.closed is True


@pytest.mark.asyncio
async def test_close_failure_terminates(fake_asyncpg):
    from assistr.db.postgres import PostgresAdapter

    adapter = PostgresAdapter("postgresql://localhost/assistr")
    await adapter.connect()
    pool = fake_asyncpg.pools[0]
    pool.fail_close = True

    await adapter.close()

    assert pool.terminated is True


def test_factory_builds_postgres(fake_asyncpg):
    from assistr.config import DatabaseConfig
    from assistr.db import create_adapter
    from assistr.db.postgres import PostgresAdapter

    adapter = create_adapter(
        DatabaseConfig(type="PostgreSQL", postgres_url="postgresql://localhost/assistr")
    )

    assert isinstance(adapter, PostgresAdapter)
    assert adapter.url == "postgresql://localhost/assistr"
