"""
PostgreSQL key-value adapter using asyncpg.

Optional backend for sharing one store between machines. Install with
`pip install assistr[postgres]`.
"""

import asyncio
import logging
from typing import Optional

from assistr.db.interface import TABLE, StoreAdapter

logger = logging.getLogger(__name__)

try:
    import asyncpg
    HAS_ASYNCPG = True
except ImportError:
    HAS_ASYNCPG = False
    asyncpg = None

_CREATE = f"""
CREATE TABLE IF NOT EXISTS {TABLE} (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

_UPSERT = f"""
INSERT INTO {TABLE} (key, value, updated_at) VALUES ($1, $2, $3)
ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value, updated_at = EXCLUDED.updated_at
"""


class PostgresAdapter(StoreAdapter):
    """Store collections in a shared PostgreSQL table through a small pool."""

    name = "postgres"

    def __init__(self, connection_url: str, pool_size: int = 5):
        if not HAS_ASYNCPG:
            raise RuntimeError(
                "asyncpg not installed. Run: pip install assistr[postgres]"
            )
        self.url = connection_url
        self.pool_size = pool_size
        self._pool = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    async def connect(self) -> None:
        loop = asyncio.get_running_loop()
        if self._pool is not None and self._loop is loop:
            return

        # Pools cannot cross event loops; drop one left over from another loop
        if self._pool is not None:
            self._pool.terminate()

        # statement_cache_size=0 keeps pgbouncer happy
        self._pool = await asyncpg.create_pool(
            self.url, min_size=1, max_size=self.pool_size, statement_cache_size=0
        )
        self._loop = loop
        async with self._pool.acquire() as conn:
            await conn.execute(_CREATE)
        logger.info("PostgreSQL store opened")

    async def close(self) -> None:
        if self._pool is None:
            return
        try:
            await self._pool.close()
        except (OSError, asyncpg.PostgresError) as e:
            logger.warning(f"PostgreSQL pool did not close cleanly, terminating: {e}")
            self._pool.terminate()
        self._pool = None
        self._loop = None
        logger.info("PostgreSQL store closed")

    async def _acquire(self):
        if self._pool is None or self._loop is not asyncio.get_running_loop():
            await self.connect()
        return self._pool.acquire()

    async def get(self, key: str) -> Optional[str]:
        async with await self._acquire() as conn:
            return await conn.fetchval(f"SELECT value FROM {TABLE} WHERE key = $1", key)

    async def put(self, key: str, value: str, written_at: str) -> None:
        async with await self._acquire() as conn:
            await conn.execute(_UPSERT, key, value, written_at)

    async def delete(self, key: str) -> bool:
        async with await self._acquire() as conn:
            status = await conn.execute(f"DELETE FROM {TABLE} WHERE key = $1", key)
        # asyncpg reports e.g. "DELETE 1"
        return status.rsplit(" ", 1)[-1] != "0"

    async def keys(self) -> list[str]:
        async with await self._acquire() as conn:
            rows = await conn.fetch(f"SELECT key FROM {TABLE} ORDER BY key")
        return [row["key"] for row in rows]
