"""
SQLite key-value adapter using aiosqlite.

The default backend: one local file under ~/.assistr holding the task and
document collections.
"""

import logging
from pathlib import Path
from typing import Optional

import aiosqlite

from assistr.db.interface import TABLE, StoreAdapter

logger = logging.getLogger(__name__)

_CREATE = f"""
CREATE TABLE IF NOT EXISTS {TABLE} (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

_UPSERT = f"""
INSERT INTO {TABLE} (key, value, updated_at) VALUES (?, ?, ?)
ON CONFLICT (key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
"""


class SQLiteAdapter(StoreAdapter):
    """Store collections in a local SQLite file (WAL mode)."""

    name = "sqlite"

    def __init__(self, db_path: str = "~/.assistr/assistr.db"):
        """
        Args:
            db_path: Database file. ~ is expanded and parent directories are
                created on connect.
        """
        self.db_path = Path(db_path).expanduser()
        self._conn: Optional[aiosqlite.Connection] = None

    async def connect(self) -> None:
        if self._conn is not None:
            return

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(str(self.db_path))
        await conn.execute("PRAGMA journal_mode = WAL")
        await conn.execute(_CREATE)
        await conn.commit()
        self._conn = conn
        logger.info(f"SQLite store opened: {self.db_path}")

    async def close(self) -> None:
        if self._conn is None:
            return
        await self._conn.close()
        self._conn = None
        logger.info("SQLite store closed")

    async def _connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            await self.connect()
        return self._conn

    async def get(self, key: str) -> Optional[str]:
        conn = await self._connection()
        async with conn.execute(f"SELECT value FROM {TABLE} WHERE key = ?", (key,)) as cursor:
            row = await cursor.fetchone()
        return row[0] if row else None

    async def put(self, key: str, value: str, written_at: str) -> None:
        conn = await self._connection()
        await conn.execute(_UPSERT, (key, value, written_at))
        await conn.commit()

    async def delete(self, key: str) -> bool:
        conn = await self._connection()
        cursor = await conn.execute(f"DELETE FROM {TABLE} WHERE key = ?", (key,))
        await conn.commit()
        return cursor.rowcount > 0

    async def keys(self) -> list[str]:
        conn = await self._connection()
        async with conn.execute(f"SELECT key FROM {TABLE} ORDER BY key") as cursor:
            rows = await cursor.fetchall()
        return [row[0] for row in rows]
