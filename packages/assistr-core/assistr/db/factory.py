"""
Adapter selection.

`create_adapter` builds a fresh adapter from a DatabaseConfig. The rest of
this module keeps one process-wide adapter for the MCP server.
"""

import logging

from assistr.db.interface import StoreAdapter

logger = logging.getLogger(__name__)

_adapter: StoreAdapter | None = None


def _build_sqlite(database) -> StoreAdapter:
    from assistr.db.sqlite import SQLiteAdapter

    return SQLiteAdapter(database.sqlite_path)


def _build_postgres(database) -> StoreAdapter:
    if not database.postgres_url:
        raise ValueError(
            "PostgreSQL URL not configured. "
            "Set database.postgres.url in config or ASSISTR_DATABASE_URL env var."
        )
    from assistr.db.postgres import PostgresAdapter

    return PostgresAdapter(database.postgres_url)


_BUILDERS = {
    "sqlite": _build_sqlite,
    "postgres": _build_postgres,
    "postgresql": _build_postgres,
}


def create_adapter(database) -> StoreAdapter:
    """
    Build an unconnected adapter for a DatabaseConfig.

    Raises:
        ValueError: Unknown backend type, or postgres without a URL
    """
    db_type = (database.type or "").lower()
    builder = _BUILDERS.get(db_type)
    if builder is None:
        raise ValueError(f"Unknown database type: {database.type}. Use 'postgres' or 'sqlite'.")
    adapter = builder(database)
    logger.info(f"Using {adapter.name} store")
    return adapter


def get_adapter(config=None) -> StoreAdapter:
    """The shared adapter, created from `config` (or the loaded config) on first use."""
    global _adapter
    if _adapter is None:
        if config is None:
            from assistr.config import get_config
            config = get_config()
        _adapter = create_adapter(config.database)
    return _adapter


async def init_adapter(config=None) -> StoreAdapter:
    adapter = get_adapter(config)
    await adapter.connect()
    return adapter


async def close_adapter() -> None:
    global _adapter
    if _adapter is not None:
        await _adapter.close()
    _adapter = None


def reset_adapter() -> None:
    """Forget the shared adapter without closing it (tests, config changes)."""
    global _adapter
    _adapter = None
