"""
Key-value storage backends: SQLite (default) and PostgreSQL.
"""

from assistr.db.factory import (
    close_adapter,
    create_adapter,
    get_adapter,
    init_adapter,
    reset_adapter,
)
from assistr.db.interface import TABLE, StoreAdapter

__all__ = [
    "StoreAdapter",
    "TABLE",
    "create_adapter",
    "get_adapter",
    "init_adapter",
    "close_adapter",
    "reset_adapter",
]
