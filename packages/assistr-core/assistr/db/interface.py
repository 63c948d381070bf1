"""
Key-value adapter contract.

Assistr persists whole collections under string keys, so a backend only has
to store, read, list and drop text values in one table. Each adapter owns its
SQL dialect and creates the table when it connects.
"""

from abc import ABC, abstractmethod
from typing import Optional

# Shared by every backend
TABLE = "assistr_store"


class StoreAdapter(ABC):
    """
    A text value per key, plus the time it was last written.

    Implementations connect lazily: any operation on a closed adapter
    connects first.
    """

    name: str = "abstract"

    @abstractmethod
    async def connect(self) -> None:
        """Open the backend and create the key-value table if needed."""

    @abstractmethod
    async def close(self) -> None:
        """Release the connection. Closing twice is a no-op."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Stored text for `key`, or None."""

    @abstractmethod
    async def put(self, key: str, value: str, written_at: str) -> None:
        """Insert or overwrite `key`."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Drop `key`. Returns False when it was not stored."""

    @abstractmethod
    async def keys(self) -> list[str]:
        """All stored keys, sorted."""
