"""
Collection store.

Opaque key-value persistence for whole collections: the task list and the
document list are each saved as one JSON text value and rebuilt on load.
"""

import json
import logging
from datetime import datetime
from typing import List, Optional

from assistr.db import get_adapter
from assistr.models.document import Document
from assistr.models.task import Task

logger = logging.getLogger(__name__)

TASKS_KEY = "assistr_tasks"
DOCUMENTS_KEY = "assistr_documents"


class CollectionStore:
    """
    Save and load serialized collections through a StoreAdapter.
    """

    def __init__(self, adapter=None):
        """
        Args:
            adapter: Optional StoreAdapter. If not provided, uses global adapter.
        """
        self._adapter = adapter

    @property
    def adapter(self):
        if self._adapter is None:
            self._adapter = get_adapter()
        return self._adapter

    async def save(self, key: str, value: str) -> None:
        await self.adapter.put(key, value, datetime.now().isoformat())

    async def load(self, key: str) -> Optional[str]:
        return await self.adapter.get(key)

    async def delete(self, key: str) -> bool:
        return await self.adapter.delete(key)

    async def save_tasks(self, tasks: List[Task]) -> None:
        await self.save(TASKS_KEY, json.dumps([t.to_dict() for t in tasks]))
        logger.debug(f"Saved {len(tasks)} task(s)")

    async def load_tasks(self) -> List[Task]:
        """Load the task collection. A corrupt payload loads as empty."""
        items = await self._load_list(TASKS_KEY)
        return [Task.from_dict(item) for item in items if isinstance(item, dict)]

    async def save_documents(self, documents: List[Document]) -> None:
        await self.save(DOCUMENTS_KEY, json.dumps([d.to_dict() for d in documents]))
        logger.debug(f"Saved {len(documents)} document(s)")

    async def load_documents(self) -> List[Document]:
        items = await self._load_list(DOCUMENTS_KEY)
        return [Document.from_dict(item) for item in items if isinstance(item, dict)]

    async def _load_list(self, key: str) -> list:
        stored = await self.load(key)
        if not stored:
            return []
        try:
            items = json.loads(stored)
        except (ValueError, RecursionError) as e:
            logger.warning(f"Stored collection {key} is not valid JSON, starting empty: {e}")
            return []
        if not isinstance(items, list):
            logger.warning(f"Stored collection {key} is not a list, starting empty")
            return []
        return items
