"""
Task Service for Assistr.

Owns one session's task collection and persists it through a CollectionStore
after every mutation.
"""

import builtins
import logging
from datetime import datetime

from assistr.dates import parse_due_date, parse_natural_date
from assistr.models.task import (
    DEFAULT_CATEGORY,
    TASK_PRIORITIES,
    TASK_STATUSES,
    DateRange,
    Task,
    TaskFilter,
    TaskStats,
)
from assistr.reconcile import (
    append_tasks,
    apply_task_update,
    find_task,
    reconcile_generated_tasks,
    remove_task,
    replace_task,
)
from assistr import views

logger = logging.getLogger(__name__)


def _parse_user_due_date(value):
    """ISO dates first, then phrases like "tomorrow" or "07/04/2025"."""
    due = parse_due_date(value)
    if due is None and isinstance(value, str):
        due = parse_natural_date(value)
    return due


class TaskService:
    """
    Service for managing tasks.

    The collection lives in memory on the service; the store (when given) is
    a write-through copy.
    """

    def __init__(self, store=None, tasks=None):
        """
        Initialize task service.

        Args:
            store: Optional CollectionStore for persistence
            tasks: Optional initial collection
        """
        self._store = store
        self.tasks: builtins.list[Task] = builtins.list(tasks or [])

    async def load(self) -> builtins.list[Task]:
        """Replace the in-memory collection with the persisted one."""
        if self._store is not None:
            self.tasks = await self._store.load_tasks()
            logger.info(f"Loaded {len(self.tasks)} task(s)")
        return self.tasks

    async def _persist(self) -> None:
        if self._store is not None:
            await self._store.save_tasks(self.tasks)

    async def create(
        self,
        title: str,
        description: str | None = None,
        priority: str = "medium",
        status: str = "todo",
        category: str | None = None,
        tags: builtins.list[str] | None = None,
        due_date: datetime | str | None = None,
    ) -> Task:
        """
        Create a task from direct user input.

        Args:
            title: Task title (required)
            description: Task description
            priority: Priority (low, medium, high, urgent)
            status: Status (todo, in-progress, completed, cancelled)
            category: Category, "general" when omitted
            tags: List of tags
            due_date: Optional due date (datetime or ISO string)

        Returns:
            Created Task object
        """
        if not title or not title.strip():
            raise ValueError("Title is required")
        if status not in TASK_STATUSES:
            raise ValueError(f"Invalid status. Must be one of: {', '.join(TASK_STATUSES)}")
        if priority not in TASK_PRIORITIES:
            raise ValueError(f"Invalid priority. Must be one of: {', '.join(TASK_PRIORITIES)}")

        due = None
        if due_date is not None:
            due = _parse_user_due_date(due_date)
            if due is None:
                raise ValueError(f"Invalid due date: {due_date}")

        task = Task(
            title=title.strip(),
            description=description,
            priority=priority,
            status=status,
            category=(category or "").strip() or DEFAULT_CATEGORY,
            tags=tags or [],
            due_date=due,
        )

        self.tasks = append_tasks(self.tasks, [task])
        await self._persist()

        logger.info(f"Created task: {task.id} - {task.title}")
        return task

    def get(self, task_id: str) -> Task | None:
        """Get a task by ID."""
        return find_task(self.tasks, task_id)

    async def update(self, task_id: str, **changes) -> Task | None:
        """
        Update a task.

        Args:
            task_id: Task ID
            **changes: Fields to change (title, description, priority, status,
                category, tags, due_date)

        Returns:
            Updated Task or None if not found
        """
        status = changes.get("status")
        priority = changes.get("priority")
        if status is not None and status not in TASK_STATUSES:
            raise ValueError(f"Invalid status. Must be one of: {', '.join(TASK_STATUSES)}")
        if priority is not None and priority not in TASK_PRIORITIES:
            raise ValueError(f"Invalid priority. Must be one of: {', '.join(TASK_PRIORITIES)}")
        if changes.get("due_date") is not None:
            due = _parse_user_due_date(changes["due_date"])
            if due is None:
                raise ValueError(f"Invalid due date: {changes['due_date']}")
            changes["due_date"] = due

        task = self.get(task_id)
        if task is None:
            return None

        # Drop unset arguments so callers can pass every field through
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            return task

        updated = apply_task_update(task, changes)
        self.tasks = replace_task(self.tasks, updated)
        await self._persist()

        logger.info(f"Updated task: {task_id} ({', '.join(sorted(changes))})")
        return updated

    async def clear_due_date(self, task_id: str) -> Task | None:
        task = self.get(task_id)
        if task is None:
            return None
        updated = apply_task_update(task, {"due_date": None})
        self.tasks = replace_task(self.tasks, updated)
        await self._persist()
        return updated

    async def complete(self, task_id: str) -> Task | None:
        """Mark a task as completed."""
        return await self.update(task_id, status="completed")

    async def delete(self, task_id: str) -> bool:
        """Remove a task. Returns False if it did not exist."""
        if self.get(task_id) is None:
            return False
        self.tasks = remove_task(self.tasks, task_id)
        await self._persist()
        logger.info(f"Deleted task: {task_id}")
        return True

    async def add_generated(
        self,
        partials,
        source_document: str | None = None,
    ) -> builtins.list[Task]:
        """
        Reconcile model-produced records and append them.

        Repeated generation is never de-duplicated against existing tasks.
        """
        new_tasks = reconcile_generated_tasks(partials, source_document=source_document)
        if not new_tasks:
            return []
        self.tasks = append_tasks(self.tasks, new_tasks)
        await self._persist()
        return new_tasks

    def list(
        self,
        statuses: builtins.list[str] | None = None,
        priorities: builtins.list[str] | None = None,
        categories: builtins.list[str] | None = None,
        ai_generated: bool | None = None,
        date_range: DateRange | None = None,
        sort_by: str = "created_at",
        ascending: bool = False,
        limit: int | None = None,
    ) -> builtins.list[Task]:
        """
        List tasks with optional filters.

        Args:
            statuses: Keep tasks with one of these statuses
            priorities: Keep tasks with one of these priorities
            categories: Keep tasks in one of these categories
            ai_generated: Keep only AI-generated (True) or user-created (False)
            date_range: Keep tasks whose due date (or creation time) falls inside
            sort_by: priority, due_date, created_at, title or status
            ascending: Sort ascending instead of descending
            limit: Max results

        Returns:
            List of Task objects
        """
        criteria = TaskFilter(
            statuses=statuses,
            priorities=priorities,
            categories=categories,
            ai_generated=ai_generated,
            date_range=date_range,
        )
        result = views.sort_tasks(views.filter_tasks(self.tasks, criteria), sort_by, ascending)
        return result[:limit] if limit else result

    def stats(self) -> TaskStats:
        return views.compute_stats(self.tasks)

    def due_today(self) -> builtins.list[Task]:
        return views.due_today(self.tasks)

    def overdue(self) -> builtins.list[Task]:
        return views.overdue(self.tasks)

    def upcoming(self, days: int = 7) -> builtins.list[Task]:
        return views.upcoming(self.tasks, days=days)
