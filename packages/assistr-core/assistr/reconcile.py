"""
Task reconciliation.

Turns partial task records (from generation or document extraction) into
full Tasks and merges them into a collection. Collections are plain lists
owned by the caller; every function here returns a new list or a new Task
and leaves its inputs alone.
"""

import dataclasses
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from assistr.dates import parse_due_date
from assistr.models.task import (
    DEFAULT_CATEGORY,
    UNTITLED_TASK,
    PartialTask,
    Task,
    coerce_flag,
    coerce_priority,
    coerce_status,
    coerce_tags,
)

logger = logging.getLogger(__name__)

# Fields an update is allowed to touch
UPDATABLE_FIELDS = (
    "title",
    "description",
    "priority",
    "status",
    "category",
    "tags",
    "due_date",
    "ai_generated",
    "source_document",
)


def build_task(
    partial,
    now: Optional[datetime] = None,
    ai_generated: bool = True,
    source_document: Optional[str] = None,
) -> Task:
    """
    Default a single partial record into a Task.

    Args:
        partial: PartialTask or loose dict
        now: Creation time (defaults to the current time)
        ai_generated: Value for the ai_generated flag
        source_document: Overrides the record's own source document

    Returns:
        A new Task with status "todo"
    """
    partial = PartialTask.from_dict(partial)
    now = now or datetime.now()

    title = (partial.title or "").strip() or UNTITLED_TASK
    category = (partial.category or "").strip() or DEFAULT_CATEGORY

    task = Task(
        title=title,
        description=partial.description,
        priority=coerce_priority(partial.priority),
        status="todo",
        category=category,
        tags=coerce_tags(partial.tags),
        created_at=now,
        updated_at=now,
        ai_generated=ai_generated,
        source_document=source_document or partial.source_document,
    )

    if partial.due_date:
        due = parse_due_date(partial.due_date)
        if due is None:
            logger.debug(f"Dropping unparseable due date {partial.due_date!r} on '{title}'")
        task.due_date = due

    return task


def reconcile_generated_tasks(
    partials: Iterable,
    source_document: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[Task]:
    """
    Turn model-produced partial records into Tasks, preserving order.

    Never rejects a record; missing or invalid fields are defaulted.
    """
    now = now or datetime.now()
    tasks = [
        build_task(p, now=now, ai_generated=True, source_document=source_document)
        for p in (partials or [])
    ]
    logger.info(f"Reconciled {len(tasks)} generated task(s)")
    return tasks


def append_tasks(collection: List[Task], new_tasks: Iterable[Task]) -> List[Task]:
    """
    Append tasks to a collection.

    No de-duplication: every generation pass may add more tasks.
    """
    return list(collection) + list(new_tasks)


def apply_task_update(task: Task, changes: dict, now: Optional[datetime] = None) -> Task:
    """
    Apply field changes to a task, returning a new Task.

    id and created_at are never overwritten. updated_at moves to the current
    time but never backwards. Unknown priority/status values leave the
    current value in place; an unparseable due date string is ignored.
    """
    now = now or datetime.now()
    updates = {}

    for name, value in (changes or {}).items():
        if name not in UPDATABLE_FIELDS:
            continue

        if name == "priority":
            value = coerce_priority(value, default=task.priority)
        elif name == "status":
            value = coerce_status(value, default=task.status)
        elif name == "tags":
            value = coerce_tags(value)
        elif name == "due_date" and value is not None:
            value = parse_due_date(value)
            if value is None:
                continue
        elif name == "ai_generated":
            value = coerce_flag(value, default=task.ai_generated)
        elif name == "title":
            value = value.strip() if isinstance(value, str) else ""
            value = value or task.title

        updates[name] = value

    updated_at = max(now, task.updated_at) if task.updated_at else now
    return dataclasses.replace(task, **updates, updated_at=updated_at)


def find_task(collection: List[Task], task_id: str) -> Optional[Task]:
    for task in collection:
        if task.id == task_id:
            return task
    return None


def replace_task(collection: List[Task], task: Task) -> List[Task]:
    """Swap in `task` for the entry with the same id. Unknown ids are a no-op."""
    return [task if existing.id == task.id else existing for existing in collection]


def remove_task(collection: List[Task], task_id: str) -> List[Task]:
    return [t for t in collection if t.id != task_id]
