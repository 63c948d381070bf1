"""
Derived views over a task collection: stats, date windows, filtering and
sorting. Everything here is side-effect free.
"""

from datetime import datetime, timedelta
from typing import List, Optional

from assistr.dates import start_of_day
from assistr.models.task import (
    PRIORITY_RANK,
    STATUS_ORDER,
    TERMINAL_STATUSES,
    Task,
    TaskFilter,
    TaskStats,
)

SORT_KEYS = ("priority", "due_date", "created_at", "title", "status")

_SORT_ALIASES = {
    "dueDate": "due_date",
    "createdAt": "created_at",
}


def compute_stats(tasks: List[Task], now: Optional[datetime] = None) -> TaskStats:
    """Count tasks by status, priority and category."""
    now = now or datetime.now()
    stats = TaskStats(total=len(tasks))

    for task in tasks:
        if task.status == "completed":
            stats.completed += 1
        elif task.status == "in-progress":
            stats.in_progress += 1

        if task.is_overdue(now):
            stats.overdue += 1

        stats.by_priority[task.priority] = stats.by_priority.get(task.priority, 0) + 1
        stats.by_category[task.category] = stats.by_category.get(task.category, 0) + 1

    return stats


def due_today(tasks: List[Task], now: Optional[datetime] = None) -> List[Task]:
    """Tasks due between local midnight today (inclusive) and tomorrow (exclusive)."""
    today = start_of_day(now)
    tomorrow = today + timedelta(days=1)
    return [t for t in tasks if t.due_date is not None and today <= t.due_date < tomorrow]


def overdue(tasks: List[Task], now: Optional[datetime] = None) -> List[Task]:
    now = now or datetime.now()
    return [t for t in tasks if t.is_overdue(now)]


def upcoming(tasks: List[Task], days: int = 7, now: Optional[datetime] = None) -> List[Task]:
    """Unfinished tasks due within the next `days` days."""
    now = now or datetime.now()
    horizon = now + timedelta(days=days)
    return [
        t for t in tasks
        if t.due_date is not None
        and now <= t.due_date <= horizon
        and t.status not in TERMINAL_STATUSES
    ]


def matches(task: Task, criteria: TaskFilter) -> bool:
    """Check a single task against every supplied criterion."""
    if criteria.statuses is not None and task.status not in criteria.statuses:
        return False
    if criteria.priorities is not None and task.priority not in criteria.priorities:
        return False
    if criteria.categories is not None and task.category not in criteria.categories:
        return False
    if criteria.ai_generated is not None and task.ai_generated != criteria.ai_generated:
        return False
    if criteria.date_range is not None:
        moment = task.due_date or task.created_at
        if not criteria.date_range.contains(moment):
            return False
    return True


def filter_tasks(tasks: List[Task], criteria: Optional[TaskFilter] = None) -> List[Task]:
    if criteria is None:
        return list(tasks)
    return [t for t in tasks if matches(t, criteria)]


def _sort_key(key: str):
    if key == "priority":
        return lambda t: PRIORITY_RANK.get(t.priority, 0)
    if key == "due_date":
        return lambda t: t.due_date or datetime.max
    if key == "created_at":
        return lambda t: t.created_at
    if key == "title":
        return lambda t: t.title
    if key == "status":
        return lambda t: STATUS_ORDER.get(t.status, 0)
    raise ValueError(f"Invalid sort key. Must be one of: {', '.join(SORT_KEYS)}")


def sort_tasks(tasks: List[Task], key: str = "created_at", ascending: bool = False) -> List[Task]:
    """
    Stable sort by a single key.

    Descending by default: most urgent, most recent or latest first. Tasks
    without a due date sort as if due at the end of time.
    """
    key = _SORT_ALIASES.get(key, key)
    # sorted() keeps equal elements in input order even with reverse=True
    return sorted(tasks, key=_sort_key(key), reverse=not ascending)
