"""
Task model for Assistr.

Tasks are the actionable items a user tracks, whether typed in directly or
generated by the model from free text or a document.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict
from uuid import uuid4

from assistr.dates import parse_due_date, parse_timestamp

# Valid status values, in lifecycle order
TASK_STATUSES = ("todo", "in-progress", "completed", "cancelled")

# Valid priority values, least to most pressing
TASK_PRIORITIES = ("low", "medium", "high", "urgent")

PRIORITY_RANK = {"low": 1, "medium": 2, "high": 3, "urgent": 4}
STATUS_ORDER = {"todo": 1, "in-progress": 2, "completed": 3, "cancelled": 4}

# Tasks in these states are never overdue
TERMINAL_STATUSES = ("completed", "cancelled")

DEFAULT_PRIORITY = "medium"
DEFAULT_STATUS = "todo"
DEFAULT_CATEGORY = "general"
UNTITLED_TASK = "Untitled Task"


def generate_task_id() -> str:
    return str(uuid4())


def coerce_priority(value, default: str = DEFAULT_PRIORITY) -> str:
    """Return a valid priority, falling back to `default` for anything unknown."""
    if isinstance(value, str) and value.strip().lower() in TASK_PRIORITIES:
        return value.strip().lower()
    return default


def coerce_status(value, default: str = DEFAULT_STATUS) -> str:
    """Return a valid status, falling back to `default` for anything unknown."""
    if isinstance(value, str):
        normalized = value.strip().lower().replace("_", "-")
        if normalized in TASK_STATUSES:
            return normalized
    return default


def coerce_tags(value) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(tag) for tag in value if tag is not None and str(tag).strip()]


@dataclass
class Task:
    """
    A task or work item.

    Attributes:
        id: Unique identifier (UUID)
        title: Task title
        description: Detailed description
        priority: Priority level (low, medium, high, urgent)
        status: Current status (todo, in-progress, completed, cancelled)
        category: Free-text category, "general" when unset
        tags: Ordered list of tags
        due_date: Optional due date
        created_at: When the task was created
        updated_at: When last modified
        ai_generated: Whether the model produced this task
        source_document: Name of the document the task was extracted from
    """

    title: str
    id: str = field(default_factory=generate_task_id)
    description: Optional[str] = None
    priority: str = DEFAULT_PRIORITY
    status: str = DEFAULT_STATUS
    category: str = DEFAULT_CATEGORY
    tags: List[str] = field(default_factory=list)
    due_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    ai_generated: bool = False
    source_document: Optional[str] = None

    def __post_init__(self):
        if self.created_at is None:
            self.created_at = datetime.now()
        if self.updated_at is None or self.updated_at < self.created_at:
            self.updated_at = self.created_at

    @property
    def is_open(self) -> bool:
        """Check if task is still being worked."""
        return self.status in ("todo", "in-progress")

    @property
    def is_complete(self) -> bool:
        return self.status == "completed"

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """Due date strictly in the past and the task is not finished."""
        if self.due_date is None or self.is_terminal:
            return False
        return self.due_date < (now or datetime.now())

    def to_dict(self) -> dict:
        """Convert to dictionary for storage/serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "status": self.status,
            "category": self.category,
            "tags": list(self.tags),
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "ai_generated": self.ai_generated,
            "source_document": self.source_document,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from a serialized dictionary."""
        kwargs = dict(
            title=data.get("title") or "",
            description=data.get("description"),
            priority=coerce_priority(data.get("priority")),
            status=coerce_status(data.get("status")),
            category=data.get("category") or DEFAULT_CATEGORY,
            tags=coerce_tags(data.get("tags")),
            due_date=parse_due_date(_pick(data, "due_date", "dueDate")),
            created_at=parse_timestamp(_pick(data, "created_at", "createdAt")),
            updated_at=parse_timestamp(_pick(data, "updated_at", "updatedAt")),
            ai_generated=coerce_flag(_pick(data, "ai_generated", "aiGenerated")),
            source_document=_pick(data, "source_document", "sourceDocument"),
        )
        if data.get("id"):
            kwargs["id"] = str(data["id"])
        return cls(**kwargs)


@dataclass
class PartialTask:
    """
    Task fields as supplied by the model, none of them guaranteed.

    This is the only shape untyped AI output takes before the reconciler
    turns it into a Task.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    due_date: Optional[str] = None
    source_document: Optional[str] = None

    @classmethod
    def from_dict(cls, data) -> "PartialTask":
        """Build from a loose dict. Non-dict input gives an empty partial."""
        if isinstance(data, PartialTask):
            return data
        if not isinstance(data, dict):
            return cls()

        tags = data.get("tags")
        due = _pick(data, "due_date", "dueDate")
        return cls(
            title=_text(data.get("title")),
            description=_text(data.get("description")),
            priority=_text(data.get("priority")),
            category=_text(data.get("category")),
            tags=coerce_tags(tags) if tags is not None else None,
            due_date=due if isinstance(due, str) else None,
            source_document=_text(_pick(data, "source_document", "sourceDocument")),
        )

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "category": self.category,
            "tags": self.tags,
            "due_date": self.due_date,
            "source_document": self.source_document,
        }


@dataclass
class DateRange:
    """Inclusive time window."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass
class TaskFilter:
    """
    Conjunctive filter criteria. A field left as None imposes no constraint.
    """

    statuses: Optional[List[str]] = None
    priorities: Optional[List[str]] = None
    categories: Optional[List[str]] = None
    ai_generated: Optional[bool] = None
    date_range: Optional[DateRange] = None


@dataclass
class TaskStats:
    """Aggregate counts derived from a task collection."""

    total: int = 0
    completed: int = 0
    in_progress: int = 0
    overdue: int = 0
    by_priority: Dict[str, int] = field(
        default_factory=lambda: {p: 0 for p in TASK_PRIORITIES}
    )
    by_category: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "completed": self.completed,
            "in_progress": self.in_progress,
            "overdue": self.overdue,
            "by_priority": dict(self.by_priority),
            "by_category": dict(self.by_category),
        }


def _pick(data: dict, *keys):
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _text(value) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def coerce_flag(value, default: bool = False) -> bool:
    """Read a stored boolean. Only True/False and "true"/"false" count."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "false"):
            return lowered == "true"
    return default
