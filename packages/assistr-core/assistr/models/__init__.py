"""
Core data models for Assistr.
"""

from assistr.models.ai import ChatReply, DocumentAnalysis
from assistr.models.document import Document
from assistr.models.task import DateRange, PartialTask, Task, TaskFilter, TaskStats

__all__ = [
    "Task",
    "PartialTask",
    "TaskFilter",
    "DateRange",
    "TaskStats",
    "Document",
    "ChatReply",
    "DocumentAnalysis",
]
