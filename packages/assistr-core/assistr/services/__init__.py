"""
Business logic services for Assistr.
"""

from assistr.services.assistant import AssistantService
from assistr.services.documents import DocumentService
from assistr.services.tasks import TaskService

__all__ = [
    "TaskService",
    "DocumentService",
    "AssistantService",
]
