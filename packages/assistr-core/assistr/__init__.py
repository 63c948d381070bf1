"""
Assistr Core Library

Personal AI productivity assistant: tasks and documents reconciled from
chat-completion output, persisted in SQLite or PostgreSQL.
"""

__version__ = "0.1.0"

from assistr.config import AssistrConfig, load_config
from assistr.db import StoreAdapter, get_adapter
from assistr.normalize import normalize_ai_response
from assistr.reconcile import apply_task_update, reconcile_generated_tasks

__all__ = [
    "load_config",
    "AssistrConfig",
    "get_adapter",
    "StoreAdapter",
    "normalize_ai_response",
    "reconcile_generated_tasks",
    "apply_task_update",
]
