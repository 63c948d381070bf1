"""
Assistr MCP Server

Personal AI productivity assistant exposed as MCP tools: tasks, documents and
conversation backed by a chat-completion endpoint.
"""

import asyncio
import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List

from mcp.server.fastmcp import FastMCP

from assistr.ai import AIClient, AIServiceError
from assistr.dates import format_due_date, parse_timestamp
from assistr.models.task import DateRange
from assistr.services import AssistantService, DocumentService, TaskService
from assistr_mcp.tools.documents import register_document_tools

# Initialize FastMCP server
mcp = FastMCP("assistr")

logger = logging.getLogger(__name__)


@dataclass
class Workspace:
    """The services backing one server session."""

    tasks: TaskService
    documents: DocumentService
    client: AIClient
    assistant: AssistantService
    store: Optional[object] = None


# Global state
_workspace: Optional[Workspace] = None


async def ensure_initialized() -> Workspace:
    """Connect the store and load both collections on first use."""
    global _workspace
    if _workspace is not None:
        return _workspace

    from assistr.config import get_config
    from assistr.db import init_adapter
    from assistr.storage import CollectionStore

    config = get_config()
    adapter = await init_adapter(config)

    store = CollectionStore(adapter)

    tasks = TaskService(store=store)
    await tasks.load()
    documents = DocumentService(store=store)
    await documents.load()

    client = AIClient(config.ai)
    _workspace = Workspace(
        tasks=tasks,
        documents=documents,
        client=client,
        assistant=AssistantService(
            client,
            tasks,
            documents,
            auto_task_generation=config.ai.auto_task_generation,
        ),
        store=store,
    )
    logger.info("Assistr initialized")
    return _workspace


def set_workspace(workspace: Optional[Workspace]) -> None:
    """Install a prepared workspace (or clear it with None)."""
    global _workspace
    _workspace = workspace


def _task_summary(task) -> dict:
    result = task.to_dict()
    result["due"] = format_due_date(task.due_date)
    return result


# =============================================================================
# TASK TOOLS
# =============================================================================

@mcp.tool()
async def task_list(
    view: str = "all",
    status: Optional[List[str]] = None,
    priority: Optional[List[str]] = None,
    category: Optional[List[str]] = None,
    ai_generated: Optional[bool] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    sort_by: str = "created_at",
    ascending: bool = False,
    limit: int = 50,
) -> dict:
    """
    List tasks with optional filters.

    Args:
        view: all, today (due today), overdue, or upcoming (next 7 days)
        status: Keep these statuses (todo, in-progress, completed, cancelled)
        priority: Keep these priorities (low, medium, high, urgent)
        category: Keep these categories
        ai_generated: Only AI-generated (true) or user-created (false) tasks
        start: ISO date; with end, keep tasks due (or created) in the window
        end: ISO date closing the window
        sort_by: priority, due_date, created_at, title or status
        ascending: Sort ascending (default is descending)
        limit: Maximum results (default 50)

    Returns:
        List of tasks with count
    """
    ws = await ensure_initialized()

    date_range = None
    if start or end:
        start_at, end_at = parse_timestamp(start), parse_timestamp(end)
        if (start and start_at is None) or (end and end_at is None):
            return {"error": "start and end must be ISO dates"}
        date_range = DateRange(
            start=start_at or datetime.min,
            end=end_at or datetime.max,
        )

    try:
        tasks = ws.tasks.list(
            statuses=status,
            priorities=priority,
            categories=category,
            ai_generated=ai_generated,
            date_range=date_range,
            sort_by=sort_by,
            ascending=ascending,
        )
    except ValueError as e:
        return {"error": str(e)}

    if view != "all":
        windows = {
            "today": ws.tasks.due_today,
            "overdue": ws.tasks.overdue,
            "upcoming": ws.tasks.upcoming,
        }
        if view not in windows:
            return {"error": f"Unknown view: {view}. Use all, today, overdue or upcoming."}
        in_window = {t.id for t in windows[view]()}
        tasks = [t for t in tasks if t.id in in_window]

    tasks = tasks[:limit]
    return {
        "tasks": [_task_summary(t) for t in tasks],
        "count": len(tasks),
    }


@mcp.tool()
async def task_create(
    title: str,
    description: Optional[str] = None,
    priority: str = "medium",
    status: str = "todo",
    category: Optional[str] = None,
    tags: Optional[List[str]] = None,
    due_date: Optional[str] = None,
) -> dict:
    """
    Create a new task.

    Args:
        title: Task title
        description: Task description
        priority: Priority (low, medium, high, urgent)
        status: Status (todo, in-progress, completed, cancelled)
        category: Category (default general)
        tags: List of tags
        due_date: ISO date or datetime

    Returns:
        Created task details
    """
    ws = await ensure_initialized()
    try:
        task = await ws.tasks.create(
            title=title,
            description=description,
            priority=priority,
            status=status,
            category=category,
            tags=tags,
            due_date=due_date,
        )
    except ValueError as e:
        return {"error": str(e)}
    return _task_summary(task)


@mcp.tool()
async def task_show(task_id: str) -> dict:
    """
    Get detailed information about a task.

    Args:
        task_id: Task UUID
    """
    ws = await ensure_initialized()
    task = ws.tasks.get(task_id)
    if not task:
        return {"error": f"Task not found: {task_id}"}
    return _task_summary(task)


@mcp.tool()
async def task_update(
    task_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
    priority: Optional[str] = None,
    status: Optional[str] = None,
    category: Optional[str] = None,
    tags: Optional[List[str]] = None,
    due_date: Optional[str] = None,
    clear_due_date: bool = False,
) -> dict:
    """
    Update a task. Any status may move to any other status.

    Args:
        task_id: Task UUID
        title: New title
        description: New description
        priority: New priority (low, medium, high, urgent)
        status: New status (todo, in-progress, completed, cancelled)
        category: New category
        tags: New tags (replaces existing)
        due_date: New due date (ISO)
        clear_due_date: Remove the due date

    Returns:
        Updated task details
    """
    ws = await ensure_initialized()
    try:
        task = await ws.tasks.update(
            task_id,
            title=title,
            description=description,
            priority=priority,
            status=status,
            category=category,
            tags=tags,
            due_date=due_date,
        )
        if task is not None and clear_due_date:
            task = await ws.tasks.clear_due_date(task_id)
    except ValueError as e:
        return {"error": str(e)}

    if not task:
        return {"error": f"Task not found: {task_id}"}
    return _task_summary(task)


@mcp.tool()
async def task_complete(task_id: str) -> dict:
    """Mark a task as completed."""
    ws = await ensure_initialized()
    task = await ws.tasks.complete(task_id)
    if not task:
        return {"error": f"Task not found: {task_id}"}
    return _task_summary(task)


@mcp.tool()
async def task_delete(task_id: str) -> dict:
    """Delete a task permanently."""
    ws = await ensure_initialized()
    if not await ws.tasks.delete(task_id):
        return {"error": f"Task not found: {task_id}"}
    return {"deleted": True, "task_id": task_id}


@mcp.tool()
async def task_stats() -> dict:
    """
    Summarize the task list.

    Returns:
        Counts by status, priority and category, plus tasks due today
    """
    ws = await ensure_initialized()
    result = ws.tasks.stats().to_dict()
    result["due_today"] = len(ws.tasks.due_today())
    return result


# =============================================================================
# ASSISTANT TOOLS
# =============================================================================

@mcp.tool()
async def task_generate(text: str) -> dict:
    """
    Create tasks from a natural-language description.

    Args:
        text: What needs doing, e.g. "call the dentist tomorrow and buy milk"

    Returns:
        The tasks that were created
    """
    ws = await ensure_initialized()
    try:
        tasks = await ws.assistant.generate_tasks(text)
    except (ValueError, AIServiceError) as e:
        return {"error": str(e)}
    return {
        "tasks": [_task_summary(t) for t in tasks],
        "generated": len(tasks),
    }


@mcp.tool()
async def assistant_chat(message: str, voice_mode: bool = False) -> dict:
    """
    Talk to the assistant about your tasks and documents.

    Args:
        message: The user's message
        voice_mode: Ask for short, spoken-friendly replies

    Returns:
        Reply text, suggestions, and any tasks the reply created
    """
    ws = await ensure_initialized()
    try:
        reply, created = await ws.assistant.chat(message, voice_mode=voice_mode)
    except (ValueError, AIServiceError) as e:
        return {"error": str(e)}

    result = reply.to_dict()
    result["created_tasks"] = [_task_summary(t) for t in created]
    return result


# =============================================================================
# HEALTH
# =============================================================================

@mcp.tool()
async def assistr_health() -> dict:
    """Check the store connection and report collection sizes."""
    from assistr.config import get_config

    config = get_config()
    try:
        ws = await ensure_initialized()
    except (OSError, ValueError, RuntimeError) as e:
        return {"healthy": False, "error": str(e)}

    return {
        "healthy": True,
        "database": config.database.type,
        "ai_endpoint": config.ai.endpoint,
        "ai_model": config.ai.model,
        "ai_key_configured": bool(config.ai.api_key),
        "tasks": len(ws.tasks.tasks),
        "documents": len(ws.documents.documents),
    }


register_document_tools(mcp, ensure_initialized)


# =============================================================================
# CLI ENTRY POINT
# =============================================================================

def main():
    """Main entry point for assistr-mcp command."""
    import argparse

    from assistr.config import get_config

    parser = argparse.ArgumentParser(description="Assistr MCP Server")
    parser.add_argument("command", nargs="?", default="serve", help="Command to run (serve, init)")
    args = parser.parse_args()

    config = get_config()
    # stdout carries the MCP protocol, so logs go to stderr
    logging.basicConfig(
        level=getattr(logging, config.logging.level, logging.INFO),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "init":
        from assistr.config import CONFIG_FILE, ensure_config_dir, save_config

        ensure_config_dir()
        if not CONFIG_FILE.exists():
            save_config(config)
            print(f"Wrote default config to {CONFIG_FILE}")

        async def do_init():
            ws = await ensure_initialized()
            print(f"Store ready: {len(ws.tasks.tasks)} task(s), {len(ws.documents.documents)} document(s)")

        asyncio.run(do_init())
    else:
        mcp.run()


if __name__ == "__main__":
    main()
