"""
Tests for the task and assistant MCP tools.

Tools run against an in-memory workspace with a mocked completion endpoint.
"""

from datetime import datetime, timedelta

import pytest


@pytest.fixture
def workspace(make_ai_client):
    """Install an in-memory workspace and remove it afterwards."""
    from assistr.services import AssistantService, DocumentService, TaskService
    from assistr_mcp.server import Workspace, set_workspace

    def install(*replies, auto_task_generation=False):
        client = make_ai_client(*replies) if replies else make_ai_client("")
        tasks = TaskService()
        documents = DocumentService()
        ws = Workspace(
            tasks=tasks,
            documents=documents,
            client=client,
            assistant=AssistantService(
                client, tasks, documents, auto_task_generation=auto_task_generation
            ),
        )
        set_workspace(ws)
        return ws

    yield install

    set_workspace(None)


class TestTaskCrudTools:
    """Tests for task_create, task_show, task_update, task_complete and task_delete."""

    @pytest.mark.asyncio
    async def test_create_and_show(self, workspace):
        from assistr_mcp.server import task_create, task_show

        workspace()

        created = await task_create(title="Write report", priority="high", tags=["work"])
        shown = await task_show(created["id"])

        assert created["title"] == "Write report"
        assert created["due"] == "No due date"
        assert shown["priority"] == "high"
        assert shown["tags"] == ["work"]

    @pytest.mark.asyncio
    async def test_create_invalid(self, workspace):
        from assistr_mcp.server import task_create

        workspace()

        result = await task_create(title="x", priority="critical")

        assert "Invalid priority" in result["error"]

    @pytest.mark.asyncio
    async def test_show_missing(self, workspace):
        from assistr_mcp.server import task_show

        workspace()

        assert "Task not found" in (await task_show("nope"))["error"]

    @pytest.mark.asyncio
    async def test_update_and_clear_due_date(self, workspace):
        from assistr_mcp.server import task_create, task_update

        workspace()
        created = await task_create(title="a", due_date="2030-01-01")

        updated = await task_update(created["id"], status="in-progress", title="b")
        cleared = await task_update(created["id"], clear_due_date=True)

        assert updated["status"] == "in-progress"
        assert updated["title"] == "b"
        assert updated["due_date"] == "2030-01-01T00:00:00"
        assert cleared["due_date"] is None

    @pytest.mark.asyncio
    async def test_update_errors(self, workspace):
        from assistr_mcp.server import task_create, task_update

        workspace()
        created = await task_create(title="a")

        assert "Invalid status" in (await task_update(created["id"], status="done"))["error"]
        assert "Task not found" in (await task_update("nope", title="x"))["error"]

    @pytest.mark.asyncio
    async def test_complete_and_delete(self, workspace):
        from assistr_mcp.server import task_complete, task_create, task_delete

        ws = workspace()
        created = await task_create(title="a")

        completed = await task_complete(created["id"])
        deleted = await task_delete(created["id"])

        assert completed["status"] == "completed"
        assert deleted == {"deleted": True, "task_id": created["id"]}
        assert ws.tasks.tasks == []
        assert "Task not found" in (await task_delete(created["id"]))["error"]


class TestTaskListTool:
    """Tests for task_list."""

    @pytest.fixture
    def populated(self, workspace):
        from assistr.models.task import Task

        ws = workspace()
        now = datetime.now()
        ws.tasks.tasks = [
            Task(title="late", priority="high", due_date=now - timedelta(days=2),
                 created_at=now - timedelta(days=5)),
            Task(title="today", priority="low",
                 due_date=now.replace(hour=23, minute=59, second=0, microsecond=0),
                 created_at=now - timedelta(days=4)),
            Task(title="soon", priority="urgent", due_date=now + timedelta(days=3),
                 ai_generated=True, category="work", created_at=now - timedelta(days=3)),
            Task(title="done", priority="medium", status="completed",
                 due_date=now - timedelta(days=1), created_at=now - timedelta(days=2)),
        ]
        return ws

    @pytest.mark.asyncio
    async def test_list_all_default_order(self, populated):
        from assistr_mcp.server import task_list

        result = await task_list()

        assert result["count"] == 4
        assert [t["title"] for t in result["tasks"]] == ["done", "soon", "today", "late"]

    @pytest.mark.asyncio
    async def test_list_views(self, populated):
        from assistr_mcp.server import task_list

        overdue = await task_list(view="overdue")
        today = await task_list(view="today")
        upcoming = await task_list(view="upcoming")

        assert [t["title"] for t in overdue["tasks"]] == ["late"]
        assert [t["title"] for t in today["tasks"]] == ["today"]
        assert "soon" in [t["title"] for t in upcoming["tasks"]]

    @pytest.mark.asyncio
    async def test_list_unknown_view(self, populated):
        from assistr_mcp.server import task_list

        assert "Unknown view" in (await task_list(view="someday"))["error"]

    @pytest.mark.asyncio
    async def test_list_filters_and_sort(self, populated):
        from assistr_mcp.server import task_list

        result = await task_list(status=["todo"], sort_by="priority")
        ai_only = await task_list(ai_generated=True, category=["work"])

        assert [t["title"] for t in result["tasks"]] == ["soon", "late", "today"]
        assert [t["title"] for t in ai_only["tasks"]] == ["soon"]

    @pytest.mark.asyncio
    async def test_list_due_date_ascending_with_limit(self, populated):
        from assistr_mcp.server import task_list

        result = await task_list(sort_by="due_date", ascending=True, limit=2)

        assert [t["title"] for t in result["tasks"]] == ["late", "done"]
        assert result["count"] == 2

    @pytest.mark.asyncio
    async def test_list_date_range(self, populated):
        from assistr_mcp.server import task_list

        start = (datetime.now() + timedelta(days=1)).isoformat()
        result = await task_list(start=start)

        assert [t["title"] for t in result["tasks"]] == ["soon"]

    @pytest.mark.asyncio
    async def test_list_bad_arguments(self, populated):
        from assistr_mcp.server import task_list

        assert "error" in await task_list(start="not a date")
        assert "Invalid sort key" in (await task_list(sort_by="colour"))["error"]

    @pytest.mark.asyncio
    async def test_stats(self, populated):
        from assistr_mcp.server import task_stats

        result = await task_stats()

        assert result["total"] == 4
        assert result["completed"] == 1
        assert result["overdue"] == 1
        assert result["due_today"] == 1


class TestAssistantTools:
    """Tests for task_generate and assistant_chat."""

    @pytest.mark.asyncio
    async def test_task_generate(self, workspace):
        from assistr_mcp.server import task_generate

        ws = workspace('[{"title": "Call dentist", "priority": "high"}, {"title": "Buy milk"}]')

        result = await task_generate("call the dentist and buy milk")

        assert result["generated"] == 2
        assert [t["title"] for t in result["tasks"]] == ["Call dentist", "Buy milk"]
        assert all(t["ai_generated"] for t in result["tasks"])
        assert len(ws.tasks.tasks) == 2

    @pytest.mark.asyncio
    async def test_task_generate_service_error(self, make_ai_client):
        from assistr.services import AssistantService, DocumentService, TaskService
        from assistr_mcp.server import Workspace, set_workspace, task_generate

        client = make_ai_client("", status_code=500)
        tasks = TaskService()
        set_workspace(Workspace(
            tasks=tasks,
            documents=DocumentService(),
            client=client,
            assistant=AssistantService(client, tasks),
        ))
        try:
            result = await task_generate("anything")
        finally:
            set_workspace(None)

        assert "AI request failed" in result["error"]

    @pytest.mark.asyncio
    async def test_chat(self, workspace):
        from assistr_mcp.server import assistant_chat

        workspace('{"response": "Hi!", "suggestions": ["Plan your week"]}')

        result = await assistant_chat("hello")

        assert result["response"] == "Hi!"
        assert result["suggestions"] == ["Plan your week"]
        assert result["created_tasks"] == []

    @pytest.mark.asyncio
    async def test_chat_auto_creates_tasks(self, workspace):
        from assistr_mcp.server import assistant_chat

        ws = workspace(
            '{"response": "Added.", "generatedTasks": [{"title": "Book flights"}]}',
            auto_task_generation=True,
        )

        result = await assistant_chat("remind me to book flights")

        assert [t["title"] for t in result["created_tasks"]] == ["Book flights"]
        assert len(ws.tasks.tasks) == 1

    @pytest.mark.asyncio
    async def test_chat_blank_message(self, workspace):
        from assistr_mcp.server import assistant_chat

        workspace()

        assert "Message is required" in (await assistant_chat("   "))["error"]
