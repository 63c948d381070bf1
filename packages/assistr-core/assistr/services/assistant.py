"""
Assistant Service for Assistr.

Conversation and natural-language task creation on top of the task and
document services.
"""

import builtins
import logging

from assistr.models.ai import ChatReply
from assistr.models.task import Task

logger = logging.getLogger(__name__)


class AssistantService:
    """
    Ties the completion client to the session's collections.
    """

    def __init__(self, client, tasks, documents=None, auto_task_generation: bool = False):
        """
        Args:
            client: AIClient
            tasks: TaskService that receives generated tasks
            documents: Optional DocumentService used for chat context
            auto_task_generation: Add tasks the model proposes in chat replies
        """
        self.client = client
        self.tasks = tasks
        self.documents = documents
        self.auto_task_generation = auto_task_generation

    async def chat(
        self,
        message: str,
        voice_mode: bool = False,
        include_context: bool = True,
    ) -> tuple[ChatReply, builtins.list[Task]]:
        """
        Send a message with the current tasks and documents as context.

        Returns:
            (reply, tasks created from the reply)
        """
        if not message or not message.strip():
            raise ValueError("Message is required")

        task_context = None
        document_names = None
        if include_context:
            task_context = [t.to_dict() for t in self.tasks.list(sort_by="created_at")]
            if self.documents is not None:
                document_names = [d.name for d in self.documents.list()]

        reply = await self.client.chat(
            message,
            tasks=task_context,
            document_names=document_names,
            voice_mode=voice_mode,
        )

        created = []
        if self.auto_task_generation and reply.generated_tasks:
            created = await self.tasks.add_generated(reply.generated_tasks)
            logger.info(f"Chat reply created {len(created)} task(s)")

        return reply, created

    async def generate_tasks(self, text: str) -> builtins.list[Task]:
        """Create tasks from free text and add them to the collection."""
        if not text or not text.strip():
            raise ValueError("Input text is required for task generation")

        context = {
            "existingTasks": [
                {"title": t.title, "status": t.status, "category": t.category}
                for t in self.tasks.list(statuses=["todo", "in-progress"])
            ],
        }
        partials = await self.client.generate_tasks(text, context=context)
        return await self.tasks.add_generated(partials)
