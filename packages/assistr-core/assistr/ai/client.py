"""
Client for the chat-completion endpoint.

Every request is a role-tagged message list plus model, temperature and
token limit. Replies come back as free text and go through the normalizer;
only transport and HTTP failures surface as errors.
"""

import logging
from typing import List, Optional

import httpx

from assistr.ai import prompts
from assistr.config import AIConfig
from assistr.documents import require_content
from assistr.models.ai import ChatReply, DocumentAnalysis
from assistr.models.document import Document
from assistr.models.task import PartialTask
from assistr.normalize import (
    SHAPE_CHAT,
    SHAPE_DOCUMENT,
    SHAPE_TASKS,
    normalize_ai_response,
)

logger = logging.getLogger(__name__)


class AIServiceError(RuntimeError):
    """The completion endpoint could not be reached or answered with an error."""


class AIClient:
    """
    Async client for an OpenAI-compatible chat-completion endpoint.
    """

    def __init__(
        self,
        config: Optional[AIConfig] = None,
        system_prompt: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            config: Endpoint settings. Defaults to AIConfig().
            system_prompt: Overrides the configured/default system prompt
            transport: Optional httpx transport (used by tests)
        """
        self.config = config or AIConfig()
        self._system_prompt = (
            system_prompt or self.config.system_prompt or prompts.DEFAULT_SYSTEM_PROMPT
        )
        self._transport = transport

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    def update_system_prompt(self, prompt: str) -> None:
        if not prompt or not prompt.strip():
            raise ValueError("System prompt cannot be empty")
        self._system_prompt = prompt

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    async def complete(
        self,
        messages: List[dict],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Send a message list and return the reply text.

        Raises:
            AIServiceError: On network errors, non-2xx responses or a reply
                body that is not a completion
        """
        payload = {
            "model": self.config.model,
            "messages": messages,
            "max_tokens": max_tokens or self.config.max_tokens,
            "temperature": self.config.temperature if temperature is None else temperature,
        }

        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self.config.timeout,
            ) as client:
                response = await client.post(
                    self.config.endpoint,
                    headers=self._headers(),
                    json=payload,
                )
        except httpx.HTTPError as e:
            logger.error(f"AI request failed: {e}")
            raise AIServiceError("Failed to reach the AI service. Please try again.") from e

        if response.is_error:
            logger.error(f"AI request failed: {response.status_code} {response.reason_phrase}")
            raise AIServiceError(
                f"AI request failed: {response.status_code} {response.reason_phrase}"
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"AI response was not JSON: {e}")
            raise AIServiceError("AI service returned an unreadable response.") from e

        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return ""
        message = choices[0].get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        return content if isinstance(content, str) else ""

    async def chat(
        self,
        message: str,
        tasks: Optional[List[dict]] = None,
        document_names: Optional[List[str]] = None,
        voice_mode: bool = False,
    ) -> ChatReply:
        """Converse with the assistant, sending the session's tasks as context."""
        messages = [
            {"role": "system", "content": self._system_prompt},
            {
                "role": "user",
                "content": prompts.build_user_message(message, tasks, document_names, voice_mode),
            },
        ]
        raw = await self.complete(messages)
        return normalize_ai_response(raw, SHAPE_CHAT)

    async def analyze_document(
        self,
        content: str,
        name: str,
        extract_tasks: bool = False,
        generate_summary: bool = True,
        get_insights: bool = True,
    ) -> DocumentAnalysis:
        """Summarize a document and pull out insights, optionally tasks too."""
        messages = [
            {"role": "system", "content": prompts.DOCUMENT_ANALYSIS_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": prompts.build_document_analysis_prompt(
                    name,
                    content,
                    extract_tasks=extract_tasks,
                    generate_summary=generate_summary,
                    get_insights=get_insights,
                ),
            },
        ]
        # Lower temperature for more factual analysis
        raw = await self.complete(messages, temperature=0.3)
        return normalize_ai_response(raw, SHAPE_DOCUMENT)

    async def generate_tasks(self, text: str, context: Optional[dict] = None) -> List[PartialTask]:
        """Turn free text into candidate tasks."""
        messages = [
            {"role": "system", "content": prompts.TASK_GENERATION_SYSTEM_PROMPT},
            {"role": "user", "content": prompts.build_task_generation_prompt(text, context)},
        ]
        raw = await self.complete(messages, temperature=0.5, max_tokens=2000)
        return normalize_ai_response(raw, SHAPE_TASKS)

    async def extract_tasks(self, document: Document) -> List[PartialTask]:
        """
        Pull candidate tasks out of a document's text.

        Raises:
            MissingContentError: If the document has no text
        """
        content = require_content(document)
        messages = [
            {"role": "system", "content": prompts.TASK_GENERATION_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": prompts.build_task_extraction_prompt(document.name, content),
            },
        ]
        raw = await self.complete(messages, temperature=0.5, max_tokens=2000)
        return normalize_ai_response(raw, SHAPE_TASKS)
