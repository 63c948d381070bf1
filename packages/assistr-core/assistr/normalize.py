"""
AI response normalizer.

The model is asked for JSON but nothing guarantees it complies: replies often
wrap the JSON in prose or skip it entirely. The normalizer finds the first
bracketed span, tries a strict parse, and falls back to a typed default on any
failure. It never raises for bad model output.
"""

import json
import logging
import re
from typing import List, Union

from assistr.models.ai import ChatReply, DocumentAnalysis
from assistr.models.task import PartialTask

logger = logging.getLogger(__name__)

SHAPE_CHAT = "chat"
SHAPE_TASKS = "tasks"
SHAPE_DOCUMENT = "document"

SHAPE_HINTS = (SHAPE_CHAT, SHAPE_TASKS, SHAPE_DOCUMENT)

_SHAPE_ALIASES = {
    "chat": SHAPE_CHAT,
    "tasks": SHAPE_TASKS,
    "task array": SHAPE_TASKS,
    "document": SHAPE_DOCUMENT,
    "document analysis": SHAPE_DOCUMENT,
}

# Greedy: first opening bracket through the last closing one
_OBJECT_SPAN = re.compile(r"\{.*\}", re.DOTALL)
_ARRAY_SPAN = re.compile(r"\[.*\]", re.DOTALL)

NormalizedResult = Union[ChatReply, List[PartialTask], DocumentAnalysis]


def extract_json(raw: str, pattern: re.Pattern, expected: type):
    """
    Parse the first bracketed span of `raw`.

    Returns the parsed value, or None when there is no span, the span is not
    valid JSON, or it parses to something other than `expected`.
    """
    if not isinstance(raw, str):
        return None

    match = pattern.search(raw)
    if not match:
        return None

    try:
        parsed = json.loads(match.group(0))
    except (ValueError, RecursionError) as e:
        logger.debug(f"Model reply did not contain valid JSON: {e}")
        return None

    if not isinstance(parsed, expected):
        logger.debug(f"Model JSON was {type(parsed).__name__}, expected {expected.__name__}")
        return None
    return parsed


def normalize_ai_response(raw: str, shape_hint: str) -> NormalizedResult:
    """
    Turn a raw model reply into a structured result.

    Args:
        raw: The model's reply text
        shape_hint: "chat", "tasks" or "document" (also "document analysis")

    Returns:
        ChatReply, list of PartialTask, or DocumentAnalysis depending on the hint

    Raises:
        ValueError: If shape_hint is not recognized
    """
    shape = _SHAPE_ALIASES.get((shape_hint or "").strip().lower())
    if shape is None:
        raise ValueError(f"Invalid shape hint. Must be one of: {', '.join(SHAPE_HINTS)}")

    if raw is None:
        raw = ""

    if shape == SHAPE_CHAT:
        return normalize_chat(raw)
    if shape == SHAPE_TASKS:
        return normalize_tasks(raw)
    return normalize_document_analysis(raw)


def normalize_chat(raw: str) -> ChatReply:
    parsed = extract_json(raw, _OBJECT_SPAN, dict)
    if parsed is None:
        return ChatReply(response=raw.strip())

    response = parsed.get("response")
    if not isinstance(response, str) or not response.strip():
        response = raw.strip()

    return ChatReply(
        response=response,
        suggestions=_string_list(parsed.get("suggestions")),
        generated_tasks=_partial_tasks(
            parsed.get("generatedTasks", parsed.get("generated_tasks"))
        ),
        actions=[a for a in _list(parsed.get("actions")) if isinstance(a, dict)],
    )


def normalize_tasks(raw: str) -> List[PartialTask]:
    parsed = extract_json(raw, _ARRAY_SPAN, list)
    if parsed is None:
        logger.warning("Could not parse tasks from model reply")
        return []
    return _partial_tasks(parsed)


def normalize_document_analysis(raw: str) -> DocumentAnalysis:
    parsed = extract_json(raw, _OBJECT_SPAN, dict)
    if parsed is None:
        logger.warning("Could not parse document analysis from model reply")
        return DocumentAnalysis(summary=raw)

    summary = parsed.get("summary")
    if summary is not None and not isinstance(summary, str):
        summary = json.dumps(summary)

    return DocumentAnalysis(
        summary=summary,
        insights=_string_list(parsed.get("insights")),
        extracted_tasks=_partial_tasks(
            parsed.get("extractedTasks", parsed.get("extracted_tasks"))
        ),
        key_topics=_string_list(parsed.get("keyTopics", parsed.get("key_topics"))),
        action_items=_string_list(parsed.get("actionItems", parsed.get("action_items"))),
    )


def _list(value) -> list:
    return value if isinstance(value, list) else []


def _string_list(value) -> List[str]:
    return [item if isinstance(item, str) else json.dumps(item) for item in _list(value)]


def _partial_tasks(value) -> List[PartialTask]:
    return [PartialTask.from_dict(item) for item in _list(value) if isinstance(item, dict)]
