"""
Structured results produced from model replies.
"""

from dataclasses import dataclass, field
from typing import Optional, List

from assistr.models.task import PartialTask


@dataclass
class ChatReply:
    """A conversational reply, plus anything structured the model attached."""

    response: str
    suggestions: List[str] = field(default_factory=list)
    generated_tasks: List[PartialTask] = field(default_factory=list)
    actions: List[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "response": self.response,
            "suggestions": list(self.suggestions),
            "generated_tasks": [t.to_dict() for t in self.generated_tasks],
            "actions": list(self.actions),
        }


@dataclass
class DocumentAnalysis:
    """The model's reading of a document."""

    summary: Optional[str] = None
    insights: List[str] = field(default_factory=list)
    extracted_tasks: List[PartialTask] = field(default_factory=list)
    key_topics: List[str] = field(default_factory=list)
    action_items: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "summary": self.summary,
            "insights": list(self.insights),
            "extracted_tasks": [t.to_dict() for t in self.extracted_tasks],
            "key_topics": list(self.key_topics),
            "action_items": list(self.action_items),
        }
