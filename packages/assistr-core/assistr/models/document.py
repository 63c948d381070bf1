"""
Document model for Assistr.

A document is an uploaded file whose text the model summarizes and mines for
tasks.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List
from uuid import uuid4

from assistr.dates import parse_timestamp
from assistr.models.task import PartialTask


@dataclass
class Document:
    """
    An uploaded artifact.

    Attributes:
        id: Unique identifier (UUID)
        name: Original file name
        mime_type: MIME type reported at upload
        size: Size in bytes
        uploaded_at: Upload time
        content: Extracted text, or a placeholder for binary formats
        summary: Model-written summary from the last analysis
        insights: Key points from the last analysis
        extracted_tasks: Candidate tasks, not yet promoted to real tasks
        key_topics: Topics reported by the last analysis
        action_items: Action items reported by the last analysis
        analysis_complete: True once an analysis result has been merged in
    """

    name: str
    mime_type: str = "text/plain"
    size: int = 0
    id: str = field(default_factory=lambda: str(uuid4()))
    uploaded_at: Optional[datetime] = None
    content: Optional[str] = None
    summary: Optional[str] = None
    insights: List[str] = field(default_factory=list)
    extracted_tasks: List[PartialTask] = field(default_factory=list)
    key_topics: List[str] = field(default_factory=list)
    action_items: List[str] = field(default_factory=list)
    analysis_complete: bool = False

    def __post_init__(self):
        if self.uploaded_at is None:
            self.uploaded_at = datetime.now()

    @property
    def has_content(self) -> bool:
        return bool(self.content and self.content.strip())

    def to_dict(self, include_content: bool = True) -> dict:
        """Convert to dictionary for storage/serialization."""
        result = {
            "id": self.id,
            "name": self.name,
            "mime_type": self.mime_type,
            "size": self.size,
            "uploaded_at": self.uploaded_at.isoformat() if self.uploaded_at else None,
            "summary": self.summary,
            "insights": list(self.insights),
            "extracted_tasks": [t.to_dict() for t in self.extracted_tasks],
            "key_topics": list(self.key_topics),
            "action_items": list(self.action_items),
            "analysis_complete": self.analysis_complete,
        }
        if include_content:
            result["content"] = self.content
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "Document":
        """Create Document from a serialized dictionary."""
        kwargs = dict(
            name=data.get("name", ""),
            mime_type=data.get("mime_type") or data.get("type") or "text/plain",
            size=int(data.get("size") or 0),
            uploaded_at=parse_timestamp(data.get("uploaded_at") or data.get("uploadedAt")),
            content=data.get("content"),
            summary=data.get("summary"),
            insights=list(data.get("insights") or []),
            extracted_tasks=[
                PartialTask.from_dict(t)
                for t in (data.get("extracted_tasks") or data.get("extractedTasks") or [])
            ],
            key_topics=list(data.get("key_topics") or []),
            action_items=list(data.get("action_items") or []),
            analysis_complete=bool(
                data.get("analysis_complete", data.get("analysisComplete", False))
            ),
        )
        if data.get("id"):
            kwargs["id"] = str(data["id"])
        return cls(**kwargs)
