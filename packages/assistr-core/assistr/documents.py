"""
Document handling: upload validation, text extraction and lightweight
content statistics. Analysis results from the model are merged in here too.
"""

import dataclasses
import logging
import math
import re
from collections import Counter
from datetime import datetime
from typing import Iterable, List, Optional

from assistr.models.ai import DocumentAnalysis
from assistr.models.document import Document
from assistr.models.task import PartialTask

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

SUPPORTED_TYPES = (
    "text/plain",
    "text/markdown",
    "text/csv",
    "application/json",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
)

WORDS_PER_MINUTE = 200

STOP_WORDS = frozenset("""
    the a an and or but in on at to for of with by is are was were be been
    have has had do does did will would could should may might this that
    these those i you he she it we they
""".split())

_NUMBER = re.compile(r"\b\d+(?:\.\d+)?\b")
_DATE = re.compile(r"\b\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}\b|\b\d{4}[/\-]\d{1,2}[/\-]\d{1,2}\b")
_EMAIL = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
_URL = re.compile(r"https?://\S+")
_WORD = re.compile(r"\b[a-z]{3,}\b")


class DocumentValidationError(ValueError):
    """Upload rejected: too large or an unsupported type."""


class MissingContentError(ValueError):
    """The document has no text to send to the model."""


def validate_file(name: str, mime_type: str, size: int) -> None:
    """
    Check an upload against the size limit and the supported types.

    Raises:
        DocumentValidationError: If the file cannot be processed
    """
    if size > MAX_FILE_SIZE:
        raise DocumentValidationError("File size exceeds 10MB limit")

    mime = (mime_type or "").lower()
    # Match on the subtype so "text/x-markdown" style variants pass too
    if not mime or not any(t.split("/")[1] in mime for t in SUPPORTED_TYPES):
        raise DocumentValidationError(
            f"Unsupported file type: {mime_type} for {name}. "
            "Supported types: PDF, Word, Text, Markdown, CSV, JSON, Excel"
        )


def extract_text(name: str, mime_type: str, data: bytes) -> str:
    """Decode text formats; binary formats get a descriptive placeholder."""
    mime = (mime_type or "").lower()
    size = len(data)

    if mime.startswith("text/") or "json" in mime:
        return data.decode("utf-8", errors="replace")
    if "pdf" in mime:
        return f"[PDF File: {name} - {size} bytes]"
    if "msword" in mime or "wordprocessingml" in mime:
        return f"[Word Document: {name} - {size} bytes]"
    return f"[File: {name} - Type: {mime_type} - Size: {size} bytes]"


def create_document(
    name: str,
    mime_type: str,
    data: bytes,
    now: Optional[datetime] = None,
) -> Document:
    """Validate an upload and build its Document."""
    validate_file(name, mime_type, len(data))

    document = Document(
        name=name,
        mime_type=mime_type,
        size=len(data),
        uploaded_at=now or datetime.now(),
        content=extract_text(name, mime_type, data),
    )
    logger.info(f"Created document: {document.id} - {name} ({format_file_size(document.size)})")
    return document


def require_content(document: Document) -> str:
    """Return the document's text or fail fast."""
    if not document.has_content:
        raise MissingContentError(f"Document has no content to analyze: {document.name}")
    return document.content


def apply_analysis(document: Document, analysis: DocumentAnalysis) -> Document:
    """Merge an analysis result into a new Document and mark it analyzed."""
    return dataclasses.replace(
        document,
        summary=analysis.summary,
        insights=list(analysis.insights),
        extracted_tasks=list(analysis.extracted_tasks),
        key_topics=list(analysis.key_topics),
        action_items=list(analysis.action_items),
        analysis_complete=True,
    )


def attach_extracted_tasks(document: Document, partials: Iterable) -> Document:
    """Replace the document's candidate tasks, tagging each with its source."""
    extracted = [
        dataclasses.replace(PartialTask.from_dict(p), source_document=document.name)
        for p in partials
    ]
    return dataclasses.replace(document, extracted_tasks=extracted)


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB")
    i = 0
    while size >= 1024 ** (i + 1) and i < len(units) - 1:
        i += 1
    value = round(size / (1024 ** i), 2)
    return f"{value:g} {units[i]}"


def extract_document_info(content: str) -> dict:
    """Word count, reading time, top keywords and what kinds of data appear."""
    content = content or ""
    words = content.split()
    counts = Counter(w for w in _WORD.findall(content.lower()) if w not in STOP_WORDS)

    return {
        "word_count": len(words),
        "estimated_read_time": math.ceil(len(words) / WORDS_PER_MINUTE),
        "key_phrases": [word for word, _ in counts.most_common(5)],
        "has_numbers": bool(_NUMBER.search(content)),
        "has_dates": bool(_DATE.search(content)),
        "has_emails": bool(_EMAIL.search(content)),
        "has_urls": bool(_URL.search(content)),
    }


def search_in_document(document: Document, query: str, context_chars: int = 50) -> List[dict]:
    """
    Case-insensitive search through a document's text.

    Returns:
        One dict per match with the matched text, surrounding context and offset
    """
    if not document.content or not (query or "").strip():
        return []

    haystack = document.content.lower()
    needle = query.lower()
    results = []

    position = haystack.find(needle)
    while position != -1:
        start = max(0, position - context_chars)
        end = min(len(haystack), position + len(needle) + context_chars)
        results.append({
            "text": document.content[position:position + len(needle)],
            "context": document.content[start:end],
            "position": position,
        })
        position = haystack.find(needle, position + len(needle))

    return results
