"""
Document Service for Assistr.

Uploads, analysis and task extraction for one session's documents.
"""

import builtins
import logging

from assistr.documents import (
    apply_analysis,
    attach_extracted_tasks,
    create_document,
    require_content,
    search_in_document,
)
from assistr.models.ai import DocumentAnalysis
from assistr.models.document import Document
from assistr.models.task import Task

logger = logging.getLogger(__name__)


class DocumentService:
    """
    Service for managing uploaded documents.
    """

    def __init__(self, store=None, documents=None):
        """
        Args:
            store: Optional CollectionStore for persistence
            documents: Optional initial collection
        """
        self._store = store
        self.documents: builtins.list[Document] = builtins.list(documents or [])

    async def load(self) -> builtins.list[Document]:
        if self._store is not None:
            self.documents = await self._store.load_documents()
            logger.info(f"Loaded {len(self.documents)} document(s)")
        return self.documents

    async def _persist(self) -> None:
        if self._store is not None:
            await self._store.save_documents(self.documents)

    def _replace(self, document: Document) -> None:
        self.documents = [
            document if existing.id == document.id else existing
            for existing in self.documents
        ]

    async def upload(self, name: str, mime_type: str, data: bytes) -> Document:
        """
        Validate and store an uploaded file.

        Raises:
            DocumentValidationError: If the file is too large or unsupported
        """
        document = create_document(name, mime_type, data)
        self.documents = self.documents + [document]
        await self._persist()
        return document

    def get(self, document_id: str) -> Document | None:
        for document in self.documents:
            if document.id == document_id:
                return document
        return None

    def list(self) -> builtins.list[Document]:
        """Documents, most recently uploaded first."""
        return sorted(self.documents, key=lambda d: d.uploaded_at, reverse=True)

    async def delete(self, document_id: str) -> bool:
        if self.get(document_id) is None:
            return False
        self.documents = [d for d in self.documents if d.id != document_id]
        await self._persist()
        logger.info(f"Deleted document: {document_id}")
        return True

    async def analyze(
        self,
        document_id: str,
        client,
        extract_tasks: bool = False,
        generate_summary: bool = True,
        get_insights: bool = True,
    ) -> tuple[Document, DocumentAnalysis] | None:
        """
        Run a model analysis and merge the result into the document.

        Returns:
            (updated document, analysis) or None if the document is unknown

        Raises:
            MissingContentError: If the document has no text
            AIServiceError: If the completion endpoint fails
        """
        document = self.get(document_id)
        if document is None:
            return None

        content = require_content(document)
        analysis = await client.analyze_document(
            content,
            document.name,
            extract_tasks=extract_tasks,
            generate_summary=generate_summary,
            get_insights=get_insights,
        )

        updated = apply_analysis(document, analysis)
        self._replace(updated)
        await self._persist()

        logger.info(
            f"Analyzed document: {document_id} "
            f"({len(analysis.insights)} insight(s), {len(analysis.extracted_tasks)} task(s))"
        )
        return updated, analysis

    async def extract_tasks(
        self,
        document_id: str,
        client,
        task_service=None,
        auto_create: bool = False,
    ) -> tuple[Document, builtins.list[Task]] | None:
        """
        Ask the model for tasks in a document and keep them as candidates.

        Args:
            document_id: Document ID
            client: AIClient
            task_service: TaskService that receives tasks when auto_create is set
            auto_create: Promote the extracted tasks immediately

        Returns:
            (updated document, created tasks) or None if the document is unknown
        """
        document = self.get(document_id)
        if document is None:
            return None

        require_content(document)
        partials = await client.extract_tasks(document)

        updated = attach_extracted_tasks(document, partials)
        self._replace(updated)
        await self._persist()

        created = []
        if auto_create and task_service is not None:
            created = await task_service.add_generated(
                updated.extracted_tasks, source_document=updated.name
            )

        logger.info(f"Extracted {len(partials)} task(s) from document: {document_id}")
        return updated, created

    async def promote_extracted_tasks(self, document_id: str, task_service) -> builtins.list[Task] | None:
        """Turn a document's candidate tasks into real tasks."""
        document = self.get(document_id)
        if document is None:
            return None
        return await task_service.add_generated(
            document.extracted_tasks, source_document=document.name
        )

    def search(self, document_id: str, query: str) -> builtins.list[dict] | None:
        document = self.get(document_id)
        if document is None:
            return None
        return search_in_document(document, query)
