"""
Document tools for Assistr.

Upload files, have the model analyze them, and turn what it finds into tasks.
"""

import mimetypes
from pathlib import Path
from typing import Optional

from assistr.ai import AIServiceError
from assistr.documents import extract_document_info, format_file_size


def _document_summary(document) -> dict:
    result = document.to_dict(include_content=False)
    result["size_display"] = format_file_size(document.size)
    return result


def register_document_tools(mcp, ensure_initialized):
    """Register document tools."""

    @mcp.tool()
    async def document_upload(
        path: Optional[str] = None,
        name: Optional[str] = None,
        content: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> dict:
        """
        Upload a document from a file path or from inline text.

        Args:
            path: Path to a local file
            name: Document name (required with content; defaults to the file name)
            content: Inline text to store instead of reading a file
            mime_type: MIME type; guessed from the name when omitted

        Returns:
            The stored document and basic content statistics
        """
        ws = await ensure_initialized()

        if path:
            file_path = Path(path).expanduser()
            if not file_path.is_file():
                return {"error": f"File not found: {file_path}"}
            data = file_path.read_bytes()
            name = name or file_path.name
        elif content is not None and name:
            data = content.encode("utf-8")
        else:
            return {"error": "Provide a path, or a name and content"}

        mime_type = mime_type or mimetypes.guess_type(name)[0] or "text/plain"

        try:
            document = await ws.documents.upload(name, mime_type, data)
        except ValueError as e:
            return {"error": str(e)}

        result = _document_summary(document)
        result["info"] = extract_document_info(document.content or "")
        return result

    @mcp.tool()
    async def document_list() -> dict:
        """List uploaded documents, newest first."""
        ws = await ensure_initialized()
        documents = ws.documents.list()
        return {
            "documents": [_document_summary(d) for d in documents],
            "count": len(documents),
        }

    @mcp.tool()
    async def document_show(document_id: str, include_content: bool = False) -> dict:
        """
        Get a document with its latest analysis.

        Args:
            document_id: Document UUID
            include_content: Include the extracted text
        """
        ws = await ensure_initialized()
        document = ws.documents.get(document_id)
        if not document:
            return {"error": f"Document not found: {document_id}"}

        result = document.to_dict(include_content=include_content)
        result["size_display"] = format_file_size(document.size)
        result["info"] = extract_document_info(document.content or "")
        return result

    @mcp.tool()
    async def document_analyze(
        document_id: str,
        extract_tasks: bool = False,
        generate_summary: bool = True,
        get_insights: bool = True,
    ) -> dict:
        """
        Summarize a document and collect insights with the model.

        Args:
            document_id: Document UUID
            extract_tasks: Also collect candidate tasks
            generate_summary: Ask for a summary
            get_insights: Ask for key insights

        Returns:
            The analysis and the updated document
        """
        ws = await ensure_initialized()
        try:
            result = await ws.documents.analyze(
                document_id,
                ws.client,
                extract_tasks=extract_tasks,
                generate_summary=generate_summary,
                get_insights=get_insights,
            )
        except (ValueError, AIServiceError) as e:
            return {"error": str(e)}

        if result is None:
            return {"error": f"Document not found: {document_id}"}

        document, analysis = result
        return {
            "analysis": analysis.to_dict(),
            "document": _document_summary(document),
        }

    @mcp.tool()
    async def document_extract_tasks(document_id: str, auto_create: bool = False) -> dict:
        """
        Find actionable tasks in a document.

        Args:
            document_id: Document UUID
            auto_create: Add the tasks to the task list right away

        Returns:
            Extracted candidates and any tasks created
        """
        ws = await ensure_initialized()
        try:
            result = await ws.documents.extract_tasks(
                document_id,
                ws.client,
                task_service=ws.tasks,
                auto_create=auto_create,
            )
        except (ValueError, AIServiceError) as e:
            return {"error": str(e)}

        if result is None:
            return {"error": f"Document not found: {document_id}"}

        document, created = result
        return {
            "extracted_tasks": [t.to_dict() for t in document.extracted_tasks],
            "total_extracted": len(document.extracted_tasks),
            "created_tasks": [t.to_dict() for t in created],
            "source_document": {"id": document.id, "name": document.name},
        }

    @mcp.tool()
    async def document_promote_tasks(document_id: str) -> dict:
        """
        Add a document's extracted candidates to the task list.

        Running this twice adds the tasks twice.
        """
        ws = await ensure_initialized()
        created = await ws.documents.promote_extracted_tasks(document_id, ws.tasks)
        if created is None:
            return {"error": f"Document not found: {document_id}"}
        return {
            "created_tasks": [t.to_dict() for t in created],
            "count": len(created),
        }

    @mcp.tool()
    async def document_search(document_id: str, query: str) -> dict:
        """
        Search a document's text.

        Args:
            document_id: Document UUID
            query: Case-insensitive search text
        """
        ws = await ensure_initialized()
        matches = ws.documents.search(document_id, query)
        if matches is None:
            return {"error": f"Document not found: {document_id}"}
        return {"matches": matches, "total_matches": len(matches)}

    @mcp.tool()
    async def document_delete(document_id: str) -> dict:
        """Delete a document. Tasks extracted from it are kept."""
        ws = await ensure_initialized()
        if not await ws.documents.delete(document_id):
            return {"error": f"Document not found: {document_id}"}
        return {"deleted": True, "document_id": document_id}
