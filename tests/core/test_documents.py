"""
Tests for document validation, extraction and analysis merging.
"""

import pytest


class TestValidateFile:
    """Tests for validate_file()."""

    @pytest.mark.parametrize("mime_type", [
        "text/plain",
        "text/markdown",
        "text/x-markdown",
        "application/json",
        "application/pdf",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ])
    def test_supported_types(self, mime_type):
        from assistr.documents import validate_file

        validate_file("file", mime_type, 100)

    def test_unsupported_type(self):
        from assistr.documents import DocumentValidationError, validate_file

        with pytest.raises(DocumentValidationError) as exc:
            validate_file("photo.png", "image/png", 100)

        assert "Unsupported file type" in str(exc.value)

    def test_missing_type(self):
        from assistr.documents import DocumentValidationError, validate_file

        with pytest.raises(DocumentValidationError):
            validate_file("mystery", "", 100)

    def test_size_limit(self):
        from assistr.documents import MAX_FILE_SIZE, DocumentValidationError, validate_file

        validate_file("big.txt", "text/plain", MAX_FILE_SIZE)

        with pytest.raises(DocumentValidationError) as exc:
            validate_file("huge.txt", "text/plain", MAX_FILE_SIZE + 1)

        assert "10MB" in str(exc.value)


class TestExtractText:
    """Tests for extract_text()."""

    def test_text_is_decoded(self):
        from assistr.documents import extract_text

        assert extract_text("a.txt", "text/plain", "héllo".encode("utf-8")) == "héllo"
        assert extract_text("a.json", "application/json", b'{"a": 1}') == '{"a": 1}'

    def test_invalid_utf8_is_replaced(self):
        from assistr.documents import extract_text

        assert extract_text("a.txt", "text/plain", b"ok\xff") == "ok\ufffd"

    def test_binary_placeholders(self):
        from assistr.documents import extract_text

        assert extract_text("r.pdf", "application/pdf", b"12345") == "[PDF File: r.pdf - 5 bytes]"
        assert extract_text("r.doc", "application/msword", b"12") == "[Word Document: r.doc - 2 bytes]"
        assert extract_text("s.xls", "application/vnd.ms-excel", b"1").startswith("[File: s.xls")


class TestCreateDocument:
    """Tests for create_document()."""

    def test_builds_document(self, now):
        from assistr.documents import create_document

        document = create_document("notes.txt", "text/plain", b"Call Alice", now=now)

        assert document.name == "notes.txt"
        assert document.size == 10
        assert document.content == "Call Alice"
        assert document.uploaded_at == now
        assert document.analysis_complete is False

    def test_rejects_invalid_upload(self):
        from assistr.documents import DocumentValidationError, create_document

        with pytest.raises(DocumentValidationError):
            create_document("a.png", "image/png", b"\x89PNG")


class TestAnalysisMerging:
    """Tests for apply_analysis() and attach_extracted_tasks()."""

    def test_apply_analysis_marks_complete(self):
        from assistr.documents import apply_analysis
        from assistr.models.ai import DocumentAnalysis
        from assistr.models.document import Document
        from assistr.models.task import PartialTask

        document = Document(name="plan.md", content="# Plan", insights=["old"])
        analysis = DocumentAnalysis(
            summary="A plan",
            insights=["new"],
            extracted_tasks=[PartialTask(title="Ship")],
            key_topics=["launch"],
            action_items=["ship it"],
        )

        updated = apply_analysis(document, analysis)

        assert updated.analysis_complete is True
        assert updated.summary == "A plan"
        assert updated.insights == ["new"]
        assert updated.key_topics == ["launch"]
        assert updated.extracted_tasks[0].title == "Ship"
        assert updated.id == document.id
        assert document.analysis_complete is False

    def test_attach_extracted_tasks_sets_source(self):
        from assistr.documents import attach_extracted_tasks
        from assistr.models.document import Document
        from assistr.models.task import PartialTask

        document = Document(name="minutes.txt", content="...")
        updated = attach_extracted_tasks(document, [PartialTask(title="A"), {"title": "B"}])

        assert [p.title for p in updated.extracted_tasks] == ["A", "B"]
        assert all(p.source_document == "minutes.txt" for p in updated.extracted_tasks)

    def test_require_content(self):
        from assistr.documents import MissingContentError, require_content
        from assistr.models.document import Document

        assert require_content(Document(name="a", content="text")) == "text"

        with pytest.raises(MissingContentError):
            require_content(Document(name="b", content=""))


class TestContentHelpers:
    """Tests for size formatting, document info and search."""

    @pytest.mark.parametrize("size,expected", [
        (0, "0 Bytes"),
        (500, "500 Bytes"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (5 * 1024 * 1024, "5 MB"),
    ])
    def test_format_file_size(self, size, expected):
        from assistr.documents import format_file_size

        assert format_file_size(size) == expected

    def test_extract_document_info(self):
        from assistr.documents import extract_document_info

        content = (
            "Budget review on 03/15/2024. Budget owners email finance@example.com "
            "and see https://example.com/budget for the budget sheet."
        )
        info = extract_document_info(content)

        assert info["word_count"] == len(content.split())
        assert info["estimated_read_time"] == 1
        assert info["key_phrases"][0] == "budget"
        assert info["has_numbers"] is True
        assert info["has_dates"] is True
        assert info["has_emails"] is True
        assert info["has_urls"] is True

    def test_extract_document_info_empty(self):
        from assistr.documents import extract_document_info

        info = extract_document_info("")

        assert info["word_count"] == 0
        assert info["estimated_read_time"] == 0
        assert info["key_phrases"] == []
        assert info["has_urls"] is False

    def test_search_in_document(self):
        from assistr.documents import search_in_document
        from assistr.models.document import Document

        document = Document(name="a.txt", content="Alpha beta. ALPHA gamma.")
        results = search_in_document(document, "alpha", context_chars=3)

        assert [r["position"] for r in results] == [0, 12]
        assert results[1]["text"] == "ALPHA"
        assert results[1]["context"] == "a. ALPHA ga"

    def test_search_blank_query(self):
        from assistr.documents import search_in_document
        from assistr.models.document import Document

        assert search_in_document(Document(name="a", content="x"), "  ") == []
