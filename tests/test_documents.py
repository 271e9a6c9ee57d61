"""Tests for src.core.documents — PDF text extraction."""

from unittest.mock import MagicMock, patch

import pytest
from PyPDF2.errors import PdfReadError

from src.core.documents import DocumentError, extract_pdf_text


def _page(text=None, error=None):
    page = MagicMock()
    if error is not None:
        page.extract_text.side_effect = error
    else:
        page.extract_text.return_value = text
    return page


def _reader(*pages):
    return MagicMock(return_value=MagicMock(pages=list(pages)))


class TestExtractPdfText:
    def test_joins_pages(self):
        with patch("src.core.documents.PdfReader", _reader(_page("Week 1"), _page("Week 2"))):
            assert extract_pdf_text(b"%PDF") == "Week 1\nWeek 2"

    def test_truncates(self):
        with patch("src.core.documents.PdfReader", _reader(_page("x" * 50))):
            assert extract_pdf_text(b"%PDF", max_chars=10) == "x" * 10

    def test_bad_page_skipped(self):
        reader = _reader(_page(error=KeyError("/Font")), _page("Midterm March 12"))
        with patch("src.core.documents.PdfReader", reader):
            assert extract_pdf_text(b"%PDF") == "Midterm March 12"

    def test_no_text(self):
        with patch("src.core.documents.PdfReader", _reader(_page(None), _page(""))):
            with pytest.raises(DocumentError, match="no extractable text"):
                extract_pdf_text(b"%PDF")

    def test_unreadable(self):
        with patch("src.core.documents.PdfReader", MagicMock(side_effect=PdfReadError("EOF marker not found"))):
            with pytest.raises(DocumentError, match="Couldn't read"):
                extract_pdf_text(b"not a pdf")

    def test_empty(self):
        with pytest.raises(DocumentError):
            extract_pdf_text(b"")
