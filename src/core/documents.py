"""
Agenda Assistant — Document Reader.

Extracts text from uploaded PDFs (syllabi, timetables, assignment sheets)
so the assistant can turn them into tasks and schedule blocks.
"""

from __future__ import annotations

import io
import logging

from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"


class DocumentError(Exception):
    """Raised when an uploaded document can't be read."""


def extract_pdf_text(data: bytes, max_chars: int = 20000) -> str:
    """Return the text of a PDF, truncated to `max_chars`.

    Raises:
        DocumentError: If the bytes aren't a readable PDF or contain no text
            (e.g. a scanned image without OCR).
    """
    if not data:
        raise DocumentError("The document is empty")

    try:
        reader = PdfReader(io.BytesIO(data))
        pages: list[str] = []
        for number, page in enumerate(reader.pages, start=1):
            try:
                pages.append(page.extract_text() or "")
            except Exception as exc:
                logger.warning("PDF page %d extract error: %s", number, exc)
    except PdfReadError as exc:
        raise DocumentError(f"Couldn't read the PDF: {exc}") from exc

    text = "\n".join(p for p in pages if p).strip()
    if not text:
        raise DocumentError("The PDF has no extractable text")

    if len(text) > max_chars:
        logger.info("PDF text truncated from %d to %d chars", len(text), max_chars)
        text = text[:max_chars]

    logger.info("Extracted %d chars from %d PDF pages", len(text), len(pages))
    return text
