"""PyMuPDF-backed loading of PDF bytes."""

from __future__ import annotations

from typing import Any

try:
    import fitz
except Exception:  # pragma: no cover - optional dependency at runtime
    fitz: Any
    fitz = None

from pagemerge.exceptions import LoadError
from pagemerge.logging import get_logger

logger = get_logger(__name__)


class FitzDocumentLoader:
    """Document loader opening source bytes with PyMuPDF."""

    def load(self, data: bytes) -> fitz.Document:
        """Open PDF bytes as an editable document.

        The caller owns the returned document and must close it.

        Args:
            data: Raw PDF file content.

        Raises:
            LoadError: If PyMuPDF is unavailable, the bytes are not a PDF
                or the document is encrypted.

        Returns:
            fitz.Document: Open document.
        """
        if fitz is None:
            raise LoadError(message="PyMuPDF is required to load PDF documents")

        try:
            document = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            raise LoadError(message=f"Failed to load PDF: {exc}") from exc

        if not document.is_pdf:
            document.close()
            raise LoadError(message="Failed to load PDF: not a PDF document")
        if document.needs_pass or document.metadata.get("encryption"):
            document.close()
            raise LoadError(message="Failed to load PDF: encrypted documents are not supported")

        logger.debug("PDF loaded", extra={"objects": document.xref_length() - 1, "pages": document.page_count})
        return document
