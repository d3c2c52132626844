"""Backend interfaces."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    import fitz


class DocumentLoader(Protocol):
    """Parser turning source bytes into an editable PDF document."""

    def load(self, data: bytes) -> fitz.Document:
        """Open a source document.

        Args:
            data: Raw PDF bytes.

        Raises:
            LoadError: If the bytes are not a usable PDF document.

        Returns:
            fitz.Document: Open document, owned by the caller.
        """
