"""Typing-centric domain modules."""

from pagemerge.enums import MergeErrorKind
from pagemerge.typing.models import MergeRequest, MergeResponse, PageSpec, PdfMetadata
from pagemerge.typing.protocol import DocumentLoader

__all__ = [
    "DocumentLoader",
    "MergeErrorKind",
    "MergeRequest",
    "MergeResponse",
    "PageSpec",
    "PdfMetadata",
]
