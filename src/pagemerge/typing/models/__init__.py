"""Core domain model exports."""

from pagemerge.typing.models.request import MergeRequest, MergeResponse, PageSpec, PdfMetadata

__all__ = [
    "MergeRequest",
    "MergeResponse",
    "PageSpec",
    "PdfMetadata",
]
