"""PyMuPDF-backed loading and object access."""

from pagemerge.pdf.loader import FitzDocumentLoader
from pagemerge.pdf.xref import reference, reference_array, referenced_xrefs

__all__ = [
    "FitzDocumentLoader",
    "reference",
    "reference_array",
    "referenced_xrefs",
]
