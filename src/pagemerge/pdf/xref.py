"""Helpers around PyMuPDF's xref key access."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    import fitz

_REFERENCE = re.compile(r"(\d+)\s+\d+\s+R")


def reference(xref: int) -> str:
    """Return PDF source of an indirect reference to `xref`."""
    return f"{xref} 0 R"


def reference_array(xrefs: Iterable[int]) -> str:
    """Return PDF source of an array of indirect references."""
    return "[" + " ".join(reference(xref) for xref in xrefs) + "]"


def referenced_xrefs(document: fitz.Document, xref: int, key: str) -> list[int]:
    """Return the object numbers an array-valued key refers to.

    The array may be stored directly in the object or behind an indirect
    reference. Missing keys and other value types yield an empty list.

    Args:
        document: Open PDF document.
        xref: Object holding the key; -1 addresses the trailer.
        key: Dictionary key, e.g. `Annots`.

    Returns:
        list[int]: Referenced object numbers, in array order.
    """
    kind, value = document.xref_get_key(xref, key)
    if kind == "xref":
        value = document.xref_object(int(value.split()[0]), compressed=True)
    elif kind != "array":
        return []
    return [int(number) for number in _REFERENCE.findall(value)]

