"""Pytest marker auto-assignment by folder and shared PDF builders."""

from __future__ import annotations

from pathlib import Path

import fitz
import pytest

from pagemerge import logger
from pagemerge.pdf import FitzDocumentLoader, reference, reference_array


def _mark_tests_by_directory(
    config: pytest.Config,
    items: list[pytest.Item],
    marker: str,
) -> None:
    """Mark collected tests located under tests/<marker>/."""
    target_dir = Path(config.rootpath) / "tests" / marker
    target_dir = target_dir.resolve()

    for item in items:
        try:
            path = Path(str(item.fspath)).resolve()
        except Exception:
            logger.warning(
                f"Could not resolve path for test item {item.name!s}; skipping {marker!s} marker assignment",
            )
            continue

        if path == target_dir or target_dir in path.parents:
            item.add_marker(getattr(pytest.mark, marker))


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Apply directory-based markers to test items."""
    _mark_tests_by_directory(config, items, "unit")
    _mark_tests_by_directory(config, items, "integration")
    _mark_tests_by_directory(config, items, "end2end")


def _nest_page_tree(doc: fitz.Document) -> None:
    """Move pages below two intermediate Pages nodes carrying the inheritable attributes.

    Both nodes hold MediaBox [0 0 300 400] and the first page's Resources,
    which are removed from the pages themselves; the first node also sets
    Rotate 90. The first half of the pages (rounded up) goes below it.
    """
    root = int(doc.xref_get_key(doc.pdf_catalog(), "Pages")[1].split()[0])
    page_xrefs = [doc.page_xref(index) for index in range(doc.page_count)]
    resources = doc.xref_get_key(page_xrefs[0], "Resources")[1]
    half = (len(page_xrefs) + 1) // 2

    nodes = []
    for position, members in enumerate((page_xrefs[:half], page_xrefs[half:])):
        node = doc.get_new_xref()
        rotate = "/Rotate 90" if position == 0 else ""
        doc.update_object(
            node,
            f"<</Type/Pages/Parent {reference(root)}/Kids{reference_array(members)}/Count {len(members)}"
            f"/MediaBox[0 0 300 400]/Resources {resources}{rotate}>>",
        )
        for member in members:
            doc.xref_set_key(member, "Parent", reference(node))
            doc.xref_set_key(member, "MediaBox", "null")
            doc.xref_set_key(member, "Resources", "null")
        nodes.append(node)
    doc.xref_set_key(root, "Kids", reference_array(nodes))


def build_pdf(
    page_count: int,
    *,
    label: str = "doc",
    rotations: list[int] | None = None,
    links: list[tuple[int, int]] | None = None,
    annotate: bool = False,
    nested: bool = False,
) -> bytes:
    """Build PDF bytes whose page n shows the text "<label> page <n>".

    Pages are 300x400. `links` holds (from page, to page) pairs of internal
    GoTo links; `annotate` adds one text annotation per page.
    """
    doc = fitz.open()
    try:
        for index in range(page_count):
            page = doc.new_page(width=300, height=400)
            page.insert_text((50, 72), f"{label} page {index + 1}")
            if annotate:
                page.add_text_annot((20, 20), f"{label} note {index + 1}")
        for source, target in links or []:
            doc[source - 1].insert_link(
                {
                    "kind": fitz.LINK_GOTO,
                    "from": fitz.Rect(50, 300, 150, 320),
                    "page": target - 1,
                    "to": fitz.Point(0, 0),
                    "zoom": 0,
                },
            )
        for index, rotation in enumerate(rotations or []):
            doc[index].set_rotation(rotation)
        if nested:
            _nest_page_tree(doc)
        return doc.tobytes()
    finally:
        doc.close()


class RecordingLoader(FitzDocumentLoader):
    """PyMuPDF loader remembering which payloads it opened."""

    def __init__(self) -> None:
        self.calls: list[bytes] = []

    def load(self, data: bytes) -> fitz.Document:
        self.calls.append(data)
        return super().load(data)


@pytest.fixture
def make_pdf():
    """Return the builder of labelled PDF bytes."""
    return build_pdf


@pytest.fixture
def recording_loader() -> RecordingLoader:
    return RecordingLoader()
