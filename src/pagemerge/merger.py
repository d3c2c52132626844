"""Page-level merge of PDF documents.

Every distinct source document is loaded once and stripped down to the pages
it contributes: PyMuPDF deletes the other pages, collects the objects nobody
references any more and renumbers the survivors. Requested pages are then
grafted into a fresh output document in request order. Each request yields
its own page object, while fonts, images and content streams of a source are
copied into the output only once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

try:
    import fitz
except Exception:  # pragma: no cover - optional dependency at runtime
    fitz: Any
    fitz = None

from pagemerge.codec import decode_payload, encode_payload
from pagemerge.dependencies import ensure_merge_dependencies
from pagemerge.exceptions import (
    DocumentNotFoundError,
    EmptyRequestError,
    LoadError,
    PageMappingNotFoundError,
    PageNotFoundError,
    PageNotInMappingError,
    SaveError,
)
from pagemerge.logging import get_logger
from pagemerge.metadata import build_info_dictionary, info_object_source
from pagemerge.pdf.loader import FitzDocumentLoader
from pagemerge.pdf.xref import reference, reference_array, referenced_xrefs
from pagemerge.settings import Settings, get_settings

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from pagemerge.typing.models import PageSpec, PdfMetadata
    from pagemerge.typing.protocol import DocumentLoader

logger = get_logger(__name__)

# garbage=2 drops unreferenced objects and compacts the xref table; higher
# levels merge identical objects, which would fold duplicate pages into one.
_GARBAGE_LEVEL = 2


@dataclass
class PrunedDocument:
    """Source document reduced to its requested pages and renumbered."""

    document: fitz.Document
    page_mapping: dict[int, int]


@dataclass
class AssembledPage:
    """Output page created for one request."""

    identifier: str
    position: int
    xref: int
    rotation: int


def group_page_specs(pages: Sequence[PageSpec]) -> dict[str, list[int]]:
    """Group requested page numbers by source document.

    Args:
        pages: Requested pages in output order.

    Raises:
        EmptyRequestError: If no page was requested.

    Returns:
        dict[str, list[int]]: Identifier to requested page numbers (duplicates kept),
            ordered by identifier.
    """
    if not pages:
        raise EmptyRequestError

    groups: dict[str, list[int]] = {}
    for spec in pages:
        groups.setdefault(spec.pdf_data_encoded, []).append(spec.page_number)
    return dict(sorted(groups.items()))


def build_page_mapping(needed: set[int]) -> dict[int, int]:
    """Map original page numbers to their position once all other pages are gone."""
    return {original: position for position, original in enumerate(sorted(needed), start=1)}


def prune_document(identifier: str, requested: Sequence[int], *, loader: DocumentLoader) -> PrunedDocument:
    """Load one source document and keep only the requested pages.

    Unneeded pages are removed with `Document.select`; saving with garbage
    collection then drops the objects only they used and renumbers the rest
    contiguously.

    Args:
        identifier: Transport-encoded source bytes.
        requested: Requested page numbers, duplicates allowed.
        loader: Parser for the decoded bytes.

    Raises:
        PageNotFoundError: If a requested page does not exist in the source.
        LoadError: If PyMuPDF fails to rewrite the document.

    Returns:
        PrunedDocument: Open pruned document and its page number mapping.
    """
    source = loader.load(decode_payload(identifier))
    try:
        page_count = source.page_count
        needed = set(requested)
        missing = sorted(number for number in needed if number > page_count)
        if missing:
            raise PageNotFoundError(
                message=f"Page {missing[0]} not found in source document ({page_count} pages)",
            )

        mapping = build_page_mapping(needed)
        if len(needed) < page_count:
            source.select([number - 1 for number in sorted(needed)])
        objects_before = source.xref_length()
        try:
            compacted = source.tobytes(garbage=_GARBAGE_LEVEL, no_new_id=True)
        except (RuntimeError, ValueError) as exc:
            raise LoadError(message=f"Failed to prune PDF: {exc}") from exc
    finally:
        source.close()

    document = fitz.open(stream=compacted, filetype="pdf")
    logger.debug(
        "Source document pruned",
        extra={
            "kept_pages": len(mapping),
            "deleted_pages": page_count - len(mapping),
            "removed_objects": objects_before - document.xref_length(),
            "objects": document.xref_length() - 1,
        },
    )
    return PrunedDocument(document=document, page_mapping=mapping)


def prune_documents(groups: dict[str, list[int]], *, loader: DocumentLoader) -> dict[str, PrunedDocument]:
    """Prune every source document, in identifier order.

    Args:
        groups: Identifier to requested page numbers, as from `group_page_specs`.
        loader: Parser for source documents.

    Returns:
        dict[str, PrunedDocument]: Pruned documents keyed by identifier.
    """
    pruned: dict[str, PrunedDocument] = {}
    try:
        for identifier, requested in sorted(groups.items()):
            pruned[identifier] = prune_document(identifier, requested, loader=loader)
    except Exception:
        close_documents(pruned)
        raise
    return pruned


def close_documents(pruned: dict[str, PrunedDocument]) -> None:
    """Close every pruned document."""
    for item in pruned.values():
        item.document.close()


def rotate(current: object, delta: int) -> int:
    """Compose a page rotation with a requested delta, result in [0, 360)."""
    base = int(current) if isinstance(current, int | float) and not isinstance(current, bool) else 0
    return (base + delta) % 360


def _resolve_position(spec: PageSpec, source: PrunedDocument) -> int:
    """Return the 1-based position of a requested page inside its pruned document."""
    position = source.page_mapping.get(spec.page_number)
    if position is None:
        raise PageNotInMappingError(message=f"Page {spec.page_number} not found in mapping")
    if position > source.document.page_count:
        raise PageNotFoundError(message=f"Page {spec.page_number} not found at position {position}")
    return position


def _claim_annotations(output: fitz.Document, page_xref: int, claimed: set[int]) -> None:
    """Point a page's annotations at it, copying those an earlier page already owns."""
    annotations = referenced_xrefs(output, page_xref, "Annots")
    owned: list[int] = []
    for xref in annotations:
        if xref in claimed:
            copy_xref = output.get_new_xref()
            output.update_object(copy_xref, output.xref_object(xref, compressed=True))
            xref = copy_xref
        output.xref_set_key(xref, "P", reference(page_xref))
        owned.append(xref)
    claimed.update(owned)
    if owned != annotations:
        output.xref_set_key(page_xref, "Annots", reference_array(owned))


def assemble_pages(
    pages: Sequence[PageSpec],
    pruned: dict[str, PrunedDocument],
    output: fitz.Document,
) -> list[AssembledPage]:
    """Graft one fresh page object per requested page into `output`, in request order.

    PyMuPDF copies inheritable attributes (Resources, MediaBox, CropBox,
    Rotate) onto the new page and reparents it under the output page tree.
    Objects reachable from a source page are copied once per source and
    shared by every page grafted from it; annotations are the exception and
    are duplicated for repeated pages.

    Args:
        pages: Requested pages in output order.
        pruned: Pruned documents keyed by identifier.
        output: Output document receiving the pages.

    Raises:
        DocumentNotFoundError: If a source has no pruned document.
        PageMappingNotFoundError: If a pruned document has no page mapping.
        PageNotInMappingError: If a page number was never recorded while pruning.
        PageNotFoundError: If the pruned document has no such page or it cannot be copied.

    Returns:
        list[AssembledPage]: Created pages with their target rotation.
    """
    assembled: list[AssembledPage] = []
    claimed_annotations: set[int] = set()
    for spec in pages:
        source = pruned.get(spec.pdf_data_encoded)
        if source is None:
            raise DocumentNotFoundError
        if not source.page_mapping:
            raise PageMappingNotFoundError
        position = _resolve_position(spec, source)

        try:
            current = source.document[position - 1].rotation
            output.insert_pdf(
                source.document,
                from_page=position - 1,
                to_page=position - 1,
                links=False,
                final=False,
            )
        except (RuntimeError, ValueError) as exc:
            raise PageNotFoundError(message=f"Page {spec.page_number} is not a loadable page: {exc}") from exc

        page_xref = output.page_xref(output.page_count - 1)
        _claim_annotations(output, page_xref, claimed_annotations)
        assembled.append(
            AssembledPage(
                identifier=spec.pdf_data_encoded,
                position=position,
                xref=page_xref,
                rotation=rotate(current, spec.rotation),
            ),
        )
    return assembled


def copy_links(assembled: list[AssembledPage], pruned: dict[str, PrunedDocument], output: fitz.Document) -> int:
    """Recreate source links on the output pages.

    Internal links are pointed at the first output page made from their
    target; links into pages that were not requested are dropped. Must run
    before `apply_rotations`, while each output page still has its source
    rotation.

    Args:
        assembled: Pages created by `assemble_pages`, in output order.
        pruned: Pruned documents keyed by identifier.
        output: Output document.

    Raises:
        SaveError: If PyMuPDF cannot write a link.

    Returns:
        int: Number of links written.
    """
    first_index: dict[tuple[str, int], int] = {}
    for index, page in enumerate(assembled):
        first_index.setdefault((page.identifier, page.position), index)

    written = 0
    for index, page in enumerate(assembled):
        source_page = pruned[page.identifier].document[page.position - 1]
        target_page = output[index]
        for link in source_page.get_links():
            kind = link.get("kind")
            if kind in (fitz.LINK_GOTO, fitz.LINK_NAMED):
                target = first_index.get((page.identifier, link.get("page", -1) + 1))
                if target is None:
                    continue
                link = {
                    "kind": fitz.LINK_GOTO,
                    "from": link["from"],
                    "page": target,
                    "to": link.get("to", fitz.Point(0, 0)),
                    "zoom": link.get("zoom", 0),
                }
            elif kind not in (fitz.LINK_URI, fitz.LINK_GOTOR, fitz.LINK_LAUNCH):
                continue
            try:
                target_page.insert_link(link)
            except (RuntimeError, ValueError) as exc:
                raise SaveError(message=f"Failed to copy link on output page {index + 1}: {exc}") from exc
            written += 1
    return written


def apply_rotations(assembled: list[AssembledPage], output: fitz.Document) -> None:
    """Write the composed `/Rotate` of every output page."""
    for page in assembled:
        output.xref_set_key(page.xref, "Rotate", str(page.rotation))


def finish_document(
    output: fitz.Document,
    page_count: int,
    *,
    metadata: PdfMetadata | None,
    settings: Settings,
    now: datetime | None = None,
) -> bytes:
    """Attach the Info dictionary, then collect, renumber, compress and serialize.

    Args:
        output: Output document holding the assembled pages.
        page_count: Number of assembled pages.
        metadata: Optional caller metadata.
        settings: Runtime settings.
        now: Timestamp for the Info dates; defaults to now.

    Raises:
        SaveError: If the document cannot be written or re-opened.

    Returns:
        bytes: Serialized PDF.
    """
    info = build_info_dictionary(
        metadata,
        creator=settings.pdf_creator,
        producer=settings.pdf_producer,
        moment=now,
    )
    try:
        info_xref = output.get_new_xref()
        output.update_object(info_xref, info_object_source(info))
        output.xref_set_key(-1, "Info", reference(info_xref))
        data = output.tobytes(garbage=_GARBAGE_LEVEL, deflate=settings.compress_streams, no_new_id=True)
    except (RuntimeError, ValueError) as exc:
        raise SaveError(message=f"Failed to save merged PDF: {exc}") from exc

    if settings.verify_output:
        verify_output(data, expected_pages=page_count)

    logger.debug("Merged document written", extra={"size": len(data), "compressed": settings.compress_streams})
    return data


def verify_output(data: bytes, *, expected_pages: int) -> None:
    """Re-open written bytes and check the page count.

    Raises:
        SaveError: If the bytes cannot be opened or the page count differs.
    """
    try:
        with fitz.open(stream=data, filetype="pdf") as reopened:
            page_count = reopened.page_count
    except Exception as exc:
        raise SaveError(message=f"Failed to save merged PDF: {exc}") from exc
    if page_count != expected_pages:
        raise SaveError(
            message=f"Failed to save merged PDF: expected {expected_pages} pages, found {page_count}",
        )


def merge_pages(
    pages: Sequence[PageSpec],
    metadata: PdfMetadata | None = None,
    *,
    settings: Settings | None = None,
    loader: DocumentLoader | None = None,
    now: datetime | None = None,
) -> bytes:
    """Merge the requested pages into one PDF.

    Args:
        pages: Requested pages in output order.
        metadata: Optional document metadata.
        settings: Runtime settings; defaults to `get_settings()`.
        loader: Source document parser; defaults to PyMuPDF.
        now: Timestamp for the Info dates; defaults to now.

    Returns:
        bytes: Merged PDF.
    """
    ensure_merge_dependencies()
    config = settings or get_settings()
    groups = group_page_specs(pages)
    pruned = prune_documents(groups, loader=loader or FitzDocumentLoader())

    output = fitz.open()
    try:
        assembled = assemble_pages(pages, pruned, output)
        links = copy_links(assembled, pruned, output)
        apply_rotations(assembled, output)
        data = finish_document(output, len(assembled), metadata=metadata, settings=config, now=now)
    finally:
        output.close()
        close_documents(pruned)

    logger.info(
        "PDF merge completed",
        extra={"pages": len(assembled), "sources": len(pruned), "links": links, "size": len(data)},
    )
    return data


def merge_pdfs(
    pages: Sequence[PageSpec],
    metadata: PdfMetadata | None = None,
    *,
    settings: Settings | None = None,
    loader: DocumentLoader | None = None,
    now: datetime | None = None,
) -> str:
    """Merge the requested pages and return the result in transport encoding.

    Args:
        pages: Requested pages in output order.
        metadata: Optional document metadata.
        settings: Runtime settings; defaults to `get_settings()`.
        loader: Source document parser; defaults to PyMuPDF.
        now: Timestamp for the Info dates; defaults to now.

    Returns:
        str: Base64-encoded merged PDF.
    """
    return encode_payload(merge_pages(pages, metadata, settings=settings, loader=loader, now=now))


def export_page(page: PageSpec, metadata: PdfMetadata | None = None, **kwargs: Any) -> str:
    """Export a single page as its own document."""
    return merge_pdfs([page], metadata, **kwargs)


def export_pages(pages: Sequence[PageSpec], metadata: PdfMetadata | None = None, **kwargs: Any) -> str:
    """Export a selection of pages as a new document."""
    if not pages:
        raise EmptyRequestError(message="No pages to export")
    return merge_pdfs(pages, metadata, **kwargs)
