"""Command boundary used by host shells: JSON payload in, data or error message out."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from pagemerge.enums import MergeErrorKind
from pagemerge.exceptions import InvalidRequestError, MergeError, PackageError
from pagemerge.logging import get_logger
from pagemerge.merger import merge_pdfs
from pagemerge.typing.models import MergeRequest, MergeResponse

if TYPE_CHECKING:
    from datetime import datetime

    from pagemerge.settings import Settings
    from pagemerge.typing.protocol import DocumentLoader

logger = get_logger(__name__)


def parse_merge_request(payload: MergeRequest | dict[str, Any] | str | bytes) -> MergeRequest:
    """Validate a merge payload.

    Args:
        payload: Request model, decoded JSON object or raw JSON text.

    Raises:
        InvalidRequestError: If the payload does not validate.

    Returns:
        MergeRequest: Validated request.
    """
    if isinstance(payload, MergeRequest):
        return payload
    try:
        if isinstance(payload, str | bytes):
            return MergeRequest.model_validate_json(payload)
        return MergeRequest.model_validate(payload)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
        )
        raise InvalidRequestError(message=f"Invalid merge request: {details}") from exc


def handle_merge_command(
    payload: MergeRequest | dict[str, Any] | str | bytes,
    *,
    settings: Settings | None = None,
    loader: DocumentLoader | None = None,
    now: datetime | None = None,
) -> MergeResponse:
    """Run a merge and report the outcome as a response model.

    Package failures are returned as a message plus their kind: merge errors
    carry their own kind, settings and dependency errors are reported as
    `setup_error`. Anything else propagates.

    Args:
        payload: Request model, decoded JSON object or raw JSON text.
        settings: Runtime settings.
        loader: Source document parser.
        now: Timestamp for the Info dates.

    Returns:
        MergeResponse: Encoded document or error description.
    """
    try:
        request = parse_merge_request(payload)
        data = merge_pdfs(request.pages, request.metadata, settings=settings, loader=loader, now=now)
    except MergeError as exc:
        logger.warning("PDF merge failed", extra={"error_kind": exc.kind.value, "error": str(exc)})
        return MergeResponse(error=str(exc), error_kind=exc.kind)
    except PackageError as exc:
        logger.warning("PDF merge could not run", extra={"error": str(exc)})
        return MergeResponse(error=str(exc), error_kind=MergeErrorKind.SETUP_ERROR)
    return MergeResponse(data=data)
