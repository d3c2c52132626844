"""CLI entry point for pagemerge."""

from __future__ import annotations

import argparse
from pathlib import Path

from pydantic import ValidationError

from pagemerge import __version__, logger
from pagemerge.codec import decode_payload
from pagemerge.commands import parse_merge_request
from pagemerge.dependencies import ensure_merge_dependencies
from pagemerge.exceptions import InvalidRequestError, PackageError
from pagemerge.logging import configure_logging
from pagemerge.merger import merge_pdfs
from pagemerge.settings import get_settings
from pagemerge.typing.models import MergeRequest, PageSpec, PdfMetadata


def _page_argument(value: str) -> tuple[Path, int, int]:
    """Parse a `FILE:PAGE[:ROTATION]` page argument.

    Args:
        value (str): CLI value.

    Raises:
        argparse.ArgumentTypeError: If the value is malformed.

    Returns:
        tuple[Path, int, int]: Source path, 1-based page number and rotation.
    """
    head, _, last = value.rpartition(":")
    middle_head, _, middle = head.rpartition(":")
    parsed: tuple[Path, int, int] | None = None
    try:
        if middle_head and middle.lstrip("-").isdigit() and last.lstrip("-").isdigit():
            parsed = (Path(middle_head), int(middle), int(last))
        elif head and last.isdigit():
            parsed = (Path(head), int(last), 0)
    except ValueError:
        parsed = None
    if parsed is None:
        raise argparse.ArgumentTypeError(f"--page must look like FILE:PAGE[:ROTATION], got '{value}'")  # noqa: TRY003
    if parsed[1] < 1:
        raise argparse.ArgumentTypeError(f"--page numbers start at 1, got '{value}'")  # noqa: TRY003
    return parsed


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns:
        argparse.ArgumentParser: The configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="pagemerge")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    merge_parser = subparsers.add_parser("merge", help="Merge selected pages of PDF files into one PDF")
    source = merge_parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--page",
        action="append",
        type=_page_argument,
        dest="pages",
        help="Page to append, as FILE:PAGE[:ROTATION]; repeat in output order",
    )
    source.add_argument("--request", type=Path, default=None, dest="request_path", help="JSON merge request")
    merge_parser.add_argument("--output", required=True, type=Path, dest="output_path")

    merge_parser.add_argument("--title", default=None)
    merge_parser.add_argument("--author", default=None)
    merge_parser.add_argument("--subject", default=None)
    merge_parser.add_argument("--keywords", default=None)
    merge_parser.add_argument("--no-compress", action="store_true", dest="no_compress")

    return parser


def _build_merge_request(args: argparse.Namespace) -> MergeRequest:
    """Build a merge request from CLI arguments.

    Args:
        args (argparse.Namespace): Parsed CLI args.

    Raises:
        InvalidRequestError: If a page or metadata value does not validate.

    Returns:
        MergeRequest: Request object.
    """
    if args.request_path is not None:
        return parse_merge_request(args.request_path.read_bytes())

    sources: dict[Path, bytes] = {}
    pages = []
    try:
        for path, page_number, rotation in args.pages:
            if path not in sources:
                sources[path] = path.read_bytes()
            pages.append(PageSpec.from_pdf_bytes(sources[path], page_number, rotation))

        metadata = PdfMetadata(title=args.title, author=args.author, subject=args.subject, keywords=args.keywords)
    except ValidationError as exc:
        raise InvalidRequestError(message=f"Invalid merge arguments: {exc}") from exc
    return MergeRequest(pages=pages, metadata=metadata)


def main() -> int:
    """Run the CLI.

    Returns:
        int: Exit code (0 for success, 1 for error).
    """
    settings = get_settings()
    configure_logging(settings=settings)

    parser = build_parser()
    args = parser.parse_args()

    if args.command != "merge":
        parser.print_help()
        return 0

    ensure_merge_dependencies()
    if args.no_compress:
        settings = settings.model_copy(update={"compress_streams": False})

    try:
        request = _build_merge_request(args)
        encoded = merge_pdfs(request.pages, request.metadata, settings=settings)
    except PackageError:
        logger.exception("Merge failed")
        return 1
    except OSError:
        logger.exception("Could not read merge sources")
        return 1
    except KeyboardInterrupt:
        logger.info("Merge aborted by user")
        return 130

    output_path: Path = args.output_path
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(decode_payload(encoded))
    logger.info("Merge completed", extra={"output_path": str(output_path), "pages": len(request.pages)})
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
