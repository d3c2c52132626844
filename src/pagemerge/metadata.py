"""Info dictionary construction for merged documents."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pagemerge.typing.models import PdfMetadata

_TEXT_FIELDS = (
    ("title", "Title"),
    ("author", "Author"),
    ("subject", "Subject"),
    ("keywords", "Keywords"),
)


def pdf_date_string(moment: datetime | None = None) -> str:
    """Format a timestamp as a PDF date, `D:YYYYMMDDHHmmSS+HH'mm'`.

    Naive timestamps are interpreted in the local timezone.

    Args:
        moment: Timestamp to format; defaults to now.

    Returns:
        str: PDF date string content.
    """
    aware = moment or datetime.now().astimezone()
    if aware.tzinfo is None:
        aware = aware.astimezone()
    offset = aware.utcoffset() or timedelta(0)

    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    hours, minutes = divmod(minutes, 60)
    return f"D:{aware:%Y%m%d%H%M%S}{sign}{hours:02d}'{minutes:02d}'"


def encode_text_string(text: str) -> str:
    """Encode text as a hexadecimal UTF-16BE text string with byte order mark."""
    return "<" + (b"\xfe\xff" + text.encode("utf-16-be")).hex().upper() + ">"


def build_info_dictionary(
    metadata: PdfMetadata | None,
    *,
    creator: str,
    producer: str,
    moment: datetime | None = None,
) -> dict[str, str]:
    """Build the Info dictionary entries as PDF source values.

    Text fields are written only when present and non-empty. Creation and
    modification dates share one timestamp.

    Args:
        metadata: Optional caller metadata.
        creator: Creator entry.
        producer: Producer entry.
        moment: Timestamp for both dates; defaults to now.

    Returns:
        dict[str, str]: Key to PDF source of its value.
    """
    info: dict[str, str] = {}
    if metadata is not None:
        for attribute, key in _TEXT_FIELDS:
            value = getattr(metadata, attribute)
            if value:
                info[key] = encode_text_string(value)

    info["Creator"] = encode_text_string(creator)
    info["Producer"] = encode_text_string(producer)

    date = f"({pdf_date_string(moment)})"
    info["CreationDate"] = date
    info["ModDate"] = date
    return info


def info_object_source(info: dict[str, str]) -> str:
    """Return the PDF source of a dictionary built by `build_info_dictionary`."""
    return "<<" + "".join(f"/{key} {value}" for key, value in info.items()) + ">>"
