"""Transport encoding of PDF payloads (standard base64)."""

from __future__ import annotations

import base64
import binascii

from pagemerge.exceptions import DecodeError


def decode_payload(encoded: str) -> bytes:
    """Decode a base64 payload.

    Args:
        encoded: Base64 text; surrounding whitespace and line breaks are ignored.

    Raises:
        DecodeError: If the text is not valid base64.

    Returns:
        bytes: Decoded bytes.
    """
    compact = "".join(encoded.split())
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(message=f"Failed to decode PDF data: {exc}") from exc


def encode_payload(data: bytes) -> str:
    """Encode bytes as base64 text."""
    return base64.b64encode(data).decode("ascii")
