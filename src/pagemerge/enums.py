"""Project enums."""

from __future__ import annotations

from enum import StrEnum


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> _EnumMixin:
        """Parse enum from string.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            _EnumMixin: Parsed enum value.
        """
        try:
            return cls(value)
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class MergeErrorKind(_EnumMixin):
    """Discriminator attached to every merge failure."""

    EMPTY_REQUEST = "empty_request"
    INVALID_REQUEST = "invalid_request"
    DECODE_ERROR = "decode_error"
    LOAD_ERROR = "load_error"
    DOCUMENT_NOT_FOUND = "document_not_found"
    PAGE_MAPPING_NOT_FOUND = "page_mapping_not_found"
    PAGE_NOT_IN_MAPPING = "page_not_in_mapping"
    PAGE_NOT_FOUND = "page_not_found"
    SAVE_ERROR = "save_error"
    SETUP_ERROR = "setup_error"

