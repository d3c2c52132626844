"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from pagemerge.enums import MergeErrorKind


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class DependencyError(PackageError):
    """Raised when optional runtime dependencies are missing."""

    missing_package: list[str]
    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Missing runtime dependencies for '{self.message}': {', '.join(self.missing_package)}"


@dataclass(frozen=True)
class MergeError(PackageError):
    """Base class for every failure that aborts a merge."""

    message: str
    kind: ClassVar[MergeErrorKind]

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class EmptyRequestError(MergeError):
    """Raised when no pages were requested."""

    message: str = "No pages to merge"
    kind: ClassVar[MergeErrorKind] = MergeErrorKind.EMPTY_REQUEST


@dataclass(frozen=True)
class InvalidRequestError(MergeError):
    """Raised when a request payload does not validate."""

    kind: ClassVar[MergeErrorKind] = MergeErrorKind.INVALID_REQUEST


@dataclass(frozen=True)
class DecodeError(MergeError):
    """Raised when a source payload is not valid transport encoding."""

    kind: ClassVar[MergeErrorKind] = MergeErrorKind.DECODE_ERROR


@dataclass(frozen=True)
class LoadError(MergeError):
    """Raised when source bytes cannot be parsed into a PDF object graph."""

    kind: ClassVar[MergeErrorKind] = MergeErrorKind.LOAD_ERROR


@dataclass(frozen=True)
class DocumentNotFoundError(MergeError):
    """Raised when a requested source has no pruned document."""

    message: str = "Document not found in pruned set"
    kind: ClassVar[MergeErrorKind] = MergeErrorKind.DOCUMENT_NOT_FOUND


@dataclass(frozen=True)
class PageMappingNotFoundError(MergeError):
    """Raised when a pruned document carries no page number mapping."""

    message: str = "Page mapping not found"
    kind: ClassVar[MergeErrorKind] = MergeErrorKind.PAGE_MAPPING_NOT_FOUND


@dataclass(frozen=True)
class PageNotInMappingError(MergeError):
    """Raised when a requested page number was never recorded while pruning."""

    kind: ClassVar[MergeErrorKind] = MergeErrorKind.PAGE_NOT_IN_MAPPING


@dataclass(frozen=True)
class PageNotFoundError(MergeError):
    """Raised when a requested page does not exist or cannot be resolved."""

    kind: ClassVar[MergeErrorKind] = MergeErrorKind.PAGE_NOT_FOUND


@dataclass(frozen=True)
class SaveError(MergeError):
    """Raised when the merged object graph cannot be written as a valid PDF."""

    kind: ClassVar[MergeErrorKind] = MergeErrorKind.SAVE_ERROR
