"""pagemerge package."""

from pagemerge.dependencies import ensure_package_dependencies

ensure_package_dependencies()

from pagemerge.exceptions import (  # noqa: E402
    DecodeError,
    DependencyError,
    DocumentNotFoundError,
    EmptyRequestError,
    InvalidRequestError,
    LoadError,
    MergeError,
    PackageError,
    PageMappingNotFoundError,
    PageNotFoundError,
    PageNotInMappingError,
    SaveError,
    SettingsError,
)
from pagemerge.logging import configure_logging, get_logger  # noqa: E402
from pagemerge.settings import Settings, get_settings  # noqa: E402

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("pagemerge")

from pagemerge.merger import export_page, export_pages, merge_pages, merge_pdfs  # noqa: E402
from pagemerge.typing.models import PageSpec, PdfMetadata  # noqa: E402

__all__ = [
    "DecodeError",
    "DependencyError",
    "DocumentNotFoundError",
    "EmptyRequestError",
    "InvalidRequestError",
    "LoadError",
    "MergeError",
    "PackageError",
    "PageMappingNotFoundError",
    "PageNotFoundError",
    "PageNotInMappingError",
    "PageSpec",
    "PdfMetadata",
    "SaveError",
    "Settings",
    "SettingsError",
    "__version__",
    "configure_logging",
    "export_page",
    "export_pages",
    "get_logger",
    "get_settings",
    "logger",
    "merge_pages",
    "merge_pdfs",
]
