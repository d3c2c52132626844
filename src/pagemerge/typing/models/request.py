"""Merge request and response models."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from pagemerge.codec import encode_payload
from pagemerge.enums import MergeErrorKind


class PageSpec(BaseModel):
    """One requested output page."""

    model_config = ConfigDict(extra="forbid", frozen=True, serialize_by_alias=True)

    pdf_data_encoded: str = Field(
        min_length=1,
        validation_alias=AliasChoices("pdfDataEncoded", "pdf_data_base64", "pdf_data_encoded"),
        serialization_alias="pdfDataEncoded",
        description="Source document bytes in base64 transport encoding.",
    )
    page_number: int = Field(
        ge=1,
        validation_alias=AliasChoices("pageNumber", "page_number"),
        serialization_alias="pageNumber",
        description="1-based page number within the source document.",
    )
    rotation: int = Field(default=0, description="Rotation delta in degrees, normalized modulo 360.")

    @classmethod
    def from_pdf_bytes(cls, data: bytes, page_number: int, rotation: int = 0) -> PageSpec:
        """Build a spec from raw source bytes.

        Args:
            data: Raw PDF bytes.
            page_number: 1-based page number.
            rotation: Rotation delta in degrees.

        Returns:
            PageSpec: Spec carrying the encoded payload.
        """
        return cls(pdf_data_encoded=encode_payload(data), page_number=page_number, rotation=rotation)


class PdfMetadata(BaseModel):
    """Document metadata written to the Info dictionary."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    author: str | None = None
    subject: str | None = None
    keywords: str | None = None


class MergeRequest(BaseModel):
    """Payload accepted by the merge command."""

    model_config = ConfigDict(extra="forbid")

    pages: list[PageSpec]
    metadata: PdfMetadata | None = None


class MergeResponse(BaseModel):
    """Result returned by the merge command: encoded bytes or an error message."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    data: str | None = None
    error: str | None = None
    error_kind: MergeErrorKind | None = None

    @property
    def ok(self) -> bool:
        """Return whether the merge succeeded."""
        return self.error is None
