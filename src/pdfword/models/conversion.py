"""Request and response models for a conversion."""

from pydantic import AliasChoices, Field

from .base import ConversionMode, WireModel

DOCX_MEDIA_TYPE = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)
PDF_MEDIA_TYPE = "application/pdf"


class ConversionInput(WireModel):
    """A conversion request.

    ``source_uri`` is either a ``data:`` URI carrying the PDF bytes, a
    ``file://`` URI or a local path.
    """

    source_uri: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("sourceUri", "source_uri", "pdfUri"),
        serialization_alias="sourceUri",
    )
    mode: ConversionMode = Field(
        default=ConversionMode.OCR,
        validation_alias=AliasChoices("conversionMode", "mode"),
        serialization_alias="conversionMode",
    )


class ConversionOutput(WireModel):
    """A produced document, embedded as a ``data:`` URI."""

    document_uri: str = Field(
        ...,
        validation_alias=AliasChoices("documentUri", "document_uri", "docxUri"),
        serialization_alias="documentUri",
    )
