"""Semantic extraction models - the contract a model response must satisfy.

An ``ExtractionResult`` carries two independent channels produced by the
same model call: free styled text runs (``content``) and layout blocks
(``structure``). Both are validated here, at the boundary, so downstream
stages can treat them as fully typed.
"""

import re
from typing import Optional

from pydantic import Field, field_validator

from .base import Alignment, StructureType, WireModel

MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 6

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")


class ContentItem(WireModel):
    """One styled run of literal text."""

    text: str = Field(..., description="The text content.")
    bold: Optional[bool] = Field(None, description="Whether the text is bold.")
    italic: Optional[bool] = Field(None, description="Whether the text is italic.")
    color: Optional[str] = Field(
        None, description="The hex color of the text (e.g., #000000)."
    )
    font_size: Optional[float] = Field(
        None, gt=0, description="The font size of the text in points."
    )

    @field_validator("color")
    @classmethod
    def normalize_color(cls, value: Optional[str]) -> Optional[str]:
        """Normalize to upper-case RRGGBB without the leading '#'."""
        if value is None:
            return None
        match = _HEX_COLOR.match(value.strip())
        if not match:
            raise ValueError(f"not a hex color: {value!r}")
        digits = match.group(1).upper()
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        return digits


class Position(WireModel):
    """Location of a node on the source page."""

    x: Optional[float] = Field(None, description="X position on page")
    y: Optional[float] = Field(None, description="Y position on page")
    page: Optional[int] = Field(None, description="Page number")


class StructuralNode(WireModel):
    """
    One semantic layout block.

    ``type`` is kept as the raw string reported by the model so that kinds
    outside ``StructureType`` survive validation and can be rendered as plain
    text instead of failing the whole extraction.
    """

    type: str = Field(
        ...,
        description=(
            "Block kind: heading, paragraph, list, table, image, "
            "section_break or page_break"
        ),
    )
    level: Optional[int] = Field(None, description="Heading level (1-6) for headings")
    items: Optional[list[str]] = Field(
        None, description="Text items; list entries or heading/paragraph text"
    )
    rows: Optional[list[list[str]]] = Field(None, description="Table rows and cells")
    image_description: Optional[str] = Field(
        None, description="Description of image content"
    )
    alignment: Optional[Alignment] = Field(None, description="Text alignment")
    position: Optional[Position] = None

    @property
    def kind(self) -> Optional[StructureType]:
        """Known structure type, or None for an unrecognized discriminant."""
        try:
            return StructureType(self.type.strip().lower())
        except ValueError:
            return None

    @property
    def effective_level(self) -> int:
        """Heading level clamped into 1-6; missing or out of range gives 1."""
        if self.level is None or not (
            MIN_HEADING_LEVEL <= self.level <= MAX_HEADING_LEVEL
        ):
            return MIN_HEADING_LEVEL
        return self.level

    @property
    def joined_text(self) -> str:
        """Items joined with single spaces (empty when there are none)."""
        return " ".join(self.items or [])


class ExtractionResult(WireModel):
    """Validated output of one successful model attempt."""

    content: list[ContentItem] = Field(default_factory=list)
    structure: list[StructuralNode] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.content and not self.structure
