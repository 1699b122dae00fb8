"""Block element models - the rendering-ready tree handed to the packager."""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .base import Alignment

DEFAULT_RUN_SIZE = 22  # half-points (11pt)


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class TextRun(_Frozen):
    """A styled run of text. Sizes are in half-points."""

    text: str = ""
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    color: Optional[str] = Field(None, description="RRGGBB without '#'")
    size: Optional[int] = Field(None, gt=0, description="Font size in half-points")
    break_after: bool = Field(default=False, description="Line break after the run")


class ParagraphBlock(_Frozen):
    """Plain paragraph made of styled runs."""

    kind: Literal["paragraph"] = "paragraph"
    runs: tuple[TextRun, ...] = ()
    alignment: Optional[Alignment] = None


class HeadingBlock(_Frozen):
    """Heading paragraph rendered with the matching heading style."""

    kind: Literal["heading"] = "heading"
    level: int = Field(default=1, ge=1, le=6)
    runs: tuple[TextRun, ...] = ()
    alignment: Optional[Alignment] = None


class ListBlock(_Frozen):
    """Bulleted block; one run per item, each followed by a line break."""

    kind: Literal["list"] = "list"
    runs: tuple[TextRun, ...] = ()
    alignment: Optional[Alignment] = None


class TableBlock(_Frozen):
    """
    Table grid.

    Each row keeps its own cell count; rows are never padded to a common
    width.
    """

    kind: Literal["table"] = "table"
    rows: tuple[tuple[TextRun, ...], ...] = ()

    @property
    def num_rows(self) -> int:
        return len(self.rows)

    @property
    def num_cols(self) -> int:
        """Width of the widest row."""
        return max((len(row) for row in self.rows), default=0)


class ImageBlock(_Frozen):
    """Placeholder paragraph standing in for a non-literal visual."""

    kind: Literal["image"] = "image"
    runs: tuple[TextRun, ...] = ()
    alignment: Optional[Alignment] = None


class PageBreakBlock(_Frozen):
    """Explicit page break."""

    kind: Literal["page_break"] = "page_break"


BlockElement = Annotated[
    Union[
        ParagraphBlock,
        HeadingBlock,
        ListBlock,
        TableBlock,
        ImageBlock,
        PageBreakBlock,
    ],
    Field(discriminator="kind"),
]
