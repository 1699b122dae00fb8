"""Assembly Stage - Build the block element tree from an ExtractionResult.

Deterministic and total: any validated ExtractionResult, including an empty
one, yields a (possibly empty) ordered list of blocks.

Two strictly ordered phases:
1. Structure phase - one dispatch per StructuralNode, in original order
2. Content phase - one styled paragraph per ContentItem

Structural blocks always precede content blocks. ``position`` metadata is
carried on the inputs but never used to interleave the two channels.
"""

import logging
from typing import Callable, Optional

from pdfword.config import settings
from pdfword.models import (
    BlockElement,
    ContentItem,
    ExtractionResult,
    HeadingBlock,
    ImageBlock,
    ListBlock,
    PageBreakBlock,
    ParagraphBlock,
    StructuralNode,
    StructureType,
    TableBlock,
    TextRun,
)

logger = logging.getLogger(__name__)

BULLET = "•"
IMAGE_PLACEHOLDER_COLOR = "0000FF"
IMAGE_DEFAULT_DESCRIPTION = "Visual content"


def heading_size(level: int) -> int:
    """Heading run size in half-points; level 1 is largest."""
    return 24 - level * 2


def points_to_half_points(points: float) -> int:
    return max(1, round(points * 2))


NodeHandler = Callable[[StructuralNode], list[BlockElement]]


def _heading(node: StructuralNode) -> list[BlockElement]:
    level = node.effective_level
    run = TextRun(text=node.joined_text, bold=True, size=heading_size(level))
    return [HeadingBlock(level=level, runs=(run,), alignment=node.alignment)]


def _list(node: StructuralNode) -> list[BlockElement]:
    runs = tuple(
        TextRun(text=f"{BULLET} {item}", break_after=True) for item in node.items or []
    )
    return [ListBlock(runs=runs, alignment=node.alignment)]


def _table(node: StructuralNode) -> list[BlockElement]:
    if not node.rows:
        return []
    rows = tuple(tuple(TextRun(text=cell) for cell in row) for row in node.rows)
    return [TableBlock(rows=rows)]


def _image(node: StructuralNode) -> list[BlockElement]:
    description = node.image_description or IMAGE_DEFAULT_DESCRIPTION
    run = TextRun(
        text=f"[Image: {description}]",
        color=IMAGE_PLACEHOLDER_COLOR,
        italic=True,
    )
    return [ImageBlock(runs=(run,), alignment=node.alignment)]


def _page_break(node: StructuralNode) -> list[BlockElement]:
    return [PageBreakBlock()]


def _plain_text(node: StructuralNode) -> list[BlockElement]:
    return [ParagraphBlock(runs=(TextRun(text=node.joined_text),), alignment=node.alignment)]


# Paragraph and section_break share the default arm with unknown kinds
STRUCTURE_HANDLERS: dict[Optional[StructureType], NodeHandler] = {
    StructureType.HEADING: _heading,
    StructureType.LIST: _list,
    StructureType.TABLE: _table,
    StructureType.IMAGE: _image,
    StructureType.PAGE_BREAK: _page_break,
    StructureType.PARAGRAPH: _plain_text,
    StructureType.SECTION_BREAK: _plain_text,
}


class DocumentAssembler:
    """Transforms an ExtractionResult into an ordered list of BlockElements."""

    def __init__(self, default_font_size_pt: Optional[float] = None):
        """Initialize assembler.

        Args:
            default_font_size_pt: Size for content runs without a font size
                (default from settings, typically 11pt)
        """
        self.default_size = points_to_half_points(
            default_font_size_pt or settings.default_font_size_pt
        )

    def assemble_node(self, node: StructuralNode) -> list[BlockElement]:
        """Blocks for one structural node (empty for a table without rows)."""
        kind = node.kind
        if kind is None:
            logger.debug("Unknown structure type %r rendered as plain text", node.type)
        handler = STRUCTURE_HANDLERS.get(kind, _plain_text)
        return handler(node)

    def assemble_content(self, item: ContentItem) -> ParagraphBlock:
        """One paragraph with a single styled run for a content item."""
        size = (
            points_to_half_points(item.font_size)
            if item.font_size is not None
            else self.default_size
        )
        return ParagraphBlock(
            runs=(
                TextRun(
                    text=item.text,
                    bold=item.bold,
                    italic=item.italic,
                    color=item.color,
                    size=size,
                ),
            )
        )

    def assemble(self, result: ExtractionResult) -> list[BlockElement]:
        """Build the block tree.

        Args:
            result: Validated extraction result

        Returns:
            Structural blocks followed by content blocks
        """
        blocks: list[BlockElement] = []
        for node in result.structure:
            blocks.extend(self.assemble_node(node))
        for item in result.content:
            blocks.append(self.assemble_content(item))

        logger.info(
            "Assembled %d blocks from %d structural nodes and %d content items",
            len(blocks),
            len(result.structure),
            len(result.content),
        )
        return blocks
