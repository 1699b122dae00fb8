"""Models for the PDF to Word pipeline.

This module defines the Pydantic models that represent data flowing through
the pipeline stages:

- Semantic schema: what a model attempt must return (``ExtractionResult``)
- Block elements: the rendering-ready tree built by the assembler
- Conversion I/O: the request/response pair of a conversion
- Key records: credentials served by the key store

Model Hierarchy:
- ExtractionResult → ContentItem / StructuralNode → Position
- BlockElement → TextRun
"""

from .base import (
    Alignment,
    ConversionMode,
    ConversionState,
    RotationStrategy,
    StructureType,
    WireModel,
)
from .blocks import (
    DEFAULT_RUN_SIZE,
    BlockElement,
    HeadingBlock,
    ImageBlock,
    ListBlock,
    PageBreakBlock,
    ParagraphBlock,
    TableBlock,
    TextRun,
)
from .conversion import (
    DOCX_MEDIA_TYPE,
    PDF_MEDIA_TYPE,
    ConversionInput,
    ConversionOutput,
)
from .keys import (
    ApiKeyRecord,
    RotationConfig,
    mask_key,
)
from .semantic import (
    MAX_HEADING_LEVEL,
    MIN_HEADING_LEVEL,
    ContentItem,
    ExtractionResult,
    Position,
    StructuralNode,
)

__all__ = [
    # Base types
    "Alignment",
    "ConversionMode",
    "ConversionState",
    "RotationStrategy",
    "StructureType",
    "WireModel",
    # Semantic schema
    "ContentItem",
    "ExtractionResult",
    "Position",
    "StructuralNode",
    "MIN_HEADING_LEVEL",
    "MAX_HEADING_LEVEL",
    # Blocks
    "BlockElement",
    "DEFAULT_RUN_SIZE",
    "HeadingBlock",
    "ImageBlock",
    "ListBlock",
    "PageBreakBlock",
    "ParagraphBlock",
    "TableBlock",
    "TextRun",
    # Conversion
    "ConversionInput",
    "ConversionOutput",
    "DOCX_MEDIA_TYPE",
    "PDF_MEDIA_TYPE",
    # Keys
    "ApiKeyRecord",
    "RotationConfig",
    "mask_key",
]
