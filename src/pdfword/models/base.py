"""Base models and common types for the PDF to Word pipeline."""

from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StructureType(str, Enum):
    """Kinds of structural nodes a model may report."""

    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    TABLE = "table"
    IMAGE = "image"
    SECTION_BREAK = "section_break"
    PAGE_BREAK = "page_break"


class Alignment(str, Enum):
    """Paragraph alignment reported by the model."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"


class ConversionMode(str, Enum):
    """How a conversion request should be served."""

    OCR = "ocr"  # AI extraction, non-AI converter as fallback
    NO_OCR = "no_ocr"  # non-AI converter only


class ConversionState(str, Enum):
    """States of a single conversion run."""

    INIT = "init"
    MODE_SELECT = "mode_select"
    NO_OCR_PATH = "no_ocr_path"
    AI_PATH = "ai_path"
    DONE = "done"
    FAILED = "failed"


class RotationStrategy(str, Enum):
    """Time bucket used to rotate between credentials."""

    HOURLY = "hourly"
    MINUTE = "minute"

    @property
    def interval_seconds(self) -> int:
        """Length of one rotation bucket."""
        return 60 if self is RotationStrategy.MINUTE else 3600


class WireModel(BaseModel):
    """Base for models exchanged as camelCase JSON.

    Python code uses snake_case attributes; serialized payloads use the
    camelCase names (``fontSize``, ``imageDescription``, ``sourceUri``).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> dict:
        """Dump to a JSON-compatible dict using wire names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
