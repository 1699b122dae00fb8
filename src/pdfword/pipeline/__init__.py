"""Pipeline stages for PDF to Word conversion.

Stages:
1. stage_extract - AI extraction with ordered model fallback
2. stage_assemble - ExtractionResult to block element tree (deterministic)
3. stage_package - block element tree to .docx bytes (deterministic)
4. stage_fallback - non-AI conversion through LibreOffice

``conversion`` composes the stages and owns the fallback policy.
"""

from .conversion import ConversionPipeline, ConversionRun, build_pipeline
from .stage_assemble import DocumentAssembler
from .stage_extract import (
    ExtractionModel,
    ExtractionOrchestrator,
    LangChainExtractionModel,
    build_orchestrator,
)
from .stage_fallback import FallbackConverter, LibreOfficeConverter
from .stage_package import Packager

__all__ = [
    # Extraction
    "ExtractionModel",
    "ExtractionOrchestrator",
    "LangChainExtractionModel",
    "build_orchestrator",
    # Assembly
    "DocumentAssembler",
    # Packaging
    "Packager",
    # Fallback
    "FallbackConverter",
    "LibreOfficeConverter",
    # Composition
    "ConversionPipeline",
    "ConversionRun",
    "build_pipeline",
]
