"""Conversion pipeline - top-level policy composing all stages.

State machine, run exactly once per request:

    INIT -> MODE_SELECT -> NO_OCR_PATH -> DONE | FAILED
                        -> AI_PATH     -> DONE | FAILED

``no_ocr`` goes straight to the fallback converter. The AI path extracts,
assembles and packages; when extraction is exhausted it gives the fallback
converter a second chance before failing with ``ConversionFailed``.
"""

import logging
from typing import Optional

from pdfword.errors import ConversionFailed, ExtractionFailed
from pdfword.models import (
    ConversionInput,
    ConversionMode,
    ConversionOutput,
    ConversionState,
)
from pdfword.storage.key_store import KeyRotationProvider

from .stage_assemble import DocumentAssembler
from .stage_extract import ExtractionOrchestrator, build_orchestrator
from .stage_fallback import FallbackConverter, LibreOfficeConverter
from .stage_package import Packager

logger = logging.getLogger(__name__)


class ConversionRun:
    """Bookkeeping for one request; records the visited states."""

    def __init__(self) -> None:
        self.states: list[ConversionState] = [ConversionState.INIT]

    @property
    def state(self) -> ConversionState:
        return self.states[-1]

    def advance(self, state: ConversionState) -> None:
        if state in self.states:
            raise RuntimeError(f"Conversion state {state.value} already visited")
        logger.debug("Conversion %s -> %s", self.state.value, state.value)
        self.states.append(state)


class ConversionPipeline:
    """Selects AI vs. non-AI mode and drives the stages."""

    def __init__(
        self,
        orchestrator: ExtractionOrchestrator,
        assembler: Optional[DocumentAssembler] = None,
        packager: Optional[Packager] = None,
        fallback: Optional[FallbackConverter] = None,
    ):
        self.orchestrator = orchestrator
        self.assembler = assembler or DocumentAssembler()
        self.packager = packager or Packager()
        self.fallback = fallback or LibreOfficeConverter()

    def convert(
        self, request: ConversionInput, run: Optional[ConversionRun] = None
    ) -> ConversionOutput:
        """Convert one document.

        Args:
            request: Source reference and conversion mode
            run: Optional run record to observe the visited states

        Returns:
            ConversionOutput with the .docx embedded as a data URI

        Raises:
            ConversionFailed: AI extraction and the fallback converter failed
        """
        run = run or ConversionRun()
        run.advance(ConversionState.MODE_SELECT)

        if request.mode == ConversionMode.NO_OCR:
            run.advance(ConversionState.NO_OCR_PATH)
            try:
                output = self.fallback.convert_without_ai(request)
            except Exception:
                run.advance(ConversionState.FAILED)
                raise
            run.advance(ConversionState.DONE)
            return output

        run.advance(ConversionState.AI_PATH)
        try:
            result = self.orchestrator.extract(request.source_uri)
        except ExtractionFailed as exc:
            logger.warning("AI extraction failed, using fallback converter: %s", exc)
            try:
                output = self.fallback.convert_without_ai(request)
            except Exception as fallback_exc:
                run.advance(ConversionState.FAILED)
                logger.error("Fallback converter failed: %s", fallback_exc)
                raise ConversionFailed(exc, fallback_exc) from exc
            run.advance(ConversionState.DONE)
            return output

        blocks = self.assembler.assemble(result)
        try:
            document_uri = self.packager.pack_to_uri(blocks)
        except Exception:
            run.advance(ConversionState.FAILED)
            raise
        run.advance(ConversionState.DONE)
        return ConversionOutput(document_uri=document_uri)


def build_pipeline(
    key_provider: Optional[KeyRotationProvider] = None,
) -> ConversionPipeline:
    """Pipeline wired from settings."""
    return ConversionPipeline(orchestrator=build_orchestrator(key_provider))
