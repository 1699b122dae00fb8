"""Fallback Stage - Non-AI conversion through LibreOffice.

Used when the caller opts out of AI extraction (``no_ocr``) or when every
model attempt failed. Runs ``soffice --headless --convert-to docx`` on the
source and returns the produced document as a ``data:`` URI.
"""

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from pdfword.config import settings
from pdfword.datauri import encode_data_uri, read_source
from pdfword.errors import FallbackConversionError, SourceError
from pdfword.models import DOCX_MEDIA_TYPE, ConversionInput, ConversionOutput

logger = logging.getLogger(__name__)


class FallbackConverter(Protocol):
    """Interface of the non-AI converter."""

    def convert_without_ai(self, request: ConversionInput) -> ConversionOutput: ...


class LibreOfficeConverter:
    """Converts PDFs with a headless LibreOffice install."""

    def __init__(self, binary: Optional[str] = None, timeout: Optional[float] = None):
        self.binary = binary or settings.soffice_binary
        self.timeout = timeout or settings.fallback_timeout_seconds

    def _command(self, pdf_path: Path, out_dir: Path) -> list[str]:
        return [
            self.binary,
            "--headless",
            # Import into Writer so the Word exporter applies
            "--infilter=writer_pdf_import",
            "--convert-to",
            "docx:MS Word 2007 XML",
            "--outdir",
            str(out_dir),
            str(pdf_path),
        ]

    def convert_without_ai(self, request: ConversionInput) -> ConversionOutput:
        """Convert the request's source without any model call.

        Raises:
            FallbackConversionError: binary missing, timeout, non-zero exit
                or no output produced
        """
        try:
            data = read_source(request.source_uri)
        except SourceError as exc:
            raise FallbackConversionError(str(exc)) from exc

        with tempfile.TemporaryDirectory(prefix="pdfword-") as tmp:
            work_dir = Path(tmp)
            pdf_path = work_dir / "input.pdf"
            out_dir = work_dir / "out"
            out_dir.mkdir()
            pdf_path.write_bytes(data)

            logger.info("Converting without AI via %s", self.binary)
            try:
                result = subprocess.run(
                    self._command(pdf_path, out_dir),
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                )
            except FileNotFoundError as exc:
                raise FallbackConversionError(
                    f"LibreOffice binary not found: {self.binary}"
                ) from exc
            except subprocess.TimeoutExpired as exc:
                raise FallbackConversionError(
                    f"LibreOffice conversion timed out after {self.timeout:g}s"
                ) from exc

            if result.returncode != 0:
                detail = (result.stderr or result.stdout or "").strip()
                raise FallbackConversionError(
                    f"LibreOffice exited with code {result.returncode}: {detail}"
                )

            output_path = out_dir / "input.docx"
            if not output_path.exists():
                raise FallbackConversionError("LibreOffice produced no output document")

            document = output_path.read_bytes()

        logger.info("Fallback converter produced %d bytes", len(document))
        return ConversionOutput(document_uri=encode_data_uri(document, DOCX_MEDIA_TYPE))
