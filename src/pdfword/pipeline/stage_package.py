"""Packaging Stage - Serialize a block element tree into a .docx container.

Uses python-docx for the WordprocessingML document. Output is
byte-deterministic: core property timestamps and zip entry dates are fixed,
so the same blocks always produce the same bytes.
"""

import io
import logging
import re
import zipfile
from datetime import datetime
from typing import Iterable, Optional

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_BREAK
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor

from pdfword.datauri import encode_data_uri
from pdfword.errors import PackagingError
from pdfword.models import (
    DOCX_MEDIA_TYPE,
    Alignment,
    BlockElement,
    HeadingBlock,
    ImageBlock,
    ListBlock,
    PageBreakBlock,
    ParagraphBlock,
    TableBlock,
    TextRun,
)

logger = logging.getLogger(__name__)

FIXED_TIMESTAMP = datetime(2000, 1, 1)
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
TABLE_STYLE = "Table Grid"

ALIGNMENT_MAP = {
    Alignment.LEFT: WD_ALIGN_PARAGRAPH.LEFT,
    Alignment.CENTER: WD_ALIGN_PARAGRAPH.CENTER,
    Alignment.RIGHT: WD_ALIGN_PARAGRAPH.RIGHT,
    Alignment.JUSTIFY: WD_ALIGN_PARAGRAPH.JUSTIFY,
}


# Characters WordprocessingML cannot hold; lxml rejects them outright
XML_INVALID_CHARS = re.compile("[\x00-\x08\x0e-\x1f\ud800-\udfff\ufffe\uffff]")
# Vertical tab and form feed separate lines/pages in extracted PDF text
LINE_SEPARATOR_CHARS = re.compile("[\x0b\x0c]")


def clean_text(text: str) -> str:
    """Make extracted text safe to store in a document part."""
    return XML_INVALID_CHARS.sub("", LINE_SEPARATOR_CHARS.sub("\n", text))


def _add_run(paragraph, run: TextRun) -> None:
    docx_run = paragraph.add_run(clean_text(run.text))
    if run.bold is not None:
        docx_run.bold = run.bold
    if run.italic is not None:
        docx_run.italic = run.italic
    if run.color:
        docx_run.font.color.rgb = RGBColor.from_string(run.color)
    if run.size:
        docx_run.font.size = Pt(run.size / 2)
    if run.break_after:
        docx_run.add_break()


def _fill_paragraph(paragraph, runs: Iterable[TextRun], alignment: Optional[Alignment]) -> None:
    if alignment is not None:
        paragraph.alignment = ALIGNMENT_MAP[alignment]
    for run in runs:
        _add_run(paragraph, run)


def _add_table(doc, block: TableBlock) -> None:
    """Add a table whose rows keep their own cell counts.

    The grid is as wide as the widest row; shorter rows drop their surplus
    cells and declare the skipped grid columns with ``w:gridAfter``.
    """
    num_cols = max(block.num_cols, 1)
    table = doc.add_table(rows=block.num_rows, cols=num_cols)
    table.style = TABLE_STYLE

    for r, row in enumerate(block.rows):
        for c, run in enumerate(row):
            _add_run(table.cell(r, c).paragraphs[0], run)

    for r, row in enumerate(block.rows):
        # A row needs at least one cell to be readable
        keep = max(len(row), 1)
        if keep == num_cols:
            continue
        tr = table.rows[r]._tr
        for tc in tr.tc_lst[keep:]:
            tr.remove(tc)
        grid_after = OxmlElement("w:gridAfter")
        grid_after.set(qn("w:val"), str(num_cols - keep))
        tr.get_or_add_trPr().append(grid_after)


def _normalize_zip(blob: bytes) -> bytes:
    """Rewrite the container with fixed entry dates, keeping entry order."""
    source = zipfile.ZipFile(io.BytesIO(blob))
    out = io.BytesIO()
    with zipfile.ZipFile(out, "w", zipfile.ZIP_DEFLATED) as target:
        for info in source.infolist():
            entry = zipfile.ZipInfo(info.filename, date_time=ZIP_EPOCH)
            entry.compress_type = zipfile.ZIP_DEFLATED
            entry.external_attr = 0o600 << 16
            target.writestr(entry, source.read(info.filename))
    return out.getvalue()


class Packager:
    """Serializes block elements into a Word document."""

    def build_document(self, blocks: Iterable[BlockElement]):
        """Build the python-docx Document for the given blocks."""
        doc = Document()
        props = doc.core_properties
        props.created = FIXED_TIMESTAMP
        props.modified = FIXED_TIMESTAMP
        props.last_modified_by = "pdfword"
        props.revision = 1

        for block in blocks:
            if isinstance(block, HeadingBlock):
                paragraph = doc.add_heading(level=block.level)
                _fill_paragraph(paragraph, block.runs, block.alignment)
            elif isinstance(block, (ParagraphBlock, ListBlock, ImageBlock)):
                _fill_paragraph(doc.add_paragraph(), block.runs, block.alignment)
            elif isinstance(block, TableBlock):
                if block.rows:
                    _add_table(doc, block)
            elif isinstance(block, PageBreakBlock):
                doc.add_paragraph().add_run().add_break(WD_BREAK.PAGE)
            else:
                raise PackagingError(f"Unsupported block element: {type(block).__name__}")
        return doc

    def pack(self, blocks: Iterable[BlockElement]) -> bytes:
        """Serialize blocks into .docx bytes.

        Args:
            blocks: Ordered block elements (may be empty)

        Returns:
            Bytes of the .docx container
        """
        blocks = list(blocks)
        try:
            doc = self.build_document(blocks)
            buffer = io.BytesIO()
            doc.save(buffer)
            data = _normalize_zip(buffer.getvalue())
        except PackagingError:
            raise
        except Exception as exc:
            raise PackagingError(f"Failed to serialize document: {exc}") from exc

        logger.info("Packaged %d blocks into %d bytes", len(blocks), len(data))
        return data

    def pack_to_uri(self, blocks: Iterable[BlockElement]) -> str:
        """Serialize blocks and embed them in a ``data:`` URI."""
        return encode_data_uri(self.pack(blocks), DOCX_MEDIA_TYPE)
