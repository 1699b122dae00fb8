"""Tests for the packaging stage."""

import io
import zipfile
from unittest.mock import patch

import docx
import pytest
from docx.shared import Pt, RGBColor

from pdfword.datauri import decode_data_uri
from pdfword.errors import PackagingError
from pdfword.models import (
    DOCX_MEDIA_TYPE,
    ExtractionResult,
    HeadingBlock,
    ImageBlock,
    ListBlock,
    PageBreakBlock,
    ParagraphBlock,
    TableBlock,
    TextRun,
)
from pdfword.pipeline.stage_assemble import DocumentAssembler
from pdfword.pipeline.stage_package import Packager, clean_text

W_NS = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"


@pytest.fixture
def packager():
    return Packager()


def _open(data: bytes):
    return docx.Document(io.BytesIO(data))


class TestEmptyDocument:
    """Tests for packaging an empty block list."""

    def test_empty_is_valid_container(self, packager):
        data = packager.pack([])

        assert zipfile.is_zipfile(io.BytesIO(data))
        names = zipfile.ZipFile(io.BytesIO(data)).namelist()
        assert "[Content_Types].xml" in names
        assert "word/document.xml" in names

        doc = _open(data)
        assert all(p.text == "" for p in doc.paragraphs)
        assert doc.tables == []


class TestBlockRendering:
    """Tests for each block kind."""

    def test_heading_style_and_run(self, packager):
        block = HeadingBlock(level=2, runs=(TextRun(text="Title", bold=True, size=20),))
        doc = _open(packager.pack([block]))

        paragraph = doc.paragraphs[-1]
        assert paragraph.style.name == "Heading 2"
        assert paragraph.text == "Title"
        assert paragraph.runs[0].bold is True
        assert paragraph.runs[0].font.size == Pt(10)

    def test_paragraph_styling(self, packager):
        run = TextRun(text="Body", bold=True, italic=True, color="112233", size=28)
        doc = _open(packager.pack([ParagraphBlock(runs=(run,))]))

        docx_run = doc.paragraphs[-1].runs[0]
        assert docx_run.text == "Body"
        assert docx_run.bold is True
        assert docx_run.italic is True
        assert docx_run.font.color.rgb == RGBColor(0x11, 0x22, 0x33)
        assert docx_run.font.size == Pt(14)

    def test_list_line_breaks(self, packager):
        runs = (
            TextRun(text="• one", break_after=True),
            TextRun(text="• two", break_after=True),
        )
        doc = _open(packager.pack([ListBlock(runs=runs)]))

        paragraph = doc.paragraphs[-1]
        assert [r.text.strip() for r in paragraph.runs] == ["• one", "• two"]
        breaks = paragraph._p.findall(f".//{W_NS}br")
        assert len(breaks) == 2

    def test_image_placeholder(self, packager):
        run = TextRun(text="[Image: Logo]", italic=True, color="0000FF")
        doc = _open(packager.pack([ImageBlock(runs=(run,))]))

        docx_run = doc.paragraphs[-1].runs[0]
        assert docx_run.italic is True
        assert docx_run.font.color.rgb == RGBColor(0x00, 0x00, 0xFF)

    def test_page_break(self, packager):
        doc = _open(packager.pack([PageBreakBlock()]))
        breaks = doc.element.body.findall(f".//{W_NS}br")
        assert [b.get(f"{W_NS}type") for b in breaks] == ["page"]


class TestTables:
    """Tests for table grid fidelity."""

    def test_ragged_rows(self, packager):
        block = TableBlock(
            rows=(
                (TextRun(text="a"), TextRun(text="b")),
                (TextRun(text="c"),),
            )
        )
        doc = _open(packager.pack([block]))

        (table,) = doc.tables
        rows = table._tbl.tr_lst
        assert len(rows) == 2
        assert [len(tr.tc_lst) for tr in rows] == [2, 1]
        assert rows[1].tc_lst[0].xpath("string(.)") == "c"
        assert rows[1].find(f"{W_NS}trPr/{W_NS}gridAfter").get(f"{W_NS}val") == "1"

    def test_uniform_rows(self, packager):
        block = TableBlock(rows=((TextRun(text="1"), TextRun(text="2")),) * 3)
        (table,) = _open(packager.pack([block])).tables
        assert len(table.rows) == 3
        assert table.cell(2, 1).text == "2"

    def test_empty_table_skipped(self, packager):
        assert _open(packager.pack([TableBlock()])).tables == []


class TestPackager:
    """Tests for ordering, determinism and error wrapping."""

    def test_block_order_preserved(self, packager, sample_result):
        blocks = DocumentAssembler().assemble(sample_result)
        doc = _open(packager.pack(blocks))

        texts = [p.text for p in doc.paragraphs if p.text.strip()]
        assert texts[0] == "Quarterly Report"
        assert texts[-2:] == ["Body text", "Plain"]
        assert texts.index("[Image: A bar chart]") < texts.index("Closing words")

    def test_deterministic_bytes(self, packager, sample_result):
        blocks = DocumentAssembler().assemble(sample_result)
        assert packager.pack(blocks) == packager.pack(blocks)

    def test_pack_to_uri(self, packager):
        media_type, data = decode_data_uri(packager.pack_to_uri([]))
        assert media_type == DOCX_MEDIA_TYPE
        assert zipfile.is_zipfile(io.BytesIO(data))

    def test_library_failure_wrapped(self, packager):
        with patch("pdfword.pipeline.stage_package.Document", side_effect=KeyError("boom")):
            with pytest.raises(PackagingError):
                packager.pack([])


class TestControlCharacters:
    """Tests for extracted text carrying XML-invalid characters."""

    def test_form_feed_becomes_line_break(self, packager):
        result = ExtractionResult(content=[{"text": "Page 1\x0cPage 2"}])
        doc = _open(packager.pack(DocumentAssembler().assemble(result)))

        assert doc.paragraphs[-1].text == "Page 1\nPage 2"

    @pytest.mark.parametrize("text", ["a\x00b", "a\x0bb", "a\x1bb"])
    def test_control_characters_do_not_fail(self, packager, text):
        block = ParagraphBlock(runs=(TextRun(text=text),))
        doc = _open(packager.pack([block]))

        assert doc.paragraphs[-1].text.replace("\n", "") == "ab"

    def test_table_cells_and_headings_cleaned(self, packager):
        blocks = [
            HeadingBlock(level=1, runs=(TextRun(text="Title\x00"),)),
            TableBlock(rows=((TextRun(text="x\x07"),),)),
        ]
        doc = _open(packager.pack(blocks))

        assert doc.paragraphs[-1].text == "Title"
        assert doc.tables[0].cell(0, 0).text == "x"

    def test_clean_text(self):
        assert clean_text("tab\tkept\r\n") == "tab\tkept\r\n"
        assert clean_text("a\x0cb\x0bc\x01") == "a\nb\nc"
