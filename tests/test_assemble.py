"""Tests for the assembly stage."""

import pytest

from pdfword.models import (
    ContentItem,
    ExtractionResult,
    HeadingBlock,
    ImageBlock,
    ListBlock,
    PageBreakBlock,
    ParagraphBlock,
    StructuralNode,
    TableBlock,
)
from pdfword.pipeline.stage_assemble import DocumentAssembler, heading_size


@pytest.fixture
def assembler():
    return DocumentAssembler(default_font_size_pt=11)


def _node(**kwargs) -> StructuralNode:
    return StructuralNode.model_validate(kwargs)


class TestAssembleOrdering:
    """Tests for block count and ordering."""

    def test_empty_result(self, assembler):
        assert assembler.assemble(ExtractionResult()) == []

    def test_structure_precedes_content(self, assembler, sample_result):
        blocks = assembler.assemble(sample_result)

        # Six nodes, each producing one block, then two content items
        assert len(blocks) == len(sample_result.structure) + len(sample_result.content)
        assert [type(b) for b in blocks[:6]] == [
            HeadingBlock,
            ListBlock,
            TableBlock,
            ImageBlock,
            PageBreakBlock,
            ParagraphBlock,
        ]
        assert [b.runs[0].text for b in blocks[6:]] == ["Body text", "Plain"]

    def test_position_does_not_reorder(self, assembler):
        """Content on an earlier page still comes after structure."""
        result = ExtractionResult.model_validate(
            {
                "content": [{"text": "first on page", "position": {"page": 1}}],
                "structure": [
                    {"type": "paragraph", "items": ["later"], "position": {"page": 9}}
                ],
            }
        )
        blocks = assembler.assemble(result)
        assert blocks[0].runs[0].text == "later"
        assert blocks[1].runs[0].text == "first on page"

    def test_empty_table_contributes_nothing(self, assembler):
        result = ExtractionResult(
            structure=[_node(type="table", rows=[]), _node(type="table")],
            content=[ContentItem(text="x")],
        )
        blocks = assembler.assemble(result)
        assert len(blocks) == 1
        assert isinstance(blocks[0], ParagraphBlock)


class TestHeadings:
    """Tests for heading blocks."""

    @pytest.mark.parametrize("level,expected", [(0, 1), (7, 1), (None, 1), (3, 3)])
    def test_level_clamping(self, assembler, level, expected):
        (block,) = assembler.assemble_node(_node(type="heading", level=level, items=["T"]))
        assert block.level == expected

    def test_heading_run(self, assembler):
        (block,) = assembler.assemble_node(
            _node(type="heading", level=2, items=["Quarterly", "Report"])
        )
        (run,) = block.runs
        assert run.text == "Quarterly Report"
        assert run.bold is True
        assert run.size == heading_size(2)

    def test_deeper_levels_are_smaller(self):
        sizes = [heading_size(level) for level in range(1, 7)]
        assert sizes == sorted(sizes, reverse=True)


class TestLists:
    """Tests for list blocks."""

    def test_bullets_and_breaks(self, assembler):
        (block,) = assembler.assemble_node(_node(type="list", items=["one", "two"]))
        assert [r.text for r in block.runs] == ["• one", "• two"]
        assert all(r.break_after for r in block.runs)

    def test_list_without_items(self, assembler):
        (block,) = assembler.assemble_node(_node(type="list"))
        assert block.runs == ()


class TestTables:
    """Tests for table blocks."""

    def test_ragged_rows_preserved(self, assembler):
        (block,) = assembler.assemble_node(_node(type="table", rows=[["a", "b"], ["c"]]))
        assert block.num_rows == 2
        assert [len(row) for row in block.rows] == [2, 1]
        assert block.rows[1][0].text == "c"
        assert block.rows[0][1].bold is None


class TestImagesAndBreaks:
    """Tests for image placeholders and breaks."""

    def test_image_with_description(self, assembler):
        (block,) = assembler.assemble_node(_node(type="image", imageDescription="Logo"))
        (run,) = block.runs
        assert run.text == "[Image: Logo]"
        assert run.italic is True
        assert run.color == "0000FF"

    def test_image_without_description(self, assembler):
        (block,) = assembler.assemble_node(_node(type="image"))
        assert block.runs[0].text == "[Image: Visual content]"

    def test_page_break(self, assembler):
        (block,) = assembler.assemble_node(_node(type="page_break"))
        assert isinstance(block, PageBreakBlock)


class TestDefaultArm:
    """Tests for paragraph, section_break and unknown kinds."""

    @pytest.mark.parametrize("kind", ["paragraph", "section_break", "footer", "sidebar"])
    def test_plain_text(self, assembler, kind):
        (block,) = assembler.assemble_node(_node(type=kind, items=["a", "b"]))
        assert isinstance(block, ParagraphBlock)
        assert block.runs[0].text == "a b"

    def test_unknown_without_items(self, assembler):
        (block,) = assembler.assemble_node(_node(type="mystery"))
        assert block.runs[0].text == ""


class TestContentItems:
    """Tests for content-item paragraphs."""

    def test_styling_carried(self, assembler):
        block = assembler.assemble_content(
            ContentItem(text="x", bold=True, italic=False, color="#abcdef", font_size=14)
        )
        (run,) = block.runs
        assert run.bold is True
        assert run.italic is False
        assert run.color == "ABCDEF"
        assert run.size == 28

    def test_default_size_is_11pt(self, assembler):
        block = assembler.assemble_content(ContentItem(text="x"))
        assert block.runs[0].size == 22

    def test_fractional_points(self, assembler):
        block = assembler.assemble_content(ContentItem(text="x", font_size=10.5))
        assert block.runs[0].size == 21

    def test_inputs_not_mutated(self, assembler, sample_result):
        before = sample_result.model_dump()
        assembler.assemble(sample_result)
        assert sample_result.model_dump() == before
