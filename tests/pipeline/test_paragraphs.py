"""
Tests for pipeline/paragraphs.py - Paragraph segmentation.
"""
import pytest

from data.schemas import CleanVerse, ParagraphStyle, ParagraphType
from pipeline.paragraphs import (
    ParagraphSegmenter,
    VerseEntry,
    indent_level_for,
    paragraph_id,
    paragraph_type_for,
)


def entries(chapter, numbers, styles=None):
    styles = styles or {}
    return [
        VerseEntry(
            verse=CleanVerse(number=n, text=f"Verse {chapter}:{n}.", reference=f"JON {chapter}:{n}"),
            paragraph_style=styles.get(n),
        )
        for n in numbers
    ]


@pytest.fixture
def segmenter() -> ParagraphSegmenter:
    return ParagraphSegmenter()


class TestIndentLevels:
    """Tests for poetry indentation."""

    @pytest.mark.parametrize("style,level", [
        (ParagraphStyle.Q, 1),
        (ParagraphStyle.Q1, 1),
        (ParagraphStyle.Q2, 2),
        (ParagraphStyle.Q3, 3),
        (ParagraphStyle.Q4, 4),
        (ParagraphStyle.P, 0),
        (ParagraphStyle.M, 0),
        (ParagraphStyle.MI, 0),
        (ParagraphStyle.PC, 0),
        (ParagraphStyle.PR, 0),
        (ParagraphStyle.CLS, 0),
    ])
    def test_indent_level(self, style, level):
        assert indent_level_for(style) == level

    def test_paragraph_type(self):
        assert paragraph_type_for(ParagraphStyle.Q2) == ParagraphType.QUOTE
        assert paragraph_type_for(ParagraphStyle.P) == ParagraphType.PARAGRAPH

    def test_paragraph_id(self):
        assert paragraph_id(2, 3) == "chapter-2-paragraph-3"


class TestParagraphSegmenter:
    """Tests for ParagraphSegmenter."""

    def test_implicit_first_paragraph(self, segmenter):
        paragraphs = segmenter.segment(1, entries(1, range(1, 6)))

        assert len(paragraphs) == 1
        assert paragraphs[0].style == ParagraphStyle.P
        assert paragraphs[0].indent_level == 0
        assert (paragraphs[0].start_verse, paragraphs[0].end_verse) == (1, 5)

    def test_markers_split_paragraphs(self, segmenter):
        styles = {1: ParagraphStyle.P, 4: ParagraphStyle.Q1, 6: ParagraphStyle.Q2}
        paragraphs = segmenter.segment(2, entries(2, range(1, 9), styles))

        assert [(p.start_verse, p.end_verse) for p in paragraphs] == [(1, 3), (4, 5), (6, 8)]
        assert [p.style for p in paragraphs] == [ParagraphStyle.P, ParagraphStyle.Q1, ParagraphStyle.Q2]
        assert [p.id for p in paragraphs] == [
            "chapter-2-paragraph-1",
            "chapter-2-paragraph-2",
            "chapter-2-paragraph-3",
        ]

    def test_q2_paragraph_indent(self, segmenter):
        styles = {1: ParagraphStyle.Q2}
        paragraphs = segmenter.segment(1, entries(1, [1, 2, 3], styles))

        assert len(paragraphs) == 1
        assert paragraphs[0].indent_level == 2
        assert paragraphs[0].type == ParagraphType.QUOTE

    def test_p_paragraph_indent(self, segmenter):
        paragraphs = segmenter.segment(1, entries(1, [1, 2], {1: ParagraphStyle.P}))

        assert paragraphs[0].indent_level == 0
        assert paragraphs[0].type == ParagraphType.PARAGRAPH

    def test_coverage(self, segmenter):
        numbers = [1, 2, 3, 5, 6, 9, 10]
        styles = {3: ParagraphStyle.M, 9: ParagraphStyle.PC}
        paragraphs = segmenter.segment(1, entries(1, numbers, styles))

        covered = [n for p in paragraphs for n in p.verse_numbers]
        assert covered == numbers

    def test_verses_carry_paragraph_id(self, segmenter):
        paragraphs = segmenter.segment(1, entries(1, [1, 2, 3], {2: ParagraphStyle.Q1}))

        for paragraph in paragraphs:
            assert all(v.paragraph_id == paragraph.id for v in paragraph.verses)

    def test_combined_text_and_counts(self, segmenter):
        paragraphs = segmenter.segment(1, entries(1, [1, 2]))

        assert paragraphs[0].verse_count == 2
        assert paragraphs[0].combined_text == "Verse 1:1. Verse 1:2."
        assert paragraphs[0].chapter_number == 1

    def test_initial_style_from_front_matter(self, segmenter):
        paragraphs = segmenter.segment(1, entries(1, [1, 2]), initial_style=ParagraphStyle.Q1)

        assert paragraphs[0].style == ParagraphStyle.Q1
        assert paragraphs[0].indent_level == 1

    def test_default_style_configurable(self):
        segmenter = ParagraphSegmenter(default_style=ParagraphStyle.M)

        assert segmenter.segment(1, entries(1, [1]))[0].style == ParagraphStyle.M

    def test_empty_chapter(self, segmenter):
        assert segmenter.segment(1, []) == []

    def test_marker_on_first_verse_opens_single_paragraph(self, segmenter):
        paragraphs = segmenter.segment(1, entries(1, [1, 2], {1: ParagraphStyle.Q3}))

        assert len(paragraphs) == 1
        assert paragraphs[0].style == ParagraphStyle.Q3
