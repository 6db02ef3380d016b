"""
Tests for pipeline/sections.py - Translation section extraction.
"""
import pytest

from pipeline.sections import MarkedChapter, MarkedVerse, SectionExtractor


def chapter(number, verse_numbers, breaks=()):
    breaks = list(breaks)
    return MarkedChapter(
        number=number,
        verses=tuple(MarkedVerse(n, breaks.count(n)) for n in verse_numbers),
    )


def spans(sections):
    return [
        ((s.start_chapter, s.start_verse), (s.end_chapter, s.end_verse) if not s.is_open_ended else None)
        for s in sections
    ]


@pytest.fixture
def extractor() -> SectionExtractor:
    return SectionExtractor()


class TestSectionExtractor:
    """Tests for SectionExtractor."""

    def test_single_marker_mid_chapter(self, extractor):
        """Verses 1:1-1:7 with a marker at 1:4 give two sections."""
        sections = extractor.extract([chapter(1, range(1, 8), breaks=[4])], "JON")

        assert len(sections) == 2
        first, second = sections
        assert first.id == "section-1"
        assert first.title == "Section 1"
        assert (first.start_reference, first.end_reference) == ("JON 1:1", "JON 1:3")
        assert second.id == "section-2"
        assert second.start_reference == "JON 1:4"
        assert second.is_open_ended
        assert second.end_reference is None

    def test_marker_on_book_start_is_first_section(self, extractor):
        sections = extractor.extract([chapter(1, range(1, 5), breaks=[1, 3])], "JON")

        assert spans(sections) == [((1, 1), (1, 2)), ((1, 3), None)]

    def test_no_markers_single_open_section(self, extractor):
        sections = extractor.extract([chapter(1, range(1, 4)), chapter(2, range(1, 4))], "JON")

        assert spans(sections) == [((1, 1), None)]

    def test_cross_chapter_close(self, extractor):
        """A marker on a chapter's first verse closes the previous section at the prior chapter's last verse."""
        chapters = [chapter(1, range(1, 17), breaks=[1]), chapter(2, range(1, 11), breaks=[1])]

        sections = extractor.extract(chapters, "JON")

        assert spans(sections) == [((1, 1), (1, 16)), ((2, 1), None)]
        assert sections[0].end_reference == "JON 1:16"

    def test_section_spanning_chapters(self, extractor):
        chapters = [
            chapter(1, range(1, 11), breaks=[6]),
            chapter(2, range(1, 11)),
            chapter(3, range(1, 11), breaks=[4]),
        ]

        sections = extractor.extract(chapters, "JON")

        assert spans(sections) == [((1, 1), (1, 5)), ((1, 6), (3, 3)), ((3, 4), None)]

    def test_close_uses_previous_emitted_verse(self, extractor):
        """With a gap in verse numbers the previous section ends at the verse actually present."""
        sections = extractor.extract([chapter(1, [1, 2, 3, 6, 7], breaks=[6])], "JON")

        assert spans(sections) == [((1, 1), (1, 3)), ((1, 6), None)]

    def test_double_marker_on_same_verse_is_zero_length(self, extractor):
        """The second marker closes the section the first opened, leaving it empty."""
        sections = extractor.extract([chapter(1, range(1, 8), breaks=[4, 4])], "JON")

        assert len(sections) == 3
        assert spans(sections) == [((1, 1), (1, 3)), ((1, 4), (1, 3)), ((1, 4), None)]
        assert sections[1].is_empty
        assert not sections[0].is_empty
        assert not sections[2].is_empty

    def test_ordering_invariant(self, extractor):
        chapters = [
            chapter(1, range(1, 17), breaks=[1, 4, 11]),
            chapter(2, range(1, 11), breaks=[1, 7]),
        ]

        sections = extractor.extract(chapters, "JON")

        assert all(not s.is_open_ended for s in sections[:-1])
        assert sections[-1].is_open_ended
        starts = [(s.start_chapter, s.start_verse) for s in sections]
        assert starts == sorted(starts)
        assert [s.id for s in sections] == [f"section-{n}" for n in range(1, 6)]

    def test_custom_title_template(self):
        sections = SectionExtractor("Part {n}").extract([chapter(1, [1, 2], breaks=[2])], "JON")

        assert [s.title for s in sections] == ["Part 1", "Part 2"]

    def test_empty_book(self, extractor):
        assert extractor.extract([], "JON") == []
        assert extractor.extract([chapter(1, [])], "JON") == []

    def test_counter_is_local_to_each_call(self, extractor):
        chapters = [chapter(1, range(1, 5), breaks=[3])]

        first = extractor.extract(chapters, "JON")
        second = extractor.extract(chapters, "JON")

        assert [s.id for s in first] == [s.id for s in second] == ["section-1", "section-2"]
