"""
Tests for data/schemas.py - Scripture model.
"""
import dataclasses
import json

import pytest

from data.schemas import (
    Chapter,
    CleanVerse,
    Paragraph,
    ParagraphStyle,
    ParagraphType,
    Scripture,
    ScriptureMetadata,
    ScriptureReference,
    SectionReference,
    TranslationSection,
    format_reference,
)


def section(start, end=None, index=1):
    end_chapter, end_verse = end if end else (None, None)
    return TranslationSection(
        id=f"section-{index}",
        title=f"Section {index}",
        start_reference=format_reference("JON", *start),
        start_chapter=start[0],
        start_verse=start[1],
        end_reference=format_reference("JON", *end) if end else None,
        end_chapter=end_chapter,
        end_verse=end_verse,
    )


class TestParagraphStyle:
    """Tests for ParagraphStyle."""

    @pytest.mark.parametrize("tag,expected", [
        ("p", ParagraphStyle.P),
        ("q2", ParagraphStyle.Q2),
        ("CLS", ParagraphStyle.CLS),
        (" mi ", ParagraphStyle.MI),
        ("nb", None),
        ("", None),
        (None, None),
        (3, None),
    ])
    def test_from_tag(self, tag, expected):
        assert ParagraphStyle.from_tag(tag) == expected

    def test_poetry(self):
        assert ParagraphStyle.Q.is_poetry
        assert ParagraphStyle.Q4.is_poetry
        assert not ParagraphStyle.PC.is_poetry


class TestTranslationSection:
    """Tests for TranslationSection."""

    def test_contains_closed(self):
        s = section((1, 4), (2, 3))

        assert s.contains(1, 4)
        assert s.contains(1, 99)
        assert s.contains(2, 3)
        assert not s.contains(1, 3)
        assert not s.contains(2, 4)

    def test_contains_open_ended(self):
        s = section((2, 1))

        assert s.is_open_ended
        assert s.contains(2, 1)
        assert s.contains(50, 1)
        assert not s.contains(1, 16)

    def test_zero_length(self):
        s = section((1, 4), (1, 3))

        assert s.is_empty
        assert not s.contains(1, 4)
        assert not s.contains(1, 3)

    def test_to_dict_open_ended(self):
        data = section((2, 1)).to_dict()

        assert data["endReference"] is None
        assert data["endChapter"] is None
        assert data["endVerse"] is None
        assert "description" not in data

    def test_from_dict_round_trip(self):
        s = section((1, 4), (1, 10), index=2)

        assert TranslationSection.from_dict(s.to_dict()) == s


class TestSectionReference:
    """Tests for SectionReference."""

    def test_closed_display(self):
        ref = SectionReference.for_section(section((1, 1), (1, 3)))

        assert ref.display_reference == "Section 1 (JON 1:1 - JON 1:3)"
        assert ref.to_dict()["sectionId"] == "section-1"

    def test_open_display(self):
        assert SectionReference.for_section(section((2, 1), index=4)).display_reference == "Section 4 (JON 2:1)"


class TestScripture:
    """Tests for the Scripture aggregate."""

    @pytest.fixture
    def scripture(self):
        verses = tuple(
            CleanVerse(number=n, text=f"Verse {n}.", reference=format_reference("JON", 1, n),
                       paragraph_id="chapter-1-paragraph-1", section_id="section-1")
            for n in (1, 2, 3)
        )
        paragraph = Paragraph(
            id="chapter-1-paragraph-1",
            chapter_number=1,
            style=ParagraphStyle.P,
            type=ParagraphType.PARAGRAPH,
            indent_level=0,
            start_verse=1,
            end_verse=3,
            verses=verses,
        )
        return Scripture(
            book="Jonah",
            book_code="JON",
            metadata=ScriptureMetadata(1, 3, 1, "2024-01-01", "1.0"),
            chapters=(Chapter(1, verses, (paragraph,)),),
            sections=(section((1, 1)),),
        )

    def test_frozen(self, scripture):
        with pytest.raises(dataclasses.FrozenInstanceError):
            scripture.book = "Genesis"

    def test_lookups(self, scripture):
        assert scripture.chapter(1).verse(2).text == "Verse 2."
        assert scripture.chapter(2) is None
        assert scripture.chapter(1).verse(9) is None
        assert scripture.last_position() == (1, 3)

    def test_chapter_properties(self, scripture):
        chapter = scripture.chapter(1)

        assert chapter.verse_count == 3
        assert chapter.paragraph_count == 1
        assert chapter.first_verse.number == 1
        assert chapter.last_verse.number == 3

    def test_paragraph_properties(self, scripture):
        paragraph = scripture.chapter(1).paragraphs[0]

        assert paragraph.verse_numbers == [1, 2, 3]
        assert paragraph.combined_text == "Verse 1. Verse 2. Verse 3."

    def test_to_dict_camel_case(self, scripture):
        data = scripture.to_dict()

        assert data["bookCode"] == "JON"
        assert data["metadata"] == {
            "totalChapters": 1,
            "totalVerses": 3,
            "totalParagraphs": 1,
            "processingDate": "2024-01-01",
            "version": "1.0",
        }
        paragraph = data["chapters"][0]["paragraphs"][0]
        assert paragraph["type"] == "paragraph"
        assert paragraph["style"] == "p"
        assert paragraph["indentLevel"] == 0
        assert paragraph["verseCount"] == 3
        verse = data["chapters"][0]["verses"][0]
        assert verse["paragraphId"] == "chapter-1-paragraph-1"
        assert verse["sectionId"] == "section-1"

    def test_json_round_trip(self, scripture):
        assert Scripture.from_dict(json.loads(scripture.to_json())) == scripture

    def test_empty(self):
        empty = Scripture.empty("Jonah", "JON", "2024-01-01")

        assert empty.is_empty
        assert empty.last_position() is None
        assert empty.to_dict()["chapters"] == []
        assert empty.to_dict()["sections"] == []


class TestScriptureReference:
    """Tests for ScriptureReference."""

    def test_flags(self):
        single = ScriptureReference("JON", 1, 3, 1, 3, "JON 1:3")
        cross = ScriptureReference("JON", 1, 17, 2, 1, "JON 1:17-2:1")

        assert not single.is_range
        assert cross.is_range
        assert cross.is_cross_chapter

    def test_to_dict(self):
        data = ScriptureReference("JON", 1, 3, 1, 5, "JON 1:3-5", book="Jonah").to_dict()

        assert data["displayReference"] == "JON 1:3-5"
        assert data["book"] == "Jonah"
