"""
GRAPHE - Data Schemas

Schemas for the tokenizer input (marker nodes) and the clean scripture model
built from it. Every model is a frozen dataclass: a Scripture is built once
per book and never mutated afterwards, so renderers and query helpers can
share it freely.

Serialized output uses the camelCase field names expected by rendering and
persistence consumers.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional, Tuple, Union
from enum import Enum
import json


# =============================================================================
# ENUMS - Standard values across the system
# =============================================================================

class ParagraphStyle(str, Enum):
    """USFM paragraph styles recognized by the segmenter."""
    P = "p"
    Q = "q"
    Q1 = "q1"
    Q2 = "q2"
    Q3 = "q3"
    Q4 = "q4"
    M = "m"
    MI = "mi"
    PC = "pc"
    PR = "pr"
    CLS = "cls"

    @classmethod
    def from_tag(cls, tag: Optional[str]) -> Optional["ParagraphStyle"]:
        """Return the style for a USFM tag, or None when the tag is not a known style."""
        if not isinstance(tag, str):
            return None
        try:
            return cls(tag.strip().lower())
        except ValueError:
            return None

    @property
    def is_poetry(self) -> bool:
        return self in POETRY_STYLES


POETRY_STYLES = frozenset({
    ParagraphStyle.Q,
    ParagraphStyle.Q1,
    ParagraphStyle.Q2,
    ParagraphStyle.Q3,
    ParagraphStyle.Q4,
})


class ParagraphType(str, Enum):
    """Rendering family of a paragraph."""
    PARAGRAPH = "paragraph"
    QUOTE = "quote"


# =============================================================================
# MARKER NODES - Tokenizer input
# =============================================================================

@dataclass(frozen=True)
class TextNode:
    """Literal text between markers."""
    value: str


@dataclass(frozen=True)
class WordNode:
    """
    A single aligned word (``\\w``).

    Alignment attributes (occurrence counts) are kept for inspection but
    never rendered.
    """
    value: str
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class MilestoneNode:
    """
    An alignment span (``\\zaln``) wrapping words, text, or nested milestones.

    Example attributes:
    {
        "strong": "H3068",
        "lemma": "יְהֹוָה",
        "morph": "He,Np",
        "occurrence": "1",
        "occurrences": "1"
    }
    """
    tag: str
    children: Tuple["MarkerNode", ...] = ()
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class ParagraphMarkerNode:
    """A paragraph-style marker (``\\p``, ``\\q2``, ...) attached before verse text."""
    style: ParagraphStyle
    raw_tag: str = ""


@dataclass(frozen=True)
class SectionBreakNode:
    """A translation section break (``\\ts\\*``)."""


@dataclass(frozen=True)
class UnknownNode:
    """A node whose tag/type combination is not understood. Contributes nothing."""
    raw: Any = field(default=None, compare=False, hash=False)


MarkerNode = Union[
    TextNode,
    WordNode,
    MilestoneNode,
    ParagraphMarkerNode,
    SectionBreakNode,
    UnknownNode,
]


# =============================================================================
# SCRIPTURE MODEL
# =============================================================================

def format_reference(book_code: str, chapter: int, verse: int) -> str:
    """Format a single verse reference, e.g. ``JON 1:3``."""
    return f"{book_code} {chapter}:{verse}"


@dataclass(frozen=True)
class CleanVerse:
    """
    A verse with normalized, non-empty text.

    Example:
    {
        "number": 3,
        "text": "But Jonah got up to run away to Tarshish...",
        "reference": "JON 1:3",
        "paragraphId": "chapter-1-paragraph-2",
        "sectionId": "section-1"
    }
    """
    number: int
    text: str
    reference: str
    paragraph_id: Optional[str] = None
    section_id: Optional[str] = None
    has_section_marker: bool = False
    section_markers: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "text": self.text,
            "reference": self.reference,
            "paragraphId": self.paragraph_id,
            "sectionId": self.section_id,
            "hasSectionMarker": self.has_section_marker,
            "sectionMarkers": self.section_markers,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CleanVerse":
        return cls(
            number=int(data["number"]),
            text=data["text"],
            reference=data["reference"],
            paragraph_id=data.get("paragraphId"),
            section_id=data.get("sectionId"),
            has_section_marker=bool(data.get("hasSectionMarker", False)),
            section_markers=int(data.get("sectionMarkers", 0)),
        )


@dataclass(frozen=True)
class VerseWithSection(CleanVerse):
    """A verse annotated with its position inside a translation section."""
    is_first_in_section: bool = False
    is_last_in_section: bool = False

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["isFirstInSection"] = self.is_first_in_section
        result["isLastInSection"] = self.is_last_in_section
        return result


@dataclass(frozen=True)
class Paragraph:
    """
    A run of consecutive verses sharing one paragraph style.

    Example:
    {
        "id": "chapter-2-paragraph-2",
        "type": "quote",
        "style": "q1",
        "indentLevel": 1,
        "startVerse": 2,
        "endVerse": 9,
        "verseCount": 8
    }
    """
    id: str
    chapter_number: int
    style: ParagraphStyle
    type: ParagraphType
    indent_level: int
    start_verse: int
    end_verse: int
    verses: Tuple[CleanVerse, ...] = ()

    @property
    def verse_count(self) -> int:
        return len(self.verses)

    @property
    def verse_numbers(self) -> List[int]:
        return [verse.number for verse in self.verses]

    @property
    def combined_text(self) -> str:
        return " ".join(verse.text for verse in self.verses)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "chapterNumber": self.chapter_number,
            "type": self.type.value,
            "style": self.style.value,
            "indentLevel": self.indent_level,
            "startVerse": self.start_verse,
            "endVerse": self.end_verse,
            "verseCount": self.verse_count,
            "verseNumbers": self.verse_numbers,
            "combinedText": self.combined_text,
            "verses": [verse.to_dict() for verse in self.verses],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], chapter_number: Optional[int] = None) -> "Paragraph":
        return cls(
            id=data["id"],
            chapter_number=int(data.get("chapterNumber", chapter_number or 0)),
            style=ParagraphStyle(data["style"]),
            type=ParagraphType(data["type"]),
            indent_level=int(data["indentLevel"]),
            start_verse=int(data["startVerse"]),
            end_verse=int(data["endVerse"]),
            verses=tuple(CleanVerse.from_dict(v) for v in data.get("verses", [])),
        )


@dataclass(frozen=True)
class Chapter:
    """A chapter: its verses in ascending order and the paragraphs partitioning them."""
    number: int
    verses: Tuple[CleanVerse, ...] = ()
    paragraphs: Tuple[Paragraph, ...] = ()

    @property
    def verse_count(self) -> int:
        return len(self.verses)

    @property
    def paragraph_count(self) -> int:
        return len(self.paragraphs)

    @property
    def first_verse(self) -> Optional[CleanVerse]:
        return self.verses[0] if self.verses else None

    @property
    def last_verse(self) -> Optional[CleanVerse]:
        return self.verses[-1] if self.verses else None

    def verse(self, number: int) -> Optional[CleanVerse]:
        """Get a verse by number."""
        for verse in self.verses:
            if verse.number == number:
                return verse
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "verseCount": self.verse_count,
            "paragraphCount": self.paragraph_count,
            "verses": [verse.to_dict() for verse in self.verses],
            "paragraphs": [paragraph.to_dict() for paragraph in self.paragraphs],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Chapter":
        number = int(data["number"])
        return cls(
            number=number,
            verses=tuple(CleanVerse.from_dict(v) for v in data.get("verses", [])),
            paragraphs=tuple(Paragraph.from_dict(p, number) for p in data.get("paragraphs", [])),
        )


@dataclass(frozen=True)
class TranslationSection:
    """
    A translation section started by a ``\\ts\\*`` marker.

    The last section of a book has no end: it runs to the end of the book,
    which is resolved at read time rather than stored.

    Example:
    {
        "id": "section-2",
        "startReference": "JON 1:4",
        "startChapter": 1,
        "startVerse": 4,
        "endReference": "JON 1:6",
        "endChapter": 1,
        "endVerse": 6,
        "title": "Section 2"
    }
    """
    id: str
    start_reference: str
    start_chapter: int
    start_verse: int
    title: str
    end_reference: Optional[str] = None
    end_chapter: Optional[int] = None
    end_verse: Optional[int] = None
    description: Optional[str] = None

    @property
    def is_open_ended(self) -> bool:
        return self.end_chapter is None or self.end_verse is None

    @property
    def is_empty(self) -> bool:
        """True for a zero-length section closed by a second marker on its own start verse."""
        if self.is_open_ended:
            return False
        return (self.end_chapter, self.end_verse) < (self.start_chapter, self.start_verse)

    def contains(self, chapter: int, verse: int) -> bool:
        """Inclusive range test; an open-ended section has no upper bound."""
        if (chapter, verse) < (self.start_chapter, self.start_verse):
            return False
        if self.is_open_ended:
            return True
        return (chapter, verse) <= (self.end_chapter, self.end_verse)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "startReference": self.start_reference,
            "startChapter": self.start_chapter,
            "startVerse": self.start_verse,
            "endReference": self.end_reference,
            "endChapter": self.end_chapter,
            "endVerse": self.end_verse,
            "title": self.title,
        }
        if self.description is not None:
            result["description"] = self.description
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TranslationSection":
        end_chapter = data.get("endChapter")
        end_verse = data.get("endVerse")
        return cls(
            id=data["id"],
            start_reference=data["startReference"],
            start_chapter=int(data["startChapter"]),
            start_verse=int(data["startVerse"]),
            title=data["title"],
            end_reference=data.get("endReference"),
            end_chapter=int(end_chapter) if end_chapter is not None else None,
            end_verse=int(end_verse) if end_verse is not None else None,
            description=data.get("description"),
        )


@dataclass(frozen=True)
class ScriptureMetadata:
    """Counts and provenance for a built book."""
    total_chapters: int = 0
    total_verses: int = 0
    total_paragraphs: int = 0
    processing_date: str = ""
    version: str = "1.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalChapters": self.total_chapters,
            "totalVerses": self.total_verses,
            "totalParagraphs": self.total_paragraphs,
            "processingDate": self.processing_date,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScriptureMetadata":
        return cls(
            total_chapters=int(data.get("totalChapters", 0)),
            total_verses=int(data.get("totalVerses", 0)),
            total_paragraphs=int(data.get("totalParagraphs", 0)),
            processing_date=data.get("processingDate", ""),
            version=data.get("version", "1.0"),
        )


@dataclass(frozen=True)
class Scripture:
    """
    Aggregate root: one book's chapters and translation sections.

    Example:
    {
        "book": "Jonah",
        "bookCode": "JON",
        "metadata": {"totalChapters": 4, "totalVerses": 48, "totalParagraphs": 19},
        "chapters": [...],
        "sections": [...]
    }
    """
    book: str
    book_code: str
    metadata: ScriptureMetadata = field(default_factory=ScriptureMetadata)
    chapters: Tuple[Chapter, ...] = ()
    sections: Tuple[TranslationSection, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.chapters

    def chapter(self, number: int) -> Optional[Chapter]:
        """Get a chapter by number."""
        for chapter in self.chapters:
            if chapter.number == number:
                return chapter
        return None

    def last_position(self) -> Optional[Tuple[int, int]]:
        """(chapter, verse) of the book's final verse."""
        for chapter in reversed(self.chapters):
            if chapter.verses:
                return chapter.number, chapter.verses[-1].number
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "book": self.book,
            "bookCode": self.book_code,
            "metadata": self.metadata.to_dict(),
            "chapters": [chapter.to_dict() for chapter in self.chapters],
            "sections": [section.to_dict() for section in self.sections],
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Scripture":
        """Rebuild a previously serialized aggregate."""
        return cls(
            book=data.get("book", ""),
            book_code=data.get("bookCode", ""),
            metadata=ScriptureMetadata.from_dict(data.get("metadata") or {}),
            chapters=tuple(Chapter.from_dict(c) for c in data.get("chapters") or []),
            sections=tuple(TranslationSection.from_dict(s) for s in data.get("sections") or []),
        )

    @classmethod
    def empty(cls, book: str, book_code: str, processing_date: str = "", version: str = "1.0") -> "Scripture":
        """An explicitly empty book, used when the input has no readable chapters."""
        return cls(
            book=book,
            book_code=book_code,
            metadata=ScriptureMetadata(processing_date=processing_date, version=version),
        )


# =============================================================================
# QUERY SCHEMAS
# =============================================================================

@dataclass(frozen=True)
class ScriptureReference:
    """
    A parsed reference. Single verses have start == end.

    Example:
    {
        "bookCode": "JON",
        "startChapter": 1, "startVerse": 17,
        "endChapter": 2, "endVerse": 1,
        "displayReference": "JON 1:17-2:1"
    }
    """
    book_code: str
    start_chapter: int
    start_verse: int
    end_chapter: int
    end_verse: int
    display_reference: str
    book: str = ""

    @property
    def is_range(self) -> bool:
        return (self.start_chapter, self.start_verse) != (self.end_chapter, self.end_verse)

    @property
    def is_cross_chapter(self) -> bool:
        return self.start_chapter != self.end_chapter

    def to_dict(self) -> Dict[str, Any]:
        return {
            "book": self.book,
            "bookCode": self.book_code,
            "startChapter": self.start_chapter,
            "startVerse": self.start_verse,
            "endChapter": self.end_chapter,
            "endVerse": self.end_verse,
            "displayReference": self.display_reference,
        }


@dataclass(frozen=True)
class SectionReference:
    """A section together with its human-readable label."""
    section_id: str
    section: TranslationSection
    display_reference: str

    @classmethod
    def for_section(cls, section: TranslationSection) -> "SectionReference":
        end = f" - {section.end_reference}" if section.end_reference else ""
        return cls(
            section_id=section.id,
            section=section,
            display_reference=f"{section.title} ({section.start_reference}{end})",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sectionId": self.section_id,
            "section": self.section.to_dict(),
            "displayReference": self.display_reference,
        }
