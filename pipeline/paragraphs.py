"""
GRAPHE - Paragraph Segmentation

Partitions one chapter's verses into ordered, contiguous, non-overlapping
paragraphs, each tagged with a USFM style and an indentation level.

A paragraph marker before a verse closes the open paragraph and opens a new
one with the marker's style. A chapter that starts without a marker opens
an implicit paragraph in the default style (``p`` unless front matter says
otherwise). Paragraphs never cross a chapter boundary: each call sees one
chapter's verses only.
"""
import logging
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional

from data.schemas import (
    CleanVerse,
    Paragraph,
    ParagraphStyle,
    ParagraphType,
)


logger = logging.getLogger(__name__)

_INDENT_LEVELS = {
    ParagraphStyle.Q: 1,
    ParagraphStyle.Q1: 1,
    ParagraphStyle.Q2: 2,
    ParagraphStyle.Q3: 3,
    ParagraphStyle.Q4: 4,
}


def indent_level_for(style: ParagraphStyle) -> int:
    """Poetry styles indent by their numeric level (``q`` counts as 1); prose is flush."""
    return _INDENT_LEVELS.get(style, 0)


def paragraph_type_for(style: ParagraphStyle) -> ParagraphType:
    return ParagraphType.QUOTE if style.is_poetry else ParagraphType.PARAGRAPH


def paragraph_id(chapter_number: int, index: int) -> str:
    return f"chapter-{chapter_number}-paragraph-{index}"


@dataclass(frozen=True)
class VerseEntry:
    """One verse of the segmenter's input stream."""
    verse: CleanVerse
    # Style of the paragraph marker found before this verse's text, if any
    paragraph_style: Optional[ParagraphStyle] = None


class ParagraphSegmenter:
    """
    Groups a chapter's verses into paragraphs.

    Args:
        default_style: Style of the implicit paragraph opened when a chapter
            begins without a marker
    """

    def __init__(self, default_style: ParagraphStyle = ParagraphStyle.P):
        self.default_style = default_style

    def segment(
        self,
        chapter_number: int,
        entries: Iterable[VerseEntry],
        initial_style: Optional[ParagraphStyle] = None,
    ) -> List[Paragraph]:
        """
        Segment one chapter.

        Args:
            chapter_number: Chapter the verses belong to
            entries: Verses in ascending order, with their paragraph markers
            initial_style: Style from the chapter's front matter, if any

        Returns:
            Paragraphs ordered by start verse; every verse appears in exactly
            one paragraph, with ``paragraph_id`` set
        """
        paragraphs: List[Paragraph] = []
        current_style = initial_style or self.default_style
        current_verses: List[CleanVerse] = []

        def close() -> None:
            if not current_verses:
                return
            pid = paragraph_id(chapter_number, len(paragraphs) + 1)
            verses = tuple(replace(verse, paragraph_id=pid) for verse in current_verses)
            paragraphs.append(Paragraph(
                id=pid,
                chapter_number=chapter_number,
                style=current_style,
                type=paragraph_type_for(current_style),
                indent_level=indent_level_for(current_style),
                start_verse=min(verse.number for verse in verses),
                end_verse=max(verse.number for verse in verses),
                verses=verses,
            ))
            current_verses.clear()

        for entry in entries:
            if entry.paragraph_style is not None:
                close()
                current_style = entry.paragraph_style
            current_verses.append(entry.verse)

        close()

        logger.debug("Chapter %d segmented into %d paragraphs", chapter_number, len(paragraphs))
        return paragraphs
