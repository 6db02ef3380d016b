"""
GRAPHE - Translation Section Extraction

Scans a book's verses in order and turns ``\\ts\\*`` markers into translation
sections.

Rules:
- The book's first verse opens section 1, whether or not it carries a marker.
- Every other marker opens a new section at its verse and closes the
  previous one at the verse immediately before it: the preceding verse of
  the same chapter, or the last verse of the nearest earlier chapter when the
  marker sits on a chapter's first verse.
- A second marker on the same verse closes the section the first one opened,
  leaving it zero-length.
- The final section stays open-ended; its end is resolved at read time.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from data.schemas import TranslationSection, format_reference


logger = logging.getLogger(__name__)

DEFAULT_TITLE_TEMPLATE = "Section {n}"


@dataclass(frozen=True)
class MarkedVerse:
    """A verse of the extractor's input with the section breaks attached to it."""
    number: int
    section_breaks: int = 0


@dataclass(frozen=True)
class MarkedChapter:
    number: int
    verses: Tuple[MarkedVerse, ...] = ()


@dataclass
class _SectionDraft:
    index: int
    start_chapter: int
    start_verse: int
    end_chapter: Optional[int] = None
    end_verse: Optional[int] = None


class SectionExtractor:
    """
    Builds the ordered section list for one book.

    Args:
        title_template: Format string for section titles, receiving ``n``
    """

    def __init__(self, title_template: str = DEFAULT_TITLE_TEMPLATE):
        self.title_template = title_template

    def extract(self, chapters: Sequence[MarkedChapter], book_code: str) -> List[TranslationSection]:
        """
        Extract sections from chapters in book order.

        Args:
            chapters: Chapters ascending, each with verses ascending
            book_code: Book code used in section references

        Returns:
            Sections in start order; only the last may be open-ended. Empty
            when the book has no verses.
        """
        drafts: List[_SectionDraft] = []
        scanned: List[MarkedChapter] = []

        for chapter in chapters:
            for index, verse in enumerate(chapter.verses):
                breaks = verse.section_breaks

                if not drafts:
                    drafts.append(_SectionDraft(1, chapter.number, verse.number))
                    breaks = max(breaks - 1, 0)

                for _ in range(breaks):
                    end_chapter, end_verse = self._preceding(chapter, index, scanned)
                    previous = drafts[-1]
                    previous.end_chapter = end_chapter
                    previous.end_verse = end_verse
                    drafts.append(_SectionDraft(len(drafts) + 1, chapter.number, verse.number))

            scanned.append(chapter)

        sections = [self._freeze(draft, book_code) for draft in drafts]
        logger.debug("Extracted %d sections for %s", len(sections), book_code)
        return sections

    @staticmethod
    def _preceding(
        chapter: MarkedChapter,
        index: int,
        scanned: Sequence[MarkedChapter],
    ) -> Tuple[int, int]:
        """Position of the verse immediately before ``chapter.verses[index]``."""
        if index > 0:
            return chapter.number, chapter.verses[index - 1].number

        for earlier in reversed(scanned):
            if earlier.verses:
                return earlier.number, earlier.verses[-1].number

        # Zero-length section on the book's first verse
        return chapter.number, chapter.verses[index].number - 1

    def _freeze(self, draft: _SectionDraft, book_code: str) -> TranslationSection:
        end_reference = None
        if draft.end_chapter is not None and draft.end_verse is not None:
            end_reference = format_reference(book_code, draft.end_chapter, draft.end_verse)

        return TranslationSection(
            id=f"section-{draft.index}",
            title=self.title_template.format(n=draft.index),
            start_reference=format_reference(book_code, draft.start_chapter, draft.start_verse),
            start_chapter=draft.start_chapter,
            start_verse=draft.start_verse,
            end_reference=end_reference,
            end_chapter=draft.end_chapter,
            end_verse=draft.end_verse,
        )
