"""
GRAPHE - Section Navigation

Read-only accessors over a book's ordered translation sections.
"""
import logging
import re
from typing import List, Optional, Tuple, Union

from data.schemas import (
    CleanVerse,
    Scripture,
    SectionReference,
    TranslationSection,
    VerseWithSection,
)
from pipeline.references import ReferenceResolver


logger = logging.getLogger(__name__)

_SECTION_TITLE = re.compile(r"^Section\s+(\d+)$", re.IGNORECASE)


class SectionNavigator:
    """
    Section lookup and sequential navigation for one Scripture.

    Navigation follows list order and stops at both ends; it never wraps.

    Args:
        scripture: Built book whose sections are navigated
        resolver: Reference resolver for string lookups
    """

    def __init__(self, scripture: Scripture, resolver: Optional[ReferenceResolver] = None):
        self.scripture = scripture
        self.resolver = resolver or ReferenceResolver()

    @property
    def sections(self) -> List[TranslationSection]:
        return list(self.scripture.sections)

    def _index_of(self, section_id: str) -> Optional[int]:
        for index, section in enumerate(self.scripture.sections):
            if section.id == section_id:
                return index
        return None

    def by_id(self, section_id: str) -> Optional[TranslationSection]:
        index = self._index_of(section_id)
        return self.scripture.sections[index] if index is not None else None

    def by_reference(self, chapter: int, verse: int) -> Optional[TranslationSection]:
        """
        Find the section containing a verse position.

        The last section has no upper bound, so any position at or after its
        start matches it.
        """
        for section in self.scripture.sections:
            if section.contains(chapter, verse):
                return section
        return None

    def by_reference_string(self, text: str) -> Optional[TranslationSection]:
        """Find the section containing the start of a reference such as ``JON 1:3``."""
        reference = self.resolver.parse(text)
        if reference is None:
            return None
        return self.by_reference(reference.start_chapter, reference.start_verse)

    def next(self, section_id: str) -> Optional[TranslationSection]:
        index = self._index_of(section_id)
        if index is None or index + 1 >= len(self.scripture.sections):
            return None
        return self.scripture.sections[index + 1]

    def previous(self, section_id: str) -> Optional[TranslationSection]:
        index = self._index_of(section_id)
        if index is None or index == 0:
            return None
        return self.scripture.sections[index - 1]

    def resolved_end(self, section: TranslationSection) -> Optional[Tuple[int, int]]:
        """
        End position of a section, resolving an open end to the book's last verse.

        Returns:
            ``(chapter, verse)``, or None for an open-ended section of a book
            without verses
        """
        if not section.is_open_ended:
            return section.end_chapter, section.end_verse
        return self.scripture.last_position()

    def verses_in_section(self, section_id: str) -> List[CleanVerse]:
        """All verses of a section in book order; empty for unknown ids and zero-length sections."""
        section = self.by_id(section_id)
        if section is None:
            return []
        return [
            verse
            for chapter in self.scripture.chapters
            for verse in chapter.verses
            if section.contains(chapter.number, verse.number)
        ]

    def parse_section_reference(self, text: str) -> Optional[SectionReference]:
        """
        Look a section up by id (``section-2``) or title form (``Section 2``).

        Returns:
            The section with its display label, or None
        """
        if not isinstance(text, str):
            return None
        cleaned = text.strip()

        section = self.by_id(cleaned)
        if section is None:
            match = _SECTION_TITLE.match(cleaned)
            if match:
                section = self.by_id(f"section-{int(match.group(1))}")

        return SectionReference.for_section(section) if section is not None else None

    def verses_with_section_context(
        self,
        reference: Union[str, TranslationSection],
    ) -> List[VerseWithSection]:
        """
        Verses of a section or verse reference, annotated with their section.

        Args:
            reference: A section object, a section reference (``section-2``,
                ``Section 2``) or a verse reference (``JON 1:3-5``)

        Returns:
            Verses with ``section_id`` and first/last flags relative to the
            returned list
        """
        section: Optional[TranslationSection]

        if isinstance(reference, TranslationSection):
            section = reference
            verses = self.verses_in_section(section.id)
        else:
            section_reference = self.parse_section_reference(reference)
            if section_reference is not None:
                section = section_reference.section
                verses = self.verses_in_section(section.id)
            else:
                verses = self.resolver.resolve_string(self.scripture, reference)
                section = None
                if verses:
                    position = _position_of(verses[0])
                    section = self.by_reference(*position) if position else None

        section_id = section.id if section is not None else None
        last = len(verses) - 1
        return [
            VerseWithSection(
                number=verse.number,
                text=verse.text,
                reference=verse.reference,
                paragraph_id=verse.paragraph_id,
                section_id=section_id,
                has_section_marker=verse.has_section_marker,
                section_markers=verse.section_markers,
                is_first_in_section=index == 0,
                is_last_in_section=index == last,
            )
            for index, verse in enumerate(verses)
        ]


def _position_of(verse: CleanVerse) -> Optional[Tuple[int, int]]:
    """Chapter and verse read back from a verse's ``BOOK c:v`` reference."""
    match = re.search(r"(\d+):(\d+)$", verse.reference)
    if not match:
        logger.debug("Verse reference %r has no position", verse.reference)
        return None
    return int(match.group(1)), int(match.group(2))
