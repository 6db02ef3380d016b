"""
GRAPHE - Scripture Builder

Assembles the Scripture aggregate for one book from tokenizer output:

    tokenizer JSON -> marker nodes -> normalized verses
                   -> paragraphs (per chapter) + sections (per book)
                   -> Scripture

Building is a pure function of its input. Data-quality problems degrade the
result (a node, verse, or chapter is omitted) instead of raising; input with
no ``chapters`` mapping yields an explicitly empty Scripture.
"""
import time
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from config import ProcessingConfig, get_config
from core.errors import GrapheConfigError
from data.loaders import (
    front_matter,
    numbered_entries,
    parse_verse_objects,
    raw_verse_objects,
)
from data.schemas import (
    Chapter,
    CleanVerse,
    MarkerNode,
    ParagraphMarkerNode,
    ParagraphStyle,
    Scripture,
    ScriptureMetadata,
    SectionBreakNode,
    TranslationSection,
    format_reference,
)
from observability.logging import BuildLogger, LogContext
from pipeline.normalizer import MarkerTreeNormalizer
from pipeline.paragraphs import ParagraphSegmenter, VerseEntry
from pipeline.references import get_book_name
from pipeline.sections import MarkedChapter, MarkedVerse, SectionExtractor


def collect_markers(nodes: Sequence[MarkerNode]) -> Tuple[Optional[ParagraphStyle], int]:
    """
    Read the structural signals attached to a verse.

    Returns:
        The style of the last paragraph marker (None if there is none) and
        the number of section breaks
    """
    style = None
    breaks = 0
    for node in nodes:
        if isinstance(node, ParagraphMarkerNode):
            style = node.style
        elif isinstance(node, SectionBreakNode):
            breaks += 1
    return style, breaks


@dataclass
class _ChapterDraft:
    number: int
    initial_style: Optional[ParagraphStyle]
    entries: List[VerseEntry]
    marked: List[MarkedVerse]


class ScriptureBuilder:
    """
    Builds Scripture aggregates.

    Args:
        config: Processing defaults. Uses the global config if not provided.

    Raises:
        GrapheConfigError: If the configured default paragraph style is unknown
    """

    def __init__(self, config: Optional[ProcessingConfig] = None):
        config = config or get_config().processing

        default_style = ParagraphStyle.from_tag(config.default_paragraph_style)
        if default_style is None:
            raise GrapheConfigError(
                f"Unknown default paragraph style: {config.default_paragraph_style!r}",
                config_key="default_paragraph_style",
                actual_value=config.default_paragraph_style,
            )

        self.version = config.processing_version
        self.normalizer = MarkerTreeNormalizer()
        self.segmenter = ParagraphSegmenter(default_style=default_style)
        self.extractor = SectionExtractor(title_template=config.section_title_template)
        self._log = BuildLogger()

    def build(
        self,
        document: Any,
        book_code: str,
        book_name: Optional[str] = None,
        processing_date: Optional[str] = None,
    ) -> Scripture:
        """
        Build one book.

        Args:
            document: Decoded tokenizer output (``{"chapters": {...}}``)
            book_code: Book code, e.g. ``JON``
            book_name: Display name; looked up from the code when omitted
            processing_date: ISO date stamped into metadata; today when omitted

        Returns:
            The immutable Scripture aggregate
        """
        book_code = book_code.strip().upper()
        book = book_name or get_book_name(book_code)
        processing_date = processing_date or date.today().isoformat()

        chapters_data = document.get("chapters") if isinstance(document, Mapping) else None
        if not isinstance(chapters_data, Mapping):
            self._log.empty_document(book_code, "no chapters mapping")
            return Scripture.empty(book, book_code, processing_date, self.version)

        started = time.perf_counter()
        with LogContext(book_code=book_code):
            self._log.build_started(book_code, len(chapters_data))

            drafts = self._read_chapters(chapters_data, book_code)
            sections = self.extractor.extract(
                [MarkedChapter(d.number, tuple(d.marked)) for d in drafts],
                book_code,
            )
            chapters = self._assemble(drafts, sections)

            metadata = ScriptureMetadata(
                total_chapters=len(chapters),
                total_verses=sum(chapter.verse_count for chapter in chapters),
                total_paragraphs=sum(chapter.paragraph_count for chapter in chapters),
                processing_date=processing_date,
                version=self.version,
            )

            self._log.build_completed(
                book_code,
                chapters=metadata.total_chapters,
                verses=metadata.total_verses,
                paragraphs=metadata.total_paragraphs,
                sections=len(sections),
                duration=time.perf_counter() - started,
            )

        return Scripture(
            book=book,
            book_code=book_code,
            metadata=metadata,
            chapters=tuple(chapters),
            sections=tuple(sections),
        )

    def _read_chapters(self, chapters_data: Mapping, book_code: str) -> List[_ChapterDraft]:
        """Normalize every verse and collect its markers. Chapters left without verses are dropped."""
        drafts: List[_ChapterDraft] = []
        seen_chapters = set()
        # Section breaks on dropped verses move to the next emitted verse
        pending_breaks = 0

        for chapter_number, chapter_data in numbered_entries(chapters_data):
            if chapter_number in seen_chapters:
                self._log.verse_dropped(f"{book_code} {chapter_number}", "duplicate chapter")
                continue
            seen_chapters.add(chapter_number)

            initial_style, _ = collect_markers(front_matter(chapter_data))
            draft = _ChapterDraft(chapter_number, initial_style, [], [])
            seen_verses = set()
            pending_style: Optional[ParagraphStyle] = None

            for verse_number, verse_data in numbered_entries(chapter_data):
                reference = format_reference(book_code, chapter_number, verse_number)

                if verse_number in seen_verses:
                    self._log.verse_dropped(reference, "duplicate verse")
                    continue

                raw_objects = raw_verse_objects(verse_data)
                if raw_objects is None:
                    self._log.verse_dropped(reference, "missing verseObjects")
                    continue

                nodes = parse_verse_objects(raw_objects)
                style, breaks = collect_markers(nodes)
                text = self.normalizer.normalize(nodes)

                if not text:
                    pending_breaks += breaks
                    pending_style = style or pending_style
                    self._log.verse_dropped(reference, "empty text")
                    continue

                seen_verses.add(verse_number)
                breaks += pending_breaks
                pending_breaks = 0
                style = style or pending_style
                pending_style = None

                verse = CleanVerse(
                    number=verse_number,
                    text=text,
                    reference=reference,
                    has_section_marker=breaks > 0,
                    section_markers=breaks,
                )
                draft.entries.append(VerseEntry(verse=verse, paragraph_style=style))
                draft.marked.append(MarkedVerse(number=verse_number, section_breaks=breaks))

            if draft.entries:
                drafts.append(draft)

        return drafts

    def _assemble(
        self,
        drafts: Sequence[_ChapterDraft],
        sections: Sequence[TranslationSection],
    ) -> List[Chapter]:
        """Segment paragraphs and cross-link verses to their paragraph and section."""
        chapters: List[Chapter] = []
        section_index = 0

        for draft in drafts:
            paragraphs = self.segmenter.segment(draft.number, draft.entries, draft.initial_style)

            linked: Dict[int, CleanVerse] = {}
            for paragraph in paragraphs:
                for verse in paragraph.verses:
                    position = (draft.number, verse.number)
                    # Skip past zero-length sections sharing a start with their successor
                    while (
                        section_index + 1 < len(sections)
                        and position >= (sections[section_index + 1].start_chapter,
                                         sections[section_index + 1].start_verse)
                    ):
                        section_index += 1
                    section_id = sections[section_index].id if sections else None
                    linked[verse.number] = replace(verse, section_id=section_id)

            paragraphs = [
                replace(p, verses=tuple(linked[v.number] for v in p.verses))
                for p in paragraphs
            ]
            chapters.append(Chapter(
                number=draft.number,
                verses=tuple(linked[entry.verse.number] for entry in draft.entries),
                paragraphs=tuple(paragraphs),
            ))

        return chapters


def build_scripture(
    document: Any,
    book_code: str,
    book_name: Optional[str] = None,
    processing_date: Optional[str] = None,
) -> Scripture:
    """Build one book with the configured defaults."""
    return ScriptureBuilder().build(
        document,
        book_code,
        book_name=book_name,
        processing_date=processing_date,
    )
