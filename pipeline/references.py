"""
GRAPHE - Reference Resolution

Parses reference strings and selects the verses they name.

Grammar::

    BOOK SP chapter ':' verse [ '-' [ chapter ':' ] verse ]

Recognized shapes:
- single verse          ``JON 1:3``
- same-chapter range    ``JON 1:3-5``
- cross-chapter range   ``JON 1:17-2:1``

The book token is case-insensitive and may be a book code or an English
book name, multi-word names included (``Jonah 1:3``, ``1 Samuel 3:10``,
``Song of Songs 1:1``). Strings outside the grammar parse to None; the
caller shows nothing rather than failing.
"""
import logging
import re
from dataclasses import replace
from typing import Iterator, List, Optional, Sequence, Tuple

from config import BOOK_NAMES
from core.errors import GrapheReferenceError
from data.schemas import (
    Chapter,
    CleanVerse,
    Paragraph,
    Scripture,
    ScriptureReference,
)


logger = logging.getLogger(__name__)

# Tried in order: the cross-chapter form needs a chapter on both sides of the hyphen
_CROSS_CHAPTER = re.compile(
    r"^(.+?)\s+(\d+):(\d+)\s*-\s*(\d+):(\d+)$"
)
_SINGLE_OR_RANGE = re.compile(
    r"^(.+?)\s+(\d+):(\d+)(?:\s*-\s*(\d+))?$"
)

_BOOK_CODES_BY_NAME = {name.lower(): code for code, name in BOOK_NAMES.items()}
_BOOK_CODE_TOKEN = re.compile(r"^[A-Za-z0-9]{2,4}$")


# =============================================================================
# BOOK LOOKUP
# =============================================================================

def get_book_name(book_code: str) -> str:
    """English book name for a code, falling back to the code itself."""
    return BOOK_NAMES.get(book_code.upper(), book_code)


def get_book_code(book_name: str) -> str:
    """Book code for an English name, falling back to its first three letters."""
    name = book_name.strip()
    return _BOOK_CODES_BY_NAME.get(name.lower(), name[:3].upper())


def _book_code_for_token(token: str) -> Optional[str]:
    """Known code, then known name (``Song of Songs``), then any 2-4 character code."""
    if token.upper() in BOOK_NAMES:
        return token.upper()
    name = " ".join(token.split()).lower()
    if name in _BOOK_CODES_BY_NAME:
        return _BOOK_CODES_BY_NAME[name]
    if _BOOK_CODE_TOKEN.match(token):
        return token.upper()
    return None


# =============================================================================
# RESOLVER
# =============================================================================

class ReferenceResolver:
    """
    Reference parsing and verse selection over a built Scripture.

    Stateless: one instance may serve any number of books and callers.
    """

    def parse(self, text: str) -> Optional[ScriptureReference]:
        """
        Parse a reference string.

        Args:
            text: Reference such as ``JON 1:3-5``

        Returns:
            The parsed reference, or None when the string is outside the grammar
        """
        if not isinstance(text, str):
            return None
        cleaned = text.strip()

        match = _CROSS_CHAPTER.match(cleaned)
        if match:
            token, start_chapter, start_verse, end_chapter, end_verse = match.groups()
            book_code = _book_code_for_token(token)
            if book_code is None:
                logger.debug("Unknown book in reference %r", text)
                return None
            return ScriptureReference(
                book_code=book_code,
                book=get_book_name(book_code),
                start_chapter=int(start_chapter),
                start_verse=int(start_verse),
                end_chapter=int(end_chapter),
                end_verse=int(end_verse),
                display_reference=f"{book_code} {int(start_chapter)}:{int(start_verse)}"
                                  f"-{int(end_chapter)}:{int(end_verse)}",
            )

        match = _SINGLE_OR_RANGE.match(cleaned)
        if match:
            token, chapter, start_verse, end_verse = match.groups()
            book_code = _book_code_for_token(token)
            if book_code is None:
                logger.debug("Unknown book in reference %r", text)
                return None
            display = f"{book_code} {int(chapter)}:{int(start_verse)}"
            if end_verse is not None:
                display += f"-{int(end_verse)}"
            return ScriptureReference(
                book_code=book_code,
                book=get_book_name(book_code),
                start_chapter=int(chapter),
                start_verse=int(start_verse),
                end_chapter=int(chapter),
                end_verse=int(end_verse if end_verse is not None else start_verse),
                display_reference=display,
            )

        logger.debug("Unparseable reference %r", text)
        return None

    def require(self, text: str) -> ScriptureReference:
        """
        Parse a reference string, raising when it is outside the grammar.

        Raises:
            GrapheReferenceError: If the string does not parse
        """
        reference = self.parse(text)
        if reference is None:
            raise GrapheReferenceError(f"Invalid reference: {text!r}", reference=text)
        return reference

    def _spanned_chapters(
        self,
        scripture: Scripture,
        reference: ScriptureReference,
    ) -> Iterator[Tuple[Chapter, float, float]]:
        """Chapters in the reference's span with the verse bounds applying to each."""
        start = (reference.start_chapter, reference.start_verse)
        end = (reference.end_chapter, reference.end_verse)
        if start > end:
            return

        for chapter in scripture.chapters:
            if not reference.start_chapter <= chapter.number <= reference.end_chapter:
                continue
            low = reference.start_verse if chapter.number == reference.start_chapter else float("-inf")
            high = reference.end_verse if chapter.number == reference.end_chapter else float("inf")
            yield chapter, low, high

    def resolve(self, scripture: Scripture, reference: ScriptureReference) -> List[CleanVerse]:
        """
        Select the verses a reference names, in book order.

        The start chapter contributes verses from ``start_verse`` on, the end
        chapter verses up to ``end_verse``, and chapters in between all their
        verses. A reversed range selects nothing.
        """
        verses: List[CleanVerse] = []
        for chapter, low, high in self._spanned_chapters(scripture, reference):
            verses.extend(v for v in chapter.verses if low <= v.number <= high)
        return verses

    def resolve_paragraphs(self, scripture: Scripture, reference: ScriptureReference) -> List[Paragraph]:
        """
        Select the paragraphs a reference touches.

        A paragraph is included when its verse range intersects the requested
        range; it is narrowed to the verses inside the range, so paragraphs
        at the range edges come back partial.
        """
        paragraphs: List[Paragraph] = []
        for chapter, low, high in self._spanned_chapters(scripture, reference):
            for paragraph in chapter.paragraphs:
                if paragraph.start_verse > high or paragraph.end_verse < low:
                    continue
                verses = tuple(v for v in paragraph.verses if low <= v.number <= high)
                if not verses:
                    continue
                paragraphs.append(replace(
                    paragraph,
                    verses=verses,
                    start_verse=verses[0].number,
                    end_verse=verses[-1].number,
                ))
        return paragraphs

    def resolve_string(self, scripture: Scripture, text: str) -> List[CleanVerse]:
        """
        Parse and resolve in one step.

        Returns:
            The selected verses; empty when the string does not parse or
            names a different book
        """
        reference = self.parse(text)
        if reference is None:
            return []
        if reference.book_code != scripture.book_code.upper() and reference.book != scripture.book:
            logger.debug("Reference %s is not in %s", reference.display_reference, scripture.book_code)
            return []
        return self.resolve(scripture, reference)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

_default_resolver = ReferenceResolver()


def parse_reference(text: str) -> Optional[ScriptureReference]:
    """Parse a reference string with the shared resolver."""
    return _default_resolver.parse(text)


def format_verses(verses: Sequence[CleanVerse], show_numbers: bool = True) -> str:
    """Join verses into one display string, optionally prefixing verse numbers."""
    return " ".join(
        f"{verse.number} {verse.text}" if show_numbers else verse.text
        for verse in verses
    )
