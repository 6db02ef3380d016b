"""
GRAPHE - Pipeline Module

Transformation and query stages over tokenizer output:
- MarkerTreeNormalizer: Flattens a verse's marker tree into clean text
- ParagraphSegmenter: Partitions a chapter's verses into styled paragraphs
- SectionExtractor: Turns section-break markers into translation sections
- ScriptureBuilder: Assembles the immutable Scripture aggregate for a book

Read-only queries over a built Scripture:
- ReferenceResolver: Parses "BOOK c:v[-[c:]v]" references and selects verses
- SectionNavigator: Section lookup and next/previous navigation
"""

# Build stages
from pipeline.normalizer import MarkerTreeNormalizer, normalize_verse_objects
from pipeline.paragraphs import (
    ParagraphSegmenter,
    VerseEntry,
    indent_level_for,
    paragraph_type_for,
    paragraph_id,
)
from pipeline.sections import SectionExtractor, MarkedChapter, MarkedVerse
from pipeline.builder import ScriptureBuilder, build_scripture, collect_markers

# Queries
from pipeline.references import (
    ReferenceResolver,
    parse_reference,
    format_verses,
    get_book_name,
    get_book_code,
)
from pipeline.navigation import SectionNavigator

__all__ = [
    # Build stages
    "MarkerTreeNormalizer",
    "normalize_verse_objects",
    "ParagraphSegmenter",
    "VerseEntry",
    "indent_level_for",
    "paragraph_type_for",
    "paragraph_id",
    "SectionExtractor",
    "MarkedChapter",
    "MarkedVerse",
    "ScriptureBuilder",
    "build_scripture",
    "collect_markers",
    # Queries
    "ReferenceResolver",
    "parse_reference",
    "format_verses",
    "get_book_name",
    "get_book_code",
    "SectionNavigator",
]
