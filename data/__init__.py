"""
GRAPHE - Data Module

Schemas and loaders for scripture data.

Architecture:
- schemas.py: Frozen dataclasses for marker nodes and the scripture model
- loaders.py: Decoding of tokenizer (usfm-js) output into marker nodes
"""

# =============================================================================
# SCHEMAS - Dataclass definitions
# =============================================================================
from data.schemas import (
    # Enums
    ParagraphStyle,
    ParagraphType,
    POETRY_STYLES,
    # Marker nodes
    MarkerNode,
    TextNode,
    WordNode,
    MilestoneNode,
    ParagraphMarkerNode,
    SectionBreakNode,
    UnknownNode,
    # Scripture model
    CleanVerse,
    VerseWithSection,
    Paragraph,
    Chapter,
    TranslationSection,
    ScriptureMetadata,
    Scripture,
    # Query schemas
    ScriptureReference,
    SectionReference,
    format_reference,
)

# =============================================================================
# LOADERS - Tokenizer output decoding
# =============================================================================
from data.loaders import (
    is_section_break,
    parse_marker_node,
    parse_verse_objects,
    parse_number,
    numbered_entries,
    front_matter,
    raw_verse_objects,
    load_document,
    load_document_json,
    load_document_file,
)

__all__ = [
    "ParagraphStyle",
    "ParagraphType",
    "POETRY_STYLES",
    "MarkerNode",
    "TextNode",
    "WordNode",
    "MilestoneNode",
    "ParagraphMarkerNode",
    "SectionBreakNode",
    "UnknownNode",
    "CleanVerse",
    "VerseWithSection",
    "Paragraph",
    "Chapter",
    "TranslationSection",
    "ScriptureMetadata",
    "Scripture",
    "ScriptureReference",
    "SectionReference",
    "format_reference",
    "is_section_break",
    "parse_marker_node",
    "parse_verse_objects",
    "parse_number",
    "numbered_entries",
    "front_matter",
    "raw_verse_objects",
    "load_document",
    "load_document_json",
    "load_document_file",
]
