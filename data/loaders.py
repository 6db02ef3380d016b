"""
GRAPHE - Tokenizer Output Loaders

Decodes the JSON produced by the USFM marker-tree tokenizer (usfm-js shape)
into typed marker nodes:

    {
        "headers": [...],
        "chapters": {
            "1": {
                "front": {"verseObjects": [{"tag": "p", "type": "paragraph"}]},
                "1": {"verseObjects": [
                    {"tag": "zaln", "type": "milestone", "strong": "H1961",
                     "children": [{"tag": "w", "type": "word", "text": "Now"}]},
                    {"type": "text", "text": " the word of Yahweh came "},
                    ...
                ]}
            }
        }
    }

Unknown nodes are kept as ``UnknownNode`` so that one bad node never aborts
the document; only input that cannot be read at all raises.
"""
import json
import logging
import re
from pathlib import Path
from typing import (
    Any,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
)

from core.errors import ErrorContext, GrapheInputError
from data.schemas import (
    MarkerNode,
    MilestoneNode,
    ParagraphMarkerNode,
    ParagraphStyle,
    SectionBreakNode,
    TextNode,
    UnknownNode,
    WordNode,
)


logger = logging.getLogger(__name__)

SECTION_BREAK_TAG = "ts\\*"
SECTION_BREAK_BASE_TAG = "ts"
SECTION_BREAK_CONTENT = "\\*"

PARAGRAPH_NODE_TYPES = frozenset({"paragraph", "quote"})

# Tokenizer keys that hold structure rather than alignment metadata
_STRUCTURAL_KEYS = frozenset({"tag", "type", "text", "children", "content", "endTag", "nextChar"})

_LEADING_NUMBER = re.compile(r"^\s*(\d+)")


# =============================================================================
# NODE DECODING
# =============================================================================

def is_section_break(raw: Any) -> bool:
    """
    Check whether a raw verse object is a translation section break.

    Recognized forms: ``{"tag": "ts\\*"}``, ``{"tag": "ts", "content": "\\*"}``,
    ``{"tag": "ts", "type": "milestone"}`` and a bare string containing ``ts\\*``.
    """
    if isinstance(raw, str):
        return SECTION_BREAK_TAG in raw
    if not isinstance(raw, Mapping):
        return False

    tag = raw.get("tag")
    if tag == SECTION_BREAK_TAG:
        return True
    if tag == SECTION_BREAK_BASE_TAG:
        return (
            raw.get("content") == SECTION_BREAK_CONTENT
            or raw.get("type") == "milestone"
            or raw.get("endTag") == SECTION_BREAK_TAG
        )
    return False


def _attributes(raw: Mapping) -> Dict[str, Any]:
    return {key: value for key, value in raw.items() if key not in _STRUCTURAL_KEYS}


def _text_of(raw: Mapping) -> str:
    text = raw.get("text")
    return text if isinstance(text, str) else ""


def _build_node(raw: Any, children: Tuple[MarkerNode, ...]) -> MarkerNode:
    """Build one node; milestone children are already built."""
    if is_section_break(raw):
        return SectionBreakNode()

    if not isinstance(raw, Mapping):
        logger.debug("Skipping non-object verse node: %r", raw)
        return UnknownNode(raw=raw)

    node_type = raw.get("type")
    tag = raw.get("tag")

    if node_type == "text":
        return TextNode(value=_text_of(raw))

    if node_type == "word":
        return WordNode(value=_text_of(raw), attributes=_attributes(raw))

    if node_type == "milestone":
        return MilestoneNode(
            tag=tag if isinstance(tag, str) else "",
            children=children,
            attributes=_attributes(raw),
        )

    if node_type in PARAGRAPH_NODE_TYPES:
        style = ParagraphStyle.from_tag(tag)
        if style is None:
            logger.debug("Unknown paragraph style %r, falling back to 'p'", tag)
            style = ParagraphStyle.P
        return ParagraphMarkerNode(style=style, raw_tag=tag if isinstance(tag, str) else "")

    logger.debug("Skipping unrecognized verse node tag=%r type=%r", tag, node_type)
    return UnknownNode(raw=raw)


def _has_children(raw: Any) -> bool:
    return (
        isinstance(raw, Mapping)
        and raw.get("type") == "milestone"
        and isinstance(raw.get("children"), list)
        and bool(raw["children"])
        and not is_section_break(raw)
    )


def parse_marker_node(raw: Any) -> MarkerNode:
    """
    Decode one raw verse object into a marker node.

    Nested milestones are decoded with an explicit stack, so arbitrarily deep
    alignment nesting cannot exhaust the interpreter stack.
    """
    result: List[MarkerNode] = []
    # (raw node, built children or None on first visit, list receiving the built node)
    stack: List[Tuple[Any, Optional[List[MarkerNode]], List[MarkerNode]]] = [(raw, None, result)]

    while stack:
        node, built, sink = stack.pop()

        if built is None and _has_children(node):
            built = []
            stack.append((node, built, sink))
            for child in reversed(node["children"]):
                stack.append((child, None, built))
            continue

        sink.append(_build_node(node, tuple(built or ())))

    return result[0]


def parse_verse_objects(raw_objects: Any) -> Tuple[MarkerNode, ...]:
    """Decode a ``verseObjects`` list. Anything but a list decodes to no nodes."""
    if not isinstance(raw_objects, list):
        return ()
    return tuple(parse_marker_node(raw) for raw in raw_objects)


# =============================================================================
# DOCUMENT ACCESS
# =============================================================================

def parse_number(key: Any) -> Optional[int]:
    """
    Read a chapter or verse key. Leading digits count (``"3-4"`` is verse 3);
    keys without them (``"front"``) are not numbered.
    """
    if isinstance(key, int) and not isinstance(key, bool):
        return key
    if not isinstance(key, str):
        return None
    match = _LEADING_NUMBER.match(key)
    return int(match.group(1)) if match else None


def numbered_entries(mapping: Any) -> Iterator[Tuple[int, Any]]:
    """Yield ``(number, value)`` pairs of a chapter or verse mapping in ascending order."""
    if not isinstance(mapping, Mapping):
        return
    entries = []
    for position, (key, value) in enumerate(mapping.items()):
        number = parse_number(key)
        if number is not None:
            entries.append((number, position, value))
    for number, _, value in sorted(entries, key=lambda entry: (entry[0], entry[1])):
        yield number, value


def raw_verse_objects(entry: Any) -> Optional[List[Any]]:
    """The raw object list of a verse or front entry, or None when it has none."""
    if not isinstance(entry, Mapping):
        return None
    raw_objects = entry.get("verseObjects", entry.get("verse_objects"))
    return raw_objects if isinstance(raw_objects, list) else None


def front_matter(chapter_data: Any) -> Tuple[MarkerNode, ...]:
    """Marker nodes of a chapter's ``front`` entry, if any."""
    if not isinstance(chapter_data, Mapping):
        return ()
    return parse_verse_objects(raw_verse_objects(chapter_data.get("front")))


def load_document(data: Any, source: Optional[str] = None) -> Dict[str, Any]:
    """
    Accept tokenizer output that has already been decoded from JSON.

    Raises:
        GrapheInputError: If the top-level value is not an object
    """
    if not isinstance(data, Mapping):
        raise GrapheInputError(
            f"Tokenizer output must be a JSON object, got {type(data).__name__}",
            source_path=source,
            context=ErrorContext(operation="load_document", component="loaders", source_path=source),
        )
    return dict(data)


def load_document_json(text: Union[str, bytes], source: Optional[str] = None) -> Dict[str, Any]:
    """
    Decode tokenizer output from a JSON string.

    Raises:
        GrapheInputError: If the text is not valid JSON or not an object
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise GrapheInputError(
            f"Invalid tokenizer JSON: {e.msg} (line {e.lineno}, column {e.colno})",
            source_path=source,
            cause=e,
            context=ErrorContext.capture("load_document_json", "loaders", source_path=source),
        ) from e
    return load_document(data, source=source)


def load_document_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read tokenizer output from a JSON file.

    Args:
        path: Path to a usfm-js style JSON file

    Returns:
        The decoded document

    Raises:
        GrapheInputError: If the file cannot be read or decoded
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise GrapheInputError(
            f"Cannot read tokenizer output: {path}",
            source_path=str(path),
            cause=e,
            context=ErrorContext.capture("load_document_file", "loaders", source_path=str(path)),
        ) from e

    logger.debug("Loaded %d bytes of tokenizer output from %s", len(text), path)
    return load_document_json(text, source=str(path))
