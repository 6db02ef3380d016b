"""
GRAPHE - Marker Tree Normalizer

Flattens one verse's marker tree into readable text.

Text and word nodes contribute their literal text in document order;
alignment milestones contribute the text of their children; paragraph
markers, section breaks and unrecognized nodes contribute nothing.
"""
import logging
import re
from typing import Any, List, Sequence

from data.loaders import parse_verse_objects
from data.schemas import (
    MarkerNode,
    MilestoneNode,
    TextNode,
    WordNode,
)


logger = logging.getLogger(__name__)

# Residual "\*" and "\\*" closers left in text by the tokenizer
_MARKER_ARTIFACT = re.compile(r"\\\\?\*")
_WHITESPACE = re.compile(r"\s+")


class MarkerTreeNormalizer:
    """
    Depth-first text extraction over marker nodes.

    Traversal uses an explicit stack, so nesting depth is bounded only by
    memory. The normalizer holds no state between calls.
    """

    def normalize(self, nodes: Sequence[MarkerNode]) -> str:
        """
        Produce the whitespace-normalized text of a verse.

        Args:
            nodes: Top-level marker nodes of one verse

        Returns:
            Trimmed text with whitespace runs collapsed; empty when the
            verse has no text content
        """
        parts: List[str] = []
        stack: List[MarkerNode] = list(reversed(nodes))

        while stack:
            node = stack.pop()
            if isinstance(node, TextNode):
                parts.append(_MARKER_ARTIFACT.sub("", node.value))
            elif isinstance(node, WordNode):
                parts.append(node.value.replace("*", ""))
            elif isinstance(node, MilestoneNode):
                stack.extend(reversed(node.children))

        return _WHITESPACE.sub(" ", "".join(parts)).strip()


_default_normalizer = MarkerTreeNormalizer()


def normalize_verse_objects(raw_objects: Any) -> str:
    """Decode and normalize a raw ``verseObjects`` list in one step."""
    return _default_normalizer.normalize(parse_verse_objects(raw_objects))
