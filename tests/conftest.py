"""
GRAPHE - Test Configuration

Pytest fixtures and configuration for all tests.
"""
import json
from pathlib import Path
from typing import Any, Dict

import pytest

from config import ProcessingConfig
from data.schemas import Scripture
from pipeline.builder import ScriptureBuilder
from tests.usfm import document, numbered_chapter, text, verse, word, zaln


PROCESSING_DATE = "2024-01-01"


@pytest.fixture
def processing_config() -> ProcessingConfig:
    """Processing defaults independent of the environment."""
    return ProcessingConfig(
        default_paragraph_style="p",
        section_title_template="Section {n}",
        processing_version="1.0",
    )


@pytest.fixture
def builder(processing_config) -> ScriptureBuilder:
    return ScriptureBuilder(processing_config)


@pytest.fixture
def jonah_document() -> Dict[str, Any]:
    """
    Two chapters of Jonah-shaped tokenizer output.

    Chapter 1 (16 verses): section breaks at 1, 4 and 11; paragraphs at 1, 4, 11.
    Chapter 2 (10 verses): front matter ``p``; section break at 1;
    poetry q1 at 2, q2 at 3, q1 at 5, prose p at 8.
    """
    chapter_one = numbered_chapter(1, 16, breaks=(1, 4, 11), styles={1: "p", 4: "p", 11: "p"})
    chapter_one["1"] = verse(
        {"tag": "ts\\*"},
        {"tag": "p", "type": "paragraph"},
        zaln(word("Now"), strong="H1961"),
        text(" the word of "),
        zaln(word("Yahweh")),
        text(" came to Jonah. "),
    )
    chapter_two = numbered_chapter(
        2, 10, breaks=(1,), styles={2: "q1", 3: "q2", 5: "q1", 8: "p"}, front="p",
    )
    return document({1: chapter_one, 2: chapter_two})


@pytest.fixture
def jonah(builder, jonah_document) -> Scripture:
    return builder.build(jonah_document, "JON", processing_date=PROCESSING_DATE)


@pytest.fixture
def jonah_file(tmp_path, jonah_document) -> Path:
    """Jonah tokenizer output written to disk."""
    path = tmp_path / "jonah.json"
    path.write_text(json.dumps(jonah_document, ensure_ascii=False), encoding="utf-8")
    return path


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "property: marks property-based tests using Hypothesis")
    config.addinivalue_line("markers", "cli: marks command-line interface tests")
