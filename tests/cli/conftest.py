"""
CLI test isolation: the CLI configures root logging against CliRunner's
temporary stderr, which is closed after each invocation. Restore the root
logger so later tests do not inherit handlers bound to a closed stream.
"""
import logging

import pytest
import structlog

from observability import logging as graphe_logging


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    structlog.reset_defaults()
    graphe_logging._configured = False
