"""Shared fixtures."""

import logging

import pytest

from src.utils import logging_config


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging(): root handlers, level and context."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    logging_config.pop_context()
