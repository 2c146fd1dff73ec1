"""Tests for logging setup."""

import logging
import logging.handlers
import os

import pytest

from TexPatch.core import setup_logging


@pytest.fixture
def editor_logger():
    target = logging.getLogger("texpatch")
    saved = (list(target.handlers), target.level, target.propagate)
    yield target
    for handler in target.handlers:
        if handler not in saved[0]:
            handler.close()
    target.handlers[:] = saved[0]
    target.setLevel(saved[1])
    target.propagate = saved[2]


def test_repeat_setup_replaces_handlers(tmp_dir, editor_logger) -> None:
    log_file = os.path.join(tmp_dir, "logs", "texpatch.log")
    before = list(editor_logger.handlers)

    setup_logging("DEBUG", log_file)
    setup_logging("DEBUG", log_file)

    added = [h for h in editor_logger.handlers if h not in before]
    assert len(added) == 2
    assert sum(isinstance(h, logging.handlers.RotatingFileHandler) for h in added) == 1
    assert editor_logger.level == logging.DEBUG
    assert editor_logger.propagate is False
    assert os.path.isdir(os.path.join(tmp_dir, "logs"))


def test_file_receives_child_logger_records(tmp_dir, editor_logger) -> None:
    log_file = os.path.join(tmp_dir, "texpatch.log")
    setup_logging("INFO", log_file)

    logging.getLogger("texpatch.pipeline").warning("[a.assets.json/1]: failed to read")
    for handler in editor_logger.handlers:
        handler.flush()

    with open(log_file, "r", encoding="utf-8") as f:
        content = f.read()
    assert "[WARNING] texpatch.pipeline: [a.assets.json/1]: failed to read" in content


def test_root_logger_untouched(editor_logger) -> None:
    root = logging.getLogger()
    before = list(root.handlers)
    setup_logging("WARNING")
    assert root.handlers == before
    assert editor_logger.level == logging.WARNING


def test_unknown_level_rejected(editor_logger) -> None:
    with pytest.raises(ValueError, match="LOUD"):
        setup_logging("LOUD")
