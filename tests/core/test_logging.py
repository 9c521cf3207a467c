from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tabula.core.utils.logging import get_logger, setup_logging


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for h in root.handlers[:]:
        if h not in handlers:
            h.close()
            root.removeHandler(h)
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(level)


def test_setup_logging_writes_debug_to_file(tmp_path: Path, restore_root_logging) -> None:
    setup_logging(level="WARNING", log_dir=tmp_path)

    get_logger("tabula.test").debug("hello from the loader")
    for h in logging.getLogger().handlers:
        h.flush()

    text = (tmp_path / "tabula.log").read_text(encoding="utf-8")
    assert "hello from the loader" in text
    assert "MainThread" in text


def test_setup_logging_replaces_handlers(tmp_path: Path, restore_root_logging) -> None:
    setup_logging(log_dir=tmp_path)
    setup_logging(log_dir=tmp_path)
    root = logging.getLogger()
    assert len(root.handlers) == 2
    console = [h for h in root.handlers if not isinstance(h, logging.FileHandler)]
    assert console[0].level == logging.INFO


def test_get_logger_default_name() -> None:
    assert get_logger().name == "tabula"
