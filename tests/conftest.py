"""Pytest configuration and fixtures for tabula tests."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import pytest

from tabula.core.dispatch import QueueDispatcher
from tabula.core.errors import OpenError
from tabula.core.source import FileFormat, SourceDescriptor

SAMPLE_ROWS: List[List[str]] = [["a", "b"], ["c", "d"], ["e", "f"]]


class FakeStream:
    """Stand-in for SourceStream used by GatedTokenizer."""

    def __init__(self) -> None:
        self.closed = False

    def progress(self) -> float:
        return 0.5

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class GatedTokenizer:
    """Tokenizer that emits fixed rows and can pause mid-file.

    After ``pause_after`` rows it sets ``paused`` and blocks until ``release``
    is set. ``fail_after`` raises ``error`` once that many rows were emitted.
    """

    def __init__(
        self,
        rows: Sequence[Sequence[str]],
        *,
        pause_after: Optional[int] = None,
        fail_after: Optional[int] = None,
        error: Optional[Exception] = None,
        open_error: Optional[OpenError] = None,
    ) -> None:
        self.rows = [list(r) for r in rows]
        self.pause_after = pause_after
        self.fail_after = fail_after
        self.error = error or OSError("disk went away")
        self.open_error = open_error
        self.paused = threading.Event()
        self.release = threading.Event()
        self.opened: int = 0
        self.streams: List[FakeStream] = []
        self.stopped_early: bool = False
        self.emitted: int = 0

    def open(self, source: SourceDescriptor) -> FakeStream:
        if self.open_error is not None:
            raise self.open_error
        self.opened += 1
        stream = FakeStream()
        self.streams.append(stream)
        return stream

    def parse(self, stream, delimiter, row_callback) -> None:
        for i, row in enumerate(self.rows):
            if self.fail_after is not None and i == self.fail_after:
                raise self.error
            self.emitted += 1
            if not row_callback(i, list(row)):
                self.stopped_early = True
                return
            if self.pause_after is not None and i + 1 == self.pause_after:
                self.paused.set()
                self.release.wait(timeout=5)


def write_rows(path: Path, rows: Iterable[Sequence[str]], delimiter: str = ",") -> Path:
    path.write_text("\n".join(delimiter.join(r) for r in rows) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def gated_tokenizer() -> type[GatedTokenizer]:
    """The GatedTokenizer class, for tests that build their own."""
    return GatedTokenizer


@pytest.fixture
def sample_rows() -> List[List[str]]:
    return [list(r) for r in SAMPLE_ROWS]


@pytest.fixture
def csv_writer():
    """``write_rows(path, rows, delimiter=",")`` helper."""
    return write_rows


@pytest.fixture
def dispatcher() -> QueueDispatcher:
    return QueueDispatcher()


@pytest.fixture
def sample_csv(tmp_path: Path) -> Path:
    """Three-row comma-delimited file: a,b / c,d / e,f."""
    return write_rows(tmp_path / "sample.csv", SAMPLE_ROWS)


@pytest.fixture
def sample_source(sample_csv: Path) -> SourceDescriptor:
    return SourceDescriptor(location=sample_csv, format=FileFormat.CSV)


@pytest.fixture
def missing_source(tmp_path: Path) -> SourceDescriptor:
    return SourceDescriptor(location=tmp_path / "does-not-exist.csv")
