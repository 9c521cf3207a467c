"""Tokenizer adapter: open a delimited text file and stream its records.

The engine only needs two things from a tokenizer:

- ``open(source)`` returns a ready stream or raises ``OpenError``.
- ``parse(stream, delimiter, row_callback)`` calls ``row_callback(row_index, fields)``
  once per record, synchronously, and stops the first time it returns False.

``CsvTokenizer`` implements this on top of the standard library ``csv`` reader
(RFC 4180 quoting, embedded newlines, doubled quotes).
"""

from __future__ import annotations

import codecs
import csv
import io
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, Iterator, List, Optional, Protocol, TextIO

from tabula.core.errors import OpenError
from tabula.core.source import SourceDescriptor
from tabula.core.utils.logging import get_logger

logger = get_logger(__name__)

RowCallback = Callable[[int, List[str]], bool]


@dataclass
class SourceStream:
    """An opened source, owned by exactly one load.

    ``raw`` is the underlying binary file; its position drives ``progress()``
    (the text layer reads ahead in chunks, so this is approximate).
    """

    path: Path
    text: TextIO
    raw: BinaryIO
    size: int
    trim_leading_whitespace: bool = True
    comment: Optional[str] = None
    skip_blank_lines: bool = True

    def progress(self) -> float:
        if self.size <= 0 or self.raw.closed:
            return 1.0
        try:
            return min(1.0, self.raw.tell() / self.size)
        except (OSError, ValueError):
            return 0.0

    def close(self) -> None:
        # closing the text wrapper closes raw as well
        if not self.text.closed:
            self.text.close()

    def __enter__(self) -> "SourceStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class Tokenizer(Protocol):
    def open(self, source: SourceDescriptor) -> SourceStream: ...

    def parse(self, stream: SourceStream, delimiter: str, row_callback: RowCallback) -> None: ...


class CsvTokenizer:
    """Tokenizer backed by :mod:`csv`."""

    def open(self, source: SourceDescriptor) -> SourceStream:
        """Open ``source.location`` for parsing.

        Raises:
            OpenError: missing path, directory, unreadable file, unknown encoding
                or unusable delimiter.
        """
        path = source.location
        _check_delimiter(source.delimiter)
        if source.comment is not None and len(source.comment) != 1:
            raise OpenError(f"Invalid comment character {source.comment!r}: expected a single character")
        try:
            codecs.lookup(source.encoding)
        except LookupError:
            raise OpenError(f"Unknown text encoding {source.encoding!r} for {path}") from None

        if not path.exists():
            raise OpenError(f"File does not exist: {path}")
        if path.is_dir():
            raise OpenError(f"Path is a directory, not a file: {path}")

        try:
            raw = open(path, "rb")
        except OSError as e:
            raise OpenError(f"Unable to open {path}: {e.strerror or e}") from e

        try:
            size = os.fstat(raw.fileno()).st_size
        except OSError:
            size = 0

        # newline="" hands CR/LF handling to the csv module (embedded newlines in quotes)
        text = io.TextIOWrapper(raw, encoding=source.encoding, errors="replace", newline="")
        logger.debug(f"opened {path} ({size} bytes, encoding={source.encoding})")
        return SourceStream(
            path=path,
            text=text,
            raw=raw,
            size=size,
            trim_leading_whitespace=source.trim_leading_whitespace,
            comment=source.comment,
            skip_blank_lines=source.skip_blank_lines,
        )

    def parse(self, stream: SourceStream, delimiter: str, row_callback: RowCallback) -> None:
        """Drive ``row_callback`` once per record until EOF or until it returns False.

        Blank lines produce no record and do not consume a row index unless
        ``stream.skip_blank_lines`` is False, in which case each one is a
        record with a single empty field.
        """
        _check_delimiter(delimiter)
        _raise_field_size_limit()
        feed = _RecordLines(stream.text, stream.comment)
        reader = csv.reader(
            feed,
            delimiter=delimiter,
            quotechar='"',
            doublequote=True,
            skipinitialspace=stream.trim_leading_whitespace,
            strict=False,
        )
        row_index = 0
        for fields in reader:
            feed.at_record_start = True
            if not fields:
                if stream.skip_blank_lines:
                    continue
                fields = [""]
            if not row_callback(row_index, fields):
                logger.debug(f"row callback stopped parsing at row {row_index}")
                return
            row_index += 1


# largest field size csv accepts on every platform (a C long)
_FIELD_SIZE_LIMIT: int = min(sys.maxsize, 2**31 - 1)


def _raise_field_size_limit() -> None:
    if csv.field_size_limit() < _FIELD_SIZE_LIMIT:
        csv.field_size_limit(_FIELD_SIZE_LIMIT)


def _check_delimiter(delimiter: str) -> None:
    if not isinstance(delimiter, str) or len(delimiter) != 1 or delimiter in ('"', "\r", "\n"):
        raise OpenError(f"Invalid field delimiter {delimiter!r}: expected a single character")


class _RecordLines:
    """Line feed for ``csv.reader`` that drops comment records.

    The reader pulls one physical line at a time and only pulls the line after
    a finished record once ``parse()`` has set ``at_record_start``. A line is a
    comment only when it starts a record, so lines continuing a quoted field
    are always kept, and a comment line is never seen by the reader.
    """

    def __init__(self, lines: Iterable[str], comment: Optional[str]) -> None:
        self._lines = lines
        self._comment = comment
        self.at_record_start = True

    def __iter__(self) -> Iterator[str]:
        for line in self._lines:
            if self.at_record_start and self._comment and line.startswith(self._comment):
                continue
            self.at_record_start = False
            yield line
