"""Source descriptor: which file to load and how to split it into fields."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

DEFAULT_ENCODING: str = "utf-8-sig"

_TSV_SUFFIXES = (".tsv", ".tab")


class FileFormat(str, Enum):
    """Delimited text formats understood by the tokenizer."""

    CSV = "csv"
    TSV = "tsv"

    @property
    def delimiter(self) -> str:
        return "\t" if self is FileFormat.TSV else ","

    @property
    def label(self) -> str:
        return "Tab-delimited" if self is FileFormat.TSV else "Comma-delimited"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "FileFormat":
        """Guess the format from a file extension (.tsv/.tab -> TSV, anything else -> CSV)."""
        if Path(path).suffix.lower() in _TSV_SUFFIXES:
            return cls.TSV
        return cls.CSV

    @classmethod
    def parse(cls, value: Union[str, "FileFormat"]) -> "FileFormat":
        """Accept an enum member or its string value ("csv"/"tsv", case-insensitive)."""
        if isinstance(value, FileFormat):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown file format {value!r}, expected one of {[f.value for f in cls]}") from None


@dataclass(frozen=True)
class SourceDescriptor:
    """Immutable description of a delimited text source.

    Attributes:
        location: Path of the file to read.
        format: CSV or TSV; determines the delimiter handed to the tokenizer.
        encoding: Text encoding used to decode the file.
        trim_leading_whitespace: Drop spaces at the start of every field.
        comment: Optional single character; records whose first character is this
            are skipped. None disables comment handling.
        skip_blank_lines: Drop empty lines. When False each one becomes a record
            holding a single empty field.
    """

    location: Path
    format: FileFormat = FileFormat.CSV
    encoding: str = DEFAULT_ENCODING
    trim_leading_whitespace: bool = True
    comment: Optional[str] = None
    skip_blank_lines: bool = True

    def __post_init__(self) -> None:
        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "location", Path(self.location).expanduser())
        object.__setattr__(self, "format", FileFormat.parse(self.format))

    @property
    def delimiter(self) -> str:
        return self.format.delimiter

    @classmethod
    def for_path(cls, path: Union[str, Path], **kwargs) -> "SourceDescriptor":
        """Build a descriptor, inferring the format from the extension unless given."""
        fmt = kwargs.pop("format", None)
        if fmt is None:
            fmt = FileFormat.from_path(path)
        return cls(location=Path(path), format=fmt, **kwargs)
