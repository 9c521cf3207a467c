# tests/core/test_source.py
from __future__ import annotations

from pathlib import Path

import pytest

from tabula.core.source import DEFAULT_ENCODING, FileFormat, SourceDescriptor


@pytest.mark.parametrize(
    "name,expected",
    [
        ("data.csv", FileFormat.CSV),
        ("data.TSV", FileFormat.TSV),
        ("data.tab", FileFormat.TSV),
        ("data.txt", FileFormat.CSV),
        ("data", FileFormat.CSV),
    ],
)
def test_format_from_path(name: str, expected: FileFormat) -> None:
    assert FileFormat.from_path(name) is expected


def test_format_delimiter_and_label() -> None:
    assert FileFormat.CSV.delimiter == ","
    assert FileFormat.TSV.delimiter == "\t"
    assert FileFormat.TSV.label == "Tab-delimited"


def test_format_parse() -> None:
    assert FileFormat.parse(" TSV ") is FileFormat.TSV
    assert FileFormat.parse(FileFormat.CSV) is FileFormat.CSV
    with pytest.raises(ValueError):
        FileFormat.parse("xlsx")


def test_descriptor_normalizes_location_and_format() -> None:
    src = SourceDescriptor(location="~/table.tsv", format="tsv")  # type: ignore[arg-type]
    assert isinstance(src.location, Path)
    assert "~" not in str(src.location)
    assert src.format is FileFormat.TSV
    assert src.delimiter == "\t"
    assert src.encoding == DEFAULT_ENCODING
    assert src.trim_leading_whitespace is True
    assert src.comment is None


def test_descriptor_is_immutable_and_comparable(tmp_path: Path) -> None:
    a = SourceDescriptor(location=tmp_path / "x.csv")
    b = SourceDescriptor(location=str(tmp_path / "x.csv"))  # type: ignore[arg-type]
    assert a == b
    with pytest.raises(AttributeError):
        a.format = FileFormat.TSV  # type: ignore[misc]


def test_for_path_infers_format_unless_given(tmp_path: Path) -> None:
    assert SourceDescriptor.for_path(tmp_path / "x.tsv").format is FileFormat.TSV
    src = SourceDescriptor.for_path(tmp_path / "x.tsv", format=FileFormat.CSV, comment="#")
    assert src.format is FileFormat.CSV
    assert src.comment == "#"


def test_descriptor_keeps_blank_line_choice(tmp_path: Path) -> None:
    assert SourceDescriptor(location=tmp_path / "x.csv").skip_blank_lines is True
    a = SourceDescriptor(location=tmp_path / "x.csv", skip_blank_lines=False)
    assert a.skip_blank_lines is False
    assert a != SourceDescriptor(location=tmp_path / "x.csv")
