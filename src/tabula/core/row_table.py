"""Append-only ordered table of text rows."""

from __future__ import annotations

from typing import Iterator, List, Optional, Sequence

import pandas as pd

Row = List[str]


class RowTable:
    """Ordered rows of raw text fields, filled by the ingestion engine.

    Rows keep source order and may differ in length. Only the engine mutates
    the table; readers should look at it after a load completed or after a
    cancel returned.
    """

    def __init__(self) -> None:
        self._rows: List[Row] = []

    def append(self, fields: Sequence[str]) -> None:
        self._rows.append(list(fields))

    def clear(self) -> None:
        self._rows.clear()

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows)

    def __getitem__(self, index: int) -> Row:
        return self._rows[index]

    def __repr__(self) -> str:
        return f"RowTable(rows={len(self._rows)}, columns={self.column_count})"

    @property
    def rows(self) -> List[Row]:
        """Copy of all rows (each row copied too)."""
        return [list(r) for r in self._rows]

    @property
    def column_count(self) -> int:
        """Width of the widest row (0 for an empty table)."""
        return max((len(r) for r in self._rows), default=0)

    def to_dataframe(self, *, header: bool = False, max_rows: Optional[int] = None) -> pd.DataFrame:
        """Return the table as a DataFrame of strings.

        Ragged rows are padded with "" so every column exists. No type
        conversion is attempted.

        Args:
            header: Use the first row as column names.
            max_rows: Only include the first ``max_rows`` data rows.
        """
        rows = self._rows
        width = self.column_count

        columns: List[str]
        if header and rows:
            head = list(rows[0]) + [""] * (width - len(rows[0]))
            columns = _unique_column_names(head)
            rows = rows[1:]
        else:
            columns = [str(i) for i in range(width)]

        if max_rows is not None:
            rows = rows[:max_rows]

        padded = [list(r) + [""] * (width - len(r)) for r in rows]
        return pd.DataFrame(padded, columns=columns, dtype=str)


def _unique_column_names(names: Sequence[str]) -> List[str]:
    """Blank names become their position, duplicates get a ``_<n>`` suffix."""
    out: List[str] = []
    seen: dict[str, int] = {}
    for i, name in enumerate(names):
        name = name or str(i)
        if name in seen:
            seen[name] += 1
            name = f"{name}_{seen[name]}"
        else:
            seen[name] = 0
        out.append(name)
    return out
