"""Progress messages emitted by the loader (UI-agnostic)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional


@dataclass(frozen=True)
class ProgressMessage:
    """Progress update emitted while a file is being ingested.

    Args:
        phase: Logical phase name ("read" while rows stream in, "done" at the end).
        done: Rows appended to the table so far.
        total: Optional total row count; None while indeterminate.
        fraction: Fraction of the source consumed (0.0 to 1.0), if known.
        detail: Short, optional detail string.
        path: Optional path associated with the update.
    """

    phase: str
    done: int = 0
    total: Optional[int] = None
    fraction: Optional[float] = None
    detail: str = ""
    path: Optional[Path] = None


ProgressCallback = Callable[[ProgressMessage], None]
