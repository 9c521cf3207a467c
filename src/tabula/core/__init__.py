"""UI-agnostic ingestion core (no NiceGUI imports allowed here)."""

from tabula import __version__

from tabula.core.cancellation import CancellationCoordinator, LoadState
from tabula.core.dispatch import QueueDispatcher, TimerDispatcher
from tabula.core.engine import IngestionEngine
from tabula.core.errors import LoadInProgressError, OpenError, TabulaError
from tabula.core.row_table import RowTable
from tabula.core.source import FileFormat, SourceDescriptor

__all__ = [
    "__version__",
    "CancellationCoordinator",
    "FileFormat",
    "IngestionEngine",
    "LoadInProgressError",
    "LoadState",
    "OpenError",
    "QueueDispatcher",
    "RowTable",
    "SourceDescriptor",
    "TabulaError",
    "TimerDispatcher",
]
