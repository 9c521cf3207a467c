"""Background ingestion of one delimited text file into a RowTable.

Typical use from a UI thread::

    engine = IngestionEngine(SourceDescriptor.for_path("data.tsv"), dispatcher=dispatcher)
    if not engine.start(on_loaded):
        ...  # could not open the file
    ...
    engine.request_cancel()  # blocks until the worker has exited

``on_loaded`` runs on the dispatcher's home thread, exactly once, and only
if the load was not cancelled.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from tabula.core.cancellation import CancellationCoordinator, LoadState
from tabula.core.dispatch import HomeDispatcher, QueueDispatcher
from tabula.core.errors import OpenError
from tabula.core.row_table import RowTable
from tabula.core.source import FileFormat, SourceDescriptor
from tabula.core.tokenizer import CsvTokenizer, SourceStream, Tokenizer
from tabula.core.utils.logging import get_logger
from tabula.core.utils.progress import ProgressCallback, ProgressMessage

logger = get_logger(__name__)

Completion = Callable[[], None]

DEFAULT_PROGRESS_EVERY: int = 500


@dataclass
class _LoadJob:
    """Everything the worker needs, handed over by value.

    The worker holds no reference to the engine.
    """

    source: SourceDescriptor
    stream: SourceStream
    tokenizer: Tokenizer
    table: RowTable
    coordinator: CancellationCoordinator
    dispatcher: HomeDispatcher
    completion: Completion
    progress_cb: Optional[ProgressCallback]
    progress_every: int
    errors: List[BaseException]

    def run(self) -> None:
        started = time.perf_counter()
        try:
            try:
                with self.stream:
                    self.tokenizer.parse(self.stream, self.source.delimiter, self._on_row)
            except Exception as e:
                self.errors.append(e)
                logger.error(f"Failed while reading {self.source.location}: {e}", exc_info=True)
            finally:
                cancelled = self.coordinator.finish()

            elapsed = time.perf_counter() - started
            if cancelled:
                logger.info(f"Load cancelled after {len(self.table)} rows: {self.source.location}")
                return
            if self.errors:
                return

            logger.info(f"Loaded {len(self.table)} rows in {elapsed:.3f}s: {self.source.location}")
            if self.progress_cb is not None:
                self._post_progress(self.progress_cb, "done", fraction=1.0)
            self.dispatcher.post(self.completion)
        finally:
            self.coordinator.leave()

    def _on_row(self, row_index: int, fields: List[str]) -> bool:
        self.table.append(fields)
        if self.coordinator.is_cancelled():
            return False
        if self.progress_cb is not None and (row_index + 1) % self.progress_every == 0:
            self._post_progress(self.progress_cb, "read", fraction=self.stream.progress())
        return True

    def _post_progress(self, cb: ProgressCallback, phase: str, *, fraction: Optional[float]) -> None:
        msg = ProgressMessage(
            phase=phase,
            done=len(self.table),
            total=len(self.table) if phase == "done" else None,
            fraction=fraction,
            path=self.source.location,
        )
        self.dispatcher.post(lambda: cb(msg))


class IngestionEngine:
    """Load one source into a RowTable on a background thread.

    One engine serves one source and at most one load at a time. Starting
    again after a completion, or after ``request_cancel()`` returned, clears
    the table and loads from scratch.

    Attributes:
        dispatcher: Where completions and progress are posted. When none is
            given a QueueDispatcher is created; the home thread must call
            ``engine.dispatcher.drain()``.
    """

    def __init__(
        self,
        source: SourceDescriptor,
        *,
        dispatcher: Optional[HomeDispatcher] = None,
        tokenizer: Optional[Tokenizer] = None,
        progress_cb: Optional[ProgressCallback] = None,
        progress_every: int = DEFAULT_PROGRESS_EVERY,
    ) -> None:
        if progress_every < 1:
            raise ValueError(f"progress_every must be >= 1, got {progress_every}")
        self._source = source
        self.dispatcher: HomeDispatcher = dispatcher if dispatcher is not None else QueueDispatcher()
        self._tokenizer: Tokenizer = tokenizer if tokenizer is not None else CsvTokenizer()
        self._progress_cb = progress_cb
        self._progress_every = progress_every

        self._coordinator = CancellationCoordinator()
        self._table = RowTable()
        self._errors: List[BaseException] = []
        self._load_count: int = 0

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------
    @property
    def source(self) -> SourceDescriptor:
        return self._source

    @property
    def format(self) -> FileFormat:
        return self._source.format

    @property
    def table(self) -> RowTable:
        """Rows of the latest load.

        Only meaningful after the completion ran, or after ``request_cancel()``
        returned (then possibly partial).
        """
        return self._table

    @property
    def state(self) -> LoadState:
        return self._coordinator.state

    @property
    def is_busy(self) -> bool:
        """True while a worker thread is registered (it may already be IDLE)."""
        return self._coordinator.in_flight > 0

    @property
    def last_error(self) -> Optional[BaseException]:
        """Failure that ended the latest load early, if any."""
        return self._errors[-1] if self._errors else None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def start(self, completion: Completion) -> bool:
        """Start loading in the background.

        Args:
            completion: Called on the dispatcher's home thread once the whole
                file is in ``table``. Never called for a cancelled load.

        Returns:
            False if the source could not be opened (nothing was scheduled).

        Raises:
            LoadInProgressError: a load is still LOADING or CANCELLING.
        """
        self._coordinator.check_idle()

        try:
            stream = self._tokenizer.open(self._source)
        except OpenError as e:
            logger.warning(f"Load rejected: {e}")
            return False

        try:
            self._coordinator.begin()
        except Exception:
            stream.close()
            raise

        self._errors = []
        self._table.clear()
        self._load_count += 1

        job = _LoadJob(
            source=self._source,
            stream=stream,
            tokenizer=self._tokenizer,
            table=self._table,
            coordinator=self._coordinator,
            dispatcher=self.dispatcher,
            completion=completion,
            progress_cb=self._progress_cb,
            progress_every=self._progress_every,
            errors=self._errors,
        )
        thread = threading.Thread(
            target=job.run,
            name=f"IngestionEngine-{self._source.location.name}-{self._load_count}",
            daemon=True,
        )
        logger.info(f"Load started ({self.format.value}): {self._source.location}")
        try:
            thread.start()
        except Exception:
            # worker never ran: undo registration
            self._coordinator.finish()
            self._coordinator.leave()
            stream.close()
            raise
        return True

    def request_cancel(self) -> bool:
        """Cancel the active load and wait for its worker to exit.

        No-op when nothing is loading. When this returns the table will not
        change again until the next ``start()``.

        Returns:
            True if a load was running and has been cancelled, False if there
            was nothing to cancel (its completion, if any, still fires).
        """
        cancelled = self._coordinator.request_cancel()
        if cancelled:
            logger.info(f"Load cancelled by request, {len(self._table)} rows kept: {self._source.location}")
        return cancelled

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the worker (if any) has exited.

        The completion is still only run by the dispatcher.

        Returns:
            False if ``timeout`` expired first.
        """
        return self._coordinator.wait(timeout)
