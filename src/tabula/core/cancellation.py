"""Load state and cancellation handshake shared by the engine and its worker.

One ``threading.Condition`` guards the load state, the cancellation flag and
a counter of registered background jobs. A canceller sets the flag and then
waits on the condition until every registered job has left.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Optional

from tabula.core.errors import LoadInProgressError
from tabula.core.utils.logging import get_logger

logger = get_logger(__name__)


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    CANCELLING = "cancelling"


class CancellationCoordinator:
    """Co-owned by an engine and its background worker.

    Lifecycle of one load::

        begin()            caller thread: IDLE -> LOADING, job registered
        is_cancelled()     worker, after every row
        finish()           worker: -> IDLE, returns whether the load was cancelled
        leave()            worker, in a finally: job deregistered, waiters woken

    ``request_cancel()`` may be called from any thread at any time.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._state: LoadState = LoadState.IDLE
        self._cancel_event = threading.Event()
        self._in_flight: int = 0

    @property
    def state(self) -> LoadState:
        with self._cond:
            return self._state

    @property
    def in_flight(self) -> int:
        with self._cond:
            return self._in_flight

    def is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def check_idle(self) -> None:
        """Raise LoadInProgressError unless no load is active."""
        with self._cond:
            if self._state is not LoadState.IDLE:
                raise LoadInProgressError(
                    f"Cannot start a load while the previous one is {self._state.value}"
                )

    def begin(self) -> None:
        """Mark a new load active and register its background job.

        Registration happens on the caller's thread, before the worker exists,
        so a cancel arriving before the worker runs still waits for it.
        """
        with self._cond:
            if self._state is not LoadState.IDLE:
                raise LoadInProgressError(
                    f"Cannot start a load while the previous one is {self._state.value}"
                )
            self._cancel_event.clear()
            self._state = LoadState.LOADING
            self._in_flight += 1

    def finish(self) -> bool:
        """Return to IDLE once the tokenizer has stopped.

        Returns:
            True if the load was cancelled.
        """
        with self._cond:
            self._state = LoadState.IDLE
            return self._cancel_event.is_set()

    def leave(self) -> None:
        with self._cond:
            self._in_flight -= 1
            # a worker that died before finish() must not leave the engine stuck
            if self._in_flight == 0 and self._state is not LoadState.IDLE:
                self._state = LoadState.IDLE
            self._cond.notify_all()

    def request_cancel(self) -> bool:
        """Ask the active load to stop and block until its worker has exited.

        No-op when IDLE. Safe to call from the thread that receives the
        completion, the worker never waits on that thread.

        Returns:
            True if a load was active and has now been cancelled.
        """
        with self._cond:
            if self._state is LoadState.IDLE:
                return False
            self._cancel_event.set()
            self._state = LoadState.CANCELLING
            logger.debug(f"cancel requested, waiting for {self._in_flight} job(s)")
            self._cond.wait_for(lambda: self._in_flight == 0)
            return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until no job is registered.

        Returns:
            False if ``timeout`` expired first.
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._in_flight == 0, timeout=timeout)
