"""Marshal callbacks from the loader thread back to the home thread.

The worker never calls user code directly. It posts callables into a
thread-safe queue, and the home thread (usually the NiceGUI event loop,
via ``ui.timer``) drains that queue.
"""

from __future__ import annotations

import queue
from typing import Callable, Optional, Protocol

from tabula.core.utils.logging import get_logger

logger = get_logger(__name__)

Callback = Callable[[], None]
TimerFactory = Callable[[float, Callable[[], None]], object]


class HomeDispatcher(Protocol):
    def post(self, fn: Callback) -> None: ...


class QueueDispatcher:
    """Thread-safe FIFO of callbacks, run by whichever thread calls ``drain()``.

    ``post()`` never blocks, so a worker can post while the home thread is
    itself blocked in ``request_cancel()``.
    """

    max_per_tick: int = 200

    def __init__(self) -> None:
        self._q: "queue.Queue[Callback]" = queue.Queue()

    def post(self, fn: Callback) -> None:
        self._q.put(fn)

    def pending(self) -> int:
        return self._q.qsize()

    def drain(self, max_items: Optional[int] = None) -> int:
        """Run queued callbacks on the calling thread.

        A callback that raises is logged and does not stop the others.

        Returns:
            Number of callbacks run.
        """
        limit = self.max_per_tick if max_items is None else max_items
        n = 0
        while n < limit:
            try:
                fn = self._q.get_nowait()
            except queue.Empty:
                break
            n += 1
            try:
                fn()
            except Exception:
                logger.exception(f"Exception in posted callback {getattr(fn, '__qualname__', fn)!r}")
        return n


class TimerDispatcher(QueueDispatcher):
    """QueueDispatcher drained by a periodic UI timer.

    Create it on the home thread. ``ui_timer_factory(interval, callback)``
    must return an object with ``cancel()``; with NiceGUI::

        TimerDispatcher(lambda dt, cb: ui.timer(dt, cb), poll_interval_s=0.05)

    ``on_tick`` hooks run after every drain, on the home thread.
    """

    def __init__(
        self,
        ui_timer_factory: TimerFactory,
        poll_interval_s: float = 0.05,
        on_tick: Optional[Callback] = None,
    ) -> None:
        super().__init__()
        self._on_tick = on_tick
        self._timer = ui_timer_factory(poll_interval_s, self.tick)

    def tick(self) -> None:
        self.drain()
        if self._on_tick is not None:
            self._on_tick()

    def stop(self) -> None:
        if self._timer is not None:
            try:
                self._timer.cancel()
            except Exception:
                logger.debug("timer cancel failed", exc_info=True)
            self._timer = None
