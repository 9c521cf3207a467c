# tests/core/test_dispatch.py
from __future__ import annotations

import logging
import threading

import pytest

from tabula.core.dispatch import QueueDispatcher, TimerDispatcher


class _DummyTimer:
    """Captures the callback instead of scheduling it."""

    def __init__(self, interval: float, callback) -> None:
        self.interval = interval
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


def test_drain_runs_callbacks_in_post_order(dispatcher: QueueDispatcher) -> None:
    seen: list[int] = []
    for i in range(5):
        dispatcher.post(lambda i=i: seen.append(i))
    assert dispatcher.pending() == 5
    assert dispatcher.drain() == 5
    assert seen == [0, 1, 2, 3, 4]
    assert dispatcher.drain() == 0


def test_drain_respects_max_items(dispatcher: QueueDispatcher) -> None:
    seen: list[int] = []
    for i in range(3):
        dispatcher.post(lambda i=i: seen.append(i))
    assert dispatcher.drain(max_items=2) == 2
    assert seen == [0, 1]
    assert dispatcher.pending() == 1


def test_failing_callback_is_logged_and_others_run(
    dispatcher: QueueDispatcher, caplog: pytest.LogCaptureFixture
) -> None:
    seen: list[str] = []

    def boom() -> None:
        raise ValueError("boom")

    dispatcher.post(boom)
    dispatcher.post(lambda: seen.append("after"))
    with caplog.at_level(logging.ERROR, logger="tabula.core.dispatch"):
        assert dispatcher.drain() == 2
    assert seen == ["after"]
    assert any("boom" in (r.exc_text or "") or r.exc_info for r in caplog.records)


def test_posts_from_other_threads_run_on_draining_thread(dispatcher: QueueDispatcher) -> None:
    ran_on: list[str] = []

    def worker() -> None:
        dispatcher.post(lambda: ran_on.append(threading.current_thread().name))

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    dispatcher.drain()
    assert ran_on == [threading.current_thread().name] * 4


def test_timer_dispatcher_tick_drains_then_calls_hook() -> None:
    timers: list[_DummyTimer] = []
    order: list[str] = []

    def factory(dt, cb):
        timer = _DummyTimer(dt, cb)
        timers.append(timer)
        return timer

    d = TimerDispatcher(factory, poll_interval_s=0.1, on_tick=lambda: order.append("hook"))
    assert len(timers) == 1
    assert timers[0].interval == 0.1

    d.post(lambda: order.append("job"))
    timers[0].callback()
    assert order == ["job", "hook"]

    d.stop()
    assert timers[0].cancelled
    d.stop()
