import asyncio
import threading

import pytest
from typeahead.loader import catalog_from_titles
from typeahead.matcher import DebouncedMatcher
from typeahead.models import QueryEvent, ResultBatch
from typeahead.scheduler import (
    AsyncioScheduler,
    SchedulerError,
    ThreadingScheduler,
    TkScheduler,
    VirtualClock,
)


def test_virtual_clock_fires_in_due_order():
    clock = VirtualClock()
    fired: list[str] = []
    clock.call_later(30, lambda: fired.append("c"))
    clock.call_later(10, lambda: fired.append("a"))
    clock.call_later(10, lambda: fired.append("b"))
    assert clock.advance(9) == 0
    assert clock.advance(1) == 2
    assert fired == ["a", "b"]
    clock.advance(100)
    assert fired == ["a", "b", "c"]
    assert clock.now == 110


def test_virtual_clock_cancel_and_run_all():
    clock = VirtualClock()
    fired: list[int] = []
    h = clock.call_later(5, lambda: fired.append(1))
    clock.call_later(5_000, lambda: fired.append(2))
    h.cancel()
    assert clock.pending == 1
    assert clock.run_all() == 1
    assert fired == [2] and clock.pending == 0


def test_virtual_clock_rejects_going_backwards():
    with pytest.raises(ValueError):
        VirtualClock().advance(-1)


class FakeTkWidget:
    """after/after_cancel double that records calls instead of running a Tk loop."""
    def __init__(self):
        self.scheduled: dict[str, tuple[int, object]] = {}
        self.cancelled: list[str] = []
        self._n = 0

    def after(self, ms, func):
        self._n += 1
        after_id = f"after#{self._n}"
        self.scheduled[after_id] = (ms, func)
        return after_id

    def after_cancel(self, after_id):
        self.cancelled.append(after_id)
        self.scheduled.pop(after_id, None)


def test_tk_scheduler_uses_after_and_after_cancel():
    w = FakeTkWidget()
    batches: list[ResultBatch] = []
    m = DebouncedMatcher(catalog_from_titles(["Alien", "Inception"]), TkScheduler(w), batches.append, delay_ms=300)
    m.on_query_event(QueryEvent("a", 1))
    m.on_query_event(QueryEvent("al", 2))
    assert w.cancelled == ["after#1"]
    assert list(w.scheduled) == ["after#2"]
    ms, func = w.scheduled["after#2"]
    assert ms == 300
    func()   # the Tk loop firing the timer
    assert batches == [ResultBatch(seq=2, query="al", titles=("Alien",))]


def test_tk_scheduler_close_cancels_pending_after():
    w = FakeTkWidget()
    m = DebouncedMatcher(catalog_from_titles(["Alien"]), TkScheduler(w), lambda b: None)
    m.on_query_event(QueryEvent("a", 1))
    m.close()
    assert w.cancelled == ["after#1"] and w.scheduled == {}


def test_tk_scheduler_requires_a_widget():
    with pytest.raises(SchedulerError):
        TkScheduler(object())


def test_asyncio_scheduler_debounces_on_running_loop():
    batches: list[ResultBatch] = []

    async def scenario():
        m = DebouncedMatcher(catalog_from_titles(["Alien", "Aliens"]), AsyncioScheduler(), batches.append, delay_ms=50)
        m.on_query_event(QueryEvent("ali", 1))
        await asyncio.sleep(0)
        m.on_query_event(QueryEvent("aliens", 2))
        await asyncio.sleep(0.3)
        m.close()

    asyncio.run(scenario())
    assert [(b.seq, b.titles) for b in batches] == [(2, ("Aliens",))]


def test_asyncio_scheduler_without_loop_is_a_config_error():
    with pytest.raises(SchedulerError):
        AsyncioScheduler().call_later(10, lambda: None)


def test_threading_scheduler_settles_on_timer_thread():
    done = threading.Event()
    batches: list[ResultBatch] = []

    def on_results(batch):
        batches.append(batch)
        done.set()

    m = DebouncedMatcher(catalog_from_titles(["Alien", "Inception"]), ThreadingScheduler(), on_results, delay_ms=20)
    m.on_query_event(QueryEvent("x", 1))
    m.on_query_event(QueryEvent("inc", 2))
    assert done.wait(5.0)
    m.close()
    assert [b.seq for b in batches] == [2]


def test_threading_scheduler_close_prevents_delivery():
    batches: list[ResultBatch] = []
    m = DebouncedMatcher(catalog_from_titles(["Alien"]), ThreadingScheduler(), batches.append, delay_ms=50)
    m.on_query_event(QueryEvent("a", 1))
    m.close()
    threading.Event().wait(0.2)
    assert batches == []
