# src/typeahead/scheduler.py
"""
Timer services injected into the debounced matcher.

Every scheduler offers one capability:

    handle = scheduler.call_later(delay_ms, callback)
    handle.cancel()

Implementations:
  - VirtualClock:       deterministic, advanced by hand (tests, --replay)
  - TkScheduler:        widget.after / widget.after_cancel (desktop window)
  - AsyncioScheduler:   loop.call_later
  - ThreadingScheduler: daemon threading.Timer per call
"""
from __future__ import annotations
import asyncio
import heapq
import itertools
import threading
from typing import Any, Callable, List, Optional, Protocol, Tuple


Callback = Callable[[], None]


class SchedulerError(RuntimeError):
    """The timer service cannot arm timers; a configuration error, not a per-query one."""


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callback) -> TimerHandle: ...


# ------------- virtual clock -------------

class _VirtualTimer:
    __slots__ = ("due", "callback", "cancelled")

    def __init__(self, due: int, callback: Callback) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualClock:
    """
    Single-threaded fake time. Nothing fires until advance() is called;
    due callbacks then run synchronously, earliest first (ties in arming order).
    """

    def __init__(self, start_ms: int = 0) -> None:
        self._now = int(start_ms)
        self._queue: List[Tuple[int, int, _VirtualTimer]] = []
        self._counter = itertools.count()

    @property
    def now(self) -> int:
        return self._now

    @property
    def pending(self) -> int:
        """Number of armed, not-cancelled timers."""
        return sum(1 for _, _, t in self._queue if not t.cancelled)

    def call_later(self, delay_ms: int, callback: Callback) -> _VirtualTimer:
        timer = _VirtualTimer(self._now + max(0, int(delay_ms)), callback)
        heapq.heappush(self._queue, (timer.due, next(self._counter), timer))
        return timer

    def advance(self, ms: int) -> int:
        """Move time forward by ms, firing everything that falls due. Returns callbacks run."""
        if ms < 0:
            raise ValueError("cannot advance a clock backwards")
        target = self._now + int(ms)
        fired = 0
        # callbacks may arm new timers; keep draining until nothing is due
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = due
            timer.cancelled = True
            timer.callback()
            fired += 1
        self._now = target
        return fired

    def run_all(self) -> int:
        """Fire every armed timer, however far in the future."""
        fired = 0
        while self._queue:
            fired += self.advance(max(0, self._queue[0][0] - self._now))
            # drop cancelled heads so the loop terminates
            while self._queue and self._queue[0][2].cancelled:
                heapq.heappop(self._queue)
        return fired


# ------------- tk event loop -------------

class _TkTimer:
    def __init__(self, widget: Any, after_id: str) -> None:
        self._widget = widget
        self._after_id: Optional[str] = after_id

    def cancel(self) -> None:
        if self._after_id is None:
            return
        after_id, self._after_id = self._after_id, None
        self._widget.after_cancel(after_id)


class TkScheduler:
    """Timers on a Tk (or customtkinter) widget's event loop; callbacks run on the UI thread."""

    def __init__(self, widget: Any) -> None:
        if not hasattr(widget, "after") or not hasattr(widget, "after_cancel"):
            raise SchedulerError(f"{widget!r} has no after()/after_cancel(); not a Tk widget")
        self._widget = widget

    def call_later(self, delay_ms: int, callback: Callback) -> _TkTimer:
        return _TkTimer(self._widget, self._widget.after(int(delay_ms), callback))


# ------------- asyncio -------------

class AsyncioScheduler:
    """Timers on an asyncio loop. Without an explicit loop, the running loop is used."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def _resolve_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError as exc:
            raise SchedulerError("AsyncioScheduler used outside a running event loop") from exc

    def call_later(self, delay_ms: int, callback: Callback) -> asyncio.TimerHandle:
        loop = self._resolve_loop()
        if loop.is_closed():
            raise SchedulerError("AsyncioScheduler loop is closed")
        return loop.call_later(max(0, delay_ms) / 1000.0, callback)


# ------------- threads -------------

class ThreadingScheduler:
    """
    One daemon threading.Timer per call. Callbacks run on the timer thread,
    so whatever they touch must be locked (DebouncedMatcher is).
    """

    def call_later(self, delay_ms: int, callback: Callback) -> threading.Timer:
        timer = threading.Timer(max(0, delay_ms) / 1000.0, callback)
        timer.daemon = True
        timer.start()
        return timer
