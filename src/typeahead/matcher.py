# src/typeahead/matcher.py
from __future__ import annotations
import logging
import threading
from typing import Callable, List, Optional

from .models import Catalog, QueryEvent, ResultBatch
from .normalize import fold
from .scheduler import Scheduler, TimerHandle
from . import config as CFG

log = logging.getLogger(__name__)

ResultHandler = Callable[[ResultBatch], None]


def match(catalog: Catalog, text: str, *, empty_shows_all: bool = True) -> List[str]:
    """
    Titles whose folded form contains the folded query, in catalog order.
    Empty text returns every title (or none, with empty_shows_all=False).
    No ranking and no limit; the same inputs always give the same list.
    """
    if text == "":
        return catalog.titles() if empty_shows_all else []
    needle = fold(text)
    return [e.title for e in catalog if needle in fold(e.title)]


class DebouncedMatcher:
    """
    Coalesces bursts of QueryEvents into at most one match per quiescence window.

    Idle    -> no pending query, no timer armed
    Pending -> one pending query, one timer armed against it

    Each new event replaces the pending one and re-arms the timer, so only a
    silence of at least delay_ms settles a query. Settlement runs match() and
    hands a ResultBatch to the result handler. close() cancels the armed timer;
    nothing is delivered after it.

    The pending slot and timer handle are guarded by one lock so that a
    threaded scheduler cannot interleave "replace pending" and "cancel old timer".
    """

    def __init__(
        self,
        catalog: Optional[Catalog],
        scheduler: Scheduler,
        on_results: Optional[ResultHandler] = None,
        *,
        delay_ms: int = CFG.DEBOUNCE_MS,
        empty_shows_all: bool = CFG.EMPTY_QUERY_SHOWS_ALL,
    ) -> None:
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")
        # a catalog that failed to load is searched as an empty one
        self.catalog = catalog if catalog is not None else Catalog.empty()
        self.delay_ms = int(delay_ms)
        self.empty_shows_all = empty_shows_all
        self._scheduler = scheduler
        self._on_results = on_results

        self._lock = threading.RLock()
        self._pending: Optional[QueryEvent] = None
        self._timer: Optional[TimerHandle] = None
        self._generation = 0
        self._closed = False
        # highest seq ever accepted; batches never go backwards past it
        self._last_seq: Optional[int] = None

    # ------------- state -------------

    @property
    def pending(self) -> Optional[QueryEvent]:
        return self._pending

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def set_result_handler(self, handler: Optional[ResultHandler]) -> None:
        self._on_results = handler

    def match(self, text: str) -> List[str]:
        return match(self.catalog, text, empty_shows_all=self.empty_shows_all)

    # ------------- events -------------

    def on_query_event(self, event: QueryEvent) -> None:
        """Idle/Pending -> Pending: replace the pending query and restart the clock."""
        with self._lock:
            if self._closed:
                log.debug("Matcher closed; ignoring query #%d", event.seq)
                return
            if self._last_seq is not None and event.seq < self._last_seq:
                log.debug("Out-of-order query #%d ignored (already saw #%d)", event.seq, self._last_seq)
                return
            if self._pending is not None:
                log.debug("Query #%d superseded by #%d", self._pending.seq, event.seq)
            generation = self._generation + 1
            # arm first: if the scheduler refuses, the previous state stays intact
            timer = self._scheduler.call_later(self.delay_ms, lambda: self._on_timer(generation))
            self._cancel_timer()
            self._pending = event
            self._last_seq = event.seq
            self._generation = generation
            self._timer = timer

    def flush(self) -> Optional[ResultBatch]:
        """Settle the pending query now instead of waiting out the window."""
        with self._lock:
            if self._closed or self._pending is None:
                return None
            self._cancel_timer()
            return self._settle()

    # ------------- teardown -------------

    def close(self) -> None:
        """Cancel any armed timer and drop the pending query. Safe to call twice."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._pending is not None:
                log.debug("Matcher closed with query #%d pending; discarded", self._pending.seq)
            self._cancel_timer()
            self._pending = None
            self._on_results = None

    def __enter__(self) -> "DebouncedMatcher":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ------------- internals -------------

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            # a stale timer (superseded or closed) must not deliver anything
            if self._closed or generation != self._generation or self._pending is None:
                return
            self._timer = None
            self._settle()

    def _settle(self) -> ResultBatch:
        """Pending -> Idle. Caller holds the lock."""
        event = self._pending
        assert event is not None
        self._pending = None
        self._generation += 1
        batch = ResultBatch(seq=event.seq, query=event.text, titles=tuple(self.match(event.text)))
        log.debug("Settled query #%d %r -> %d titles", batch.seq, batch.query, len(batch.titles))
        if self._on_results is not None:
            self._on_results(batch)
        return batch

    def _cancel_timer(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
