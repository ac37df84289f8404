# src/typeahead/engine.py
from __future__ import annotations

import os
import logging
from typing import Iterable, List, Optional

from . import config as CFG
from .models import Catalog, CatalogEntry, QueryEvent, ResultBatch
from .loader import load_catalog
from .matcher import DebouncedMatcher, ResultHandler, match
from .scheduler import Scheduler, SchedulerError
from .source import QuerySource

log = logging.getLogger(__name__)


class _NoScheduler:
    """Placeholder for engines that only serve synchronous search()."""

    def call_later(self, delay_ms, callback):
        raise SchedulerError(
            "No scheduler configured; pass one to Engine(...) to use on_text_changed()."
        )


class Engine:
    """
    Thin orchestration layer that glues together:
      - the catalog (loaded once, read-only),
      - QuerySource -> DebouncedMatcher (the debounced pipeline),
      - the result handlers of whatever surface renders the batches.

    Public API (used by CLI/Flask/desktop):
      * load(path):            read catalog JSON -> wire pipeline
      * use_catalog(entries):  wire against an in-memory catalog
      * subscribe(handler):    register an on_results_ready(batch) callback
      * on_text_changed(text): inbound keystroke -> debounced batch later
      * search(text):          immediate, undebounced match
      * shutdown():            cancel any armed timer, drop handlers
    """

    # ------------- lifecycle -------------

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        *,
        delay_ms: int = CFG.DEBOUNCE_MS,
        empty_shows_all: bool = CFG.EMPTY_QUERY_SHOWS_ALL,
    ) -> None:
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")
        self._scheduler: Scheduler = scheduler if scheduler is not None else _NoScheduler()
        self.delay_ms = int(delay_ms)
        self.empty_shows_all = empty_shows_all

        self.catalog: Optional[Catalog] = None
        self._source: Optional[QuerySource] = None
        self._matcher: Optional[DebouncedMatcher] = None
        self._handlers: List[ResultHandler] = []
        self.latest: Optional[ResultBatch] = None

    # /* ~~~ Load the catalog from disk and wire up the pipeline ~~~ */
    def load(self, path: Optional[str] = None, *, verbose: bool = False) -> int:
        if verbose:
            logging.basicConfig(level=logging.INFO)
            os.environ["TYPEAHEAD_VERBOSE"] = "1"
            CFG.VERBOSE = True
        log.info("Loading catalog from %s", path or CFG.CATALOG_PATH)
        return self.use_catalog(load_catalog(path))

    # /* ~~~ Wire the pipeline against an already materialized catalog ~~~ */
    def use_catalog(self, entries: Iterable[CatalogEntry]) -> int:
        catalog = entries if isinstance(entries, Catalog) else Catalog.of(entries)
        if self._matcher is not None:
            # reloading replaces the pipeline; an armed timer of the old one must not fire
            self._matcher.close()

        self.catalog = catalog
        self._matcher = DebouncedMatcher(
            catalog,
            self._scheduler,
            self._deliver,
            delay_ms=self.delay_ms,
            empty_shows_all=self.empty_shows_all,
        )
        self._source = QuerySource(self._matcher.on_query_event)
        self.latest = None
        log.info("Engine ready: entries=%d delay_ms=%d", len(catalog), self.delay_ms)
        return len(catalog)

    def subscribe(self, handler: ResultHandler) -> None:
        self._handlers.append(handler)

    def unsubscribe(self, handler: ResultHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    # ------------- query -------------

    def on_text_changed(self, text: str) -> QueryEvent:
        """Inbound: one raw input change. Results arrive later via subscribed handlers."""
        return self._require_source().emit(text)

    def search(self, text: str) -> List[str]:
        """Immediate match, bypassing the debounce (CLI and HTTP requests)."""
        if self.catalog is None:
            raise RuntimeError("Engine not initialized. Call load() or use_catalog() first.")
        return match(self.catalog, text, empty_shows_all=self.empty_shows_all)

    def flush(self) -> Optional[ResultBatch]:
        """Settle the pending query now (e.g. the user pressed Enter)."""
        if self._matcher is None:
            return None
        return self._matcher.flush()

    @property
    def is_pending(self) -> bool:
        return self._matcher is not None and self._matcher.is_pending

    # ------------- teardown -------------

    # /* ~~~ Cancel the armed timer and release handlers ~~~ */
    def shutdown(self) -> None:
        try:
            if self._matcher:
                self._matcher.close()
        finally:
            self._matcher = None
            self._source = None
            self._handlers.clear()
            log.info("Engine shutdown complete")

    def __enter__(self) -> "Engine":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()

    # ------------- internals -------------

    def _require_source(self) -> QuerySource:
        if self._source is None:
            raise RuntimeError("Engine not initialized. Call load() or use_catalog() first.")
        return self._source

    def _deliver(self, batch: ResultBatch) -> None:
        """Consumer-side ordering check: never render a batch older than the last one."""
        if self.latest is not None and batch.seq < self.latest.seq:
            log.warning("Dropping stale batch #%d (already delivered #%d)", batch.seq, self.latest.seq)
            return
        self.latest = batch
        for handler in list(self._handlers):
            handler(batch)
