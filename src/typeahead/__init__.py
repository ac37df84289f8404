"""
Type-ahead Search Module

Live search over a static movie catalog. Raw keystrokes go in through a
QuerySource, a DebouncedMatcher waits for the user to pause, and one ordered
ResultBatch per settled query comes out to whoever renders it.

The module is split by concern:
- Catalog loading (JSON file -> immutable Catalog)
- Case-insensitive substring matching
- Debounce state machine driven by an injected scheduler
- Engine wiring for the CLI, the Flask page and the desktop window

Example Usage:
    from typeahead import Engine, VirtualClock

    clock = VirtualClock()
    eng = Engine(clock)
    eng.load()
    eng.subscribe(lambda batch: print(batch.seq, batch.titles))

    eng.on_text_changed("inc")
    eng.on_text_changed("incep")
    clock.advance(300)          # prints: 2 ('Inception',)
"""

# src/typeahead/__init__.py
from .models import Catalog, CatalogEntry, QueryEvent, ResultBatch  # re-export
from .loader import load_catalog
from .matcher import DebouncedMatcher, match
from .source import QuerySource
from .scheduler import AsyncioScheduler, SchedulerError, ThreadingScheduler, TkScheduler, VirtualClock
from .engine import Engine

__version__ = "1.0.0"
__all__ = [
    "Catalog",
    "CatalogEntry",
    "QueryEvent",
    "ResultBatch",
    "load_catalog",
    "match",
    "DebouncedMatcher",
    "QuerySource",
    "Engine",
    "VirtualClock",
    "TkScheduler",
    "AsyncioScheduler",
    "ThreadingScheduler",
    "SchedulerError",
]
