from __future__ import annotations
import json
import logging
import os
from typing import Any, Iterable, List, Optional

from .models import Catalog, CatalogEntry
from . import config as CFG

log = logging.getLogger(__name__)

# top-level key used by the bundled movies.json
_ROOT_KEY = "allMovies"

# Progress logging (set TYPEAHEAD_VERBOSE=1 or pass --verbose to enable)
PROGRESS_EVERY_ENTRIES = 1_000


def _entry_from_dict(raw: dict) -> CatalogEntry:
    tags = raw.get("genre", raw.get("tags", ()))
    if isinstance(tags, str):
        tags = [tags]
    return CatalogEntry(
        id=int(raw["id"]),
        title=str(raw["title"]),
        year=int(raw["year"]),
        tags=frozenset(str(t) for t in tags),
    )


def decode_catalog(doc: Any) -> Catalog:
    """
    Turn a parsed JSON document into a Catalog.
    Accepts {"allMovies": [...]} (the bundled format) or a bare list of entries.
    Raises ValueError/KeyError/TypeError on a malformed document.
    """
    if isinstance(doc, dict):
        if _ROOT_KEY not in doc:
            raise ValueError(f"catalog document has no {_ROOT_KEY!r} key")
        rows = doc[_ROOT_KEY]
    else:
        rows = doc
    if not isinstance(rows, list):
        raise ValueError("catalog entries must be a JSON list")

    entries: List[CatalogEntry] = []
    for i, raw in enumerate(rows):
        if not isinstance(raw, dict):
            raise TypeError(f"catalog entry #{i} is not an object")
        entries.append(_entry_from_dict(raw))
        if CFG.VERBOSE and len(entries) % PROGRESS_EVERY_ENTRIES == 0:
            log.info("[decoded] entries=%d", len(entries))
    if CFG.VERBOSE:
        log.info("[done] entries=%d", len(entries))
    return Catalog.of(entries)


def load_catalog(path: Optional[str] = None) -> Catalog:
    """
    Read a catalog JSON file. Never raises on I/O or decode problems:
    the failure is logged and an empty catalog is returned instead.
    """
    path = path or CFG.CATALOG_PATH
    try:
        with open(path, "r", encoding="utf-8") as f:
            doc = json.load(f)
        catalog = decode_catalog(doc)
    except (OSError, ValueError, KeyError, TypeError) as exc:
        # json.JSONDecodeError is a ValueError
        log.warning("Failed to load catalog from %s: %s", os.path.abspath(path), exc)
        return Catalog.empty()

    log.info("Loaded %d catalog entries from %s", len(catalog), path)
    return catalog


def catalog_from_titles(titles: Iterable[str]) -> Catalog:
    """Convenience for embedding/tests: ids are positional, year is 0."""
    return Catalog.of(CatalogEntry(id=i, title=t, year=0) for i, t in enumerate(titles, start=1))
