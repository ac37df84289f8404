from __future__ import annotations
import os
from pathlib import Path

# package root: src/typeahead/
PACKAGE_ROOT = Path(__file__).resolve().parent

# bundled catalog (override with TYPEAHEAD_CATALOG=/path/to/movies.json)
CATALOG_PATH: str = os.environ.get("TYPEAHEAD_CATALOG", str(PACKAGE_ROOT / "data" / "movies.json"))

# quiescence window in milliseconds
DEBOUNCE_MS: int = int(os.environ.get("TYPEAHEAD_DEBOUNCE_MS", "300"))

# /* ~~~ empty query = show the whole catalog (False -> show nothing) ~~~ */
EMPTY_QUERY_SHOWS_ALL: bool = True

# Progress logging (set TYPEAHEAD_VERBOSE=1 to enable)
VERBOSE: bool = os.environ.get("TYPEAHEAD_VERBOSE") == "1"
