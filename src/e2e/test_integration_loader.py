import json
import logging
from pathlib import Path

import pytest
from typeahead import config as CFG
from typeahead.loader import decode_catalog, load_catalog
from typeahead.models import Catalog, CatalogEntry


def _seed(tmp: Path, doc, name: str = "movies.json") -> str:
    p = tmp / name
    p.write_text(doc if isinstance(doc, str) else json.dumps(doc), encoding="utf-8")
    return str(p)


@pytest.mark.e2e
def test_load_bundled_format(tmp_path: Path):
    path = _seed(tmp_path, {"allMovies": [
        {"id": 7, "title": "Inception", "year": 2010, "genre": ["Action", "Sci-Fi"]},
        {"id": 3, "title": "Alien", "year": 1979, "genre": ["Horror"]},
    ]})
    cat = load_catalog(path)
    assert cat.titles() == ["Inception", "Alien"]
    first = cat.entries[0]
    assert first == CatalogEntry(id=7, title="Inception", year=2010, tags=frozenset({"Action", "Sci-Fi"}))


@pytest.mark.e2e
def test_load_bare_list_with_tags_key(tmp_path: Path):
    path = _seed(tmp_path, [{"id": 1, "title": "Psycho", "year": 1960, "tags": "Horror"}])
    cat = load_catalog(path)
    assert len(cat) == 1 and cat.entries[0].tags == frozenset({"Horror"})


@pytest.mark.e2e
def test_missing_file_collapses_to_empty_catalog(tmp_path: Path, caplog):
    with caplog.at_level(logging.WARNING, logger="typeahead.loader"):
        cat = load_catalog(str(tmp_path / "nope.json"))
    assert cat == Catalog.empty()
    assert "Failed to load catalog" in caplog.text


@pytest.mark.e2e
@pytest.mark.parametrize("doc", [
    "{not json",
    {"movies": []},
    {"allMovies": {"id": 1}},
    {"allMovies": [{"id": 1, "title": "No year"}]},
    {"allMovies": [{"id": "x", "title": "Bad id", "year": 1999}]},
    {"allMovies": ["just a string"]},
])
def test_malformed_documents_collapse_to_empty_catalog(tmp_path: Path, doc):
    assert len(load_catalog(_seed(tmp_path, doc))) == 0


def test_decode_catalog_raises_for_callers_that_want_errors():
    with pytest.raises(ValueError):
        decode_catalog({"movies": []})


@pytest.mark.e2e
def test_bundled_catalog_loads():
    cat = load_catalog(CFG.CATALOG_PATH)
    assert len(cat) > 0
    assert "Inception" in cat.titles()


def test_verbose_flag_logs_decode_progress(monkeypatch, caplog):
    monkeypatch.setattr(CFG, "VERBOSE", True)
    with caplog.at_level(logging.INFO, logger="typeahead.loader"):
        decode_catalog([
            {"id": 1, "title": "Psycho", "year": 1960},
            {"id": 2, "title": "Alien", "year": 1979},
        ])
    assert "[done] entries=2" in caplog.text


def test_quiet_by_default(monkeypatch, caplog):
    monkeypatch.setattr(CFG, "VERBOSE", False)
    with caplog.at_level(logging.INFO, logger="typeahead.loader"):
        decode_catalog([{"id": 1, "title": "Psycho", "year": 1960}])
    assert "[done]" not in caplog.text


@pytest.mark.e2e
def test_engine_load_verbose_turns_on_progress(tmp_path: Path, monkeypatch, caplog):
    from typeahead.engine import Engine

    monkeypatch.setattr(CFG, "VERBOSE", False)
    monkeypatch.setenv("TYPEAHEAD_VERBOSE", "0")
    path = _seed(tmp_path, {"allMovies": [{"id": 1, "title": "Psycho", "year": 1960}]})
    eng = Engine()
    try:
        with caplog.at_level(logging.INFO, logger="typeahead.loader"):
            eng.load(path, verbose=True)
        assert CFG.VERBOSE is True
        assert "[done] entries=1" in caplog.text
    finally:
        eng.shutdown()
