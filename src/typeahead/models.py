# src/typeahead/models.py
"""
Data models for the type-ahead pipeline.

- CatalogEntry: one movie record, immutable.
- Catalog: the ordered, read-only collection searched by the matcher.
- QueryEvent: one raw input change, stamped with a sequence number.
- ResultBatch: the ordered titles produced for one settled query.

These classes hold no pipeline logic; they only give the data a shape.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Iterator, List, Tuple


@dataclass(frozen=True)
class CatalogEntry:
    """
    A single catalog record.

    Attributes
    ----------
    id : int
        Identifier from the source file.
    title : str
        Display title; this is what the matcher searches and returns.
    year : int
        Release year.
    tags : FrozenSet[str]
        Genres/tags. Stored as a frozenset so the entry stays hashable.
    """
    id: int
    title: str
    year: int
    tags: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class Catalog:
    """Ordered sequence of entries, fixed after load."""
    entries: Tuple[CatalogEntry, ...] = ()

    @classmethod
    def of(cls, entries: Iterable[CatalogEntry]) -> "Catalog":
        return cls(entries=tuple(entries))

    @classmethod
    def empty(cls) -> "Catalog":
        return cls()

    def titles(self) -> List[str]:
        return [e.title for e in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries)


@dataclass(frozen=True)
class QueryEvent:
    text: str
    seq: int          # monotonically increasing per QuerySource


@dataclass(frozen=True)
class ResultBatch:
    """
    Output of one settled query.

    seq is the sequence number of the QueryEvent that was pending when the
    quiescence window expired; superseded events never get a batch.
    """
    seq: int
    query: str
    titles: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {"seq": self.seq, "query": self.query, "titles": list(self.titles), "count": len(self.titles)}
