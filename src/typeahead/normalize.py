from __future__ import annotations
import unicodedata
from typing import List, Optional


def fold(text: str) -> str:
    """
    Fold text for case-insensitive comparison.
    Rules:
      * NFKC first, so composed/decomposed forms and full-width letters compare equal
      * then .casefold() (handles ß -> ss, final sigma, etc. unlike .lower())
      * diacritics are kept: 'é' and 'e' stay different
    """
    return unicodedata.normalize("NFKC", text).casefold()


def fold_and_map(text: str) -> tuple[str, List[int]]:
    """
    Fold text character by character and return:
      - the folded string
      - mapping list: folded index -> original index
    One original char can fold to several ('ß' -> 'ss'); each maps back to it.
    """
    out: list[str] = []
    mapping: List[int] = []
    for orig_i, ch in enumerate(text):
        for f in fold(ch):
            out.append(f)
            mapping.append(orig_i)
    return "".join(out), mapping


def find_span(title: str, query: str) -> Optional[tuple[int, int]]:
    """
    (start, end) of the first case-insensitive occurrence of query in title,
    as indices into the ORIGINAL title, or None when there is nothing to mark.
    """
    needle = fold(query)
    if not needle:
        return None
    folded, mapping = fold_and_map(title)
    i = folded.find(needle)
    if i < 0:
        return None
    return mapping[i], mapping[i + len(needle) - 1] + 1
