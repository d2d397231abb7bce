"""
Locale-aware string ordering for topic names.

Students expect "apple" < "Banana" < "éclair" < "Ørsted" < "Zebra", not the
code point order Python uses by default. Keys come from the Unicode Collation
Algorithm (pyuca, default DUCET table): base letters first, then accents, then
case with lowercase first. The raw string is the final tie-break so the
ordering stays total.
"""
from functools import lru_cache
from typing import Iterable, List, Tuple

from pyuca import Collator


@lru_cache(maxsize=1)
def _collator() -> Collator:
    # Parsing the DUCET table takes a moment; do it once, on first use
    return Collator()


def collation_key(text: str) -> Tuple[Tuple[int, ...], str]:
    value = text or ""
    return tuple(_collator().sort_key(value)), value


def locale_sorted(values: Iterable[str]) -> List[str]:
    return sorted(values, key=collation_key)
