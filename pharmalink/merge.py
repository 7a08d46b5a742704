# pharmalink/merge.py
from __future__ import annotations

from typing import Iterable, List, Set, Tuple

from .models import Triple


def merge_triples(sets: Iterable[Iterable[Triple]]) -> List[Triple]:
    """Concatenate triple sets, keeping the first occurrence of each (s, p, o) value."""
    seen: Set[Tuple[str, str, str]] = set()
    out: List[Triple] = []
    for triples in sets:
        for t in triples:
            if t.key in seen:
                continue
            seen.add(t.key)
            out.append(t)
    return out
