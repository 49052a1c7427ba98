from __future__ import annotations

from typing import Iterable, List, Set

from .models import NormalizedArticle


def deduplicate(items: Iterable[NormalizedArticle]) -> List[NormalizedArticle]:
    """
    Remove articles whose title was already seen.

    Exact, case-sensitive title match; keeps the first occurrence and preserves order.
    Empty titles are dropped.
    """
    seen: Set[str] = set()
    out: List[NormalizedArticle] = []
    for it in items:
        if not it.title or it.title in seen:
            continue
        seen.add(it.title)
        out.append(it)
    return out
