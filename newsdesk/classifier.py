from __future__ import annotations

from typing import Iterable

from .models import FeedSource


def score_article(title: str, description: str, keywords: Iterable[str]) -> int:
    """
    Count how many distinct keyword phrases occur in the lower-cased title + description.

    `keywords` is the category's table; callers resolve it from the registry by category key.

    Matching is plain substring matching; keywords are expected in lower case.
    """
    text = f"{title or ''} {description or ''}".lower()
    return sum(1 for kw in set(keywords) if kw and kw in text)


def is_relevant(source: FeedSource, title: str, description: str, keywords: Iterable[str]) -> bool:
    """
    Inclusion gate for one article under its source's category.

    Narrow sources are accepted unconditionally; broad sources need at least one
    keyword hit from their category's table. This never re-categorizes an article.
    """
    if not source.broad_filter:
        return True
    return score_article(title, description, keywords) > 0
