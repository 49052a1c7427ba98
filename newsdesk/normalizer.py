from __future__ import annotations

import html
import re
from datetime import datetime
from typing import Optional

from .extract import detail_summary, exec_summary
from .models import FeedSource, NormalizedArticle, RawFeedItem
from .parser import parse_published

# Only tag-shaped spans and comments; a bare "<" in text such as "5 < 6" is kept.
_TAG_RE = re.compile(r"<!--.*?-->|</?[A-Za-z][^<>]*>", re.S)
_WS_RE = re.compile(r"\s+")

PLACEHOLDER_URL = "#"
BREAKING_HOURS = 2.0


def normalize_text(raw: Optional[str]) -> str:
    """
    Strip markup, decode character entities and collapse whitespace.

    Never raises: malformed markup or entities are kept as best-effort text.
    """
    if not raw:
        return ""
    text = _TAG_RE.sub(" ", str(raw))
    # entity-encoded markup (&lt;b&gt;) becomes real tags only after unescaping
    text = _TAG_RE.sub(" ", html.unescape(text))
    return _WS_RE.sub(" ", text).strip()


def time_ago(published: datetime, now: datetime) -> str:
    diff = (now - published).total_seconds()
    if diff < 60:
        return "just now"
    if diff < 3600:
        return f"{int(diff // 60)}m ago"
    if diff < 86400:
        return f"{int(diff // 3600)}h ago"
    return f"{int(diff // 86400)}d ago"


def to_article(item: RawFeedItem, source: FeedSource, now: datetime) -> NormalizedArticle:
    """
    Convert a raw feed item into a NormalizedArticle with all derived fields.

    `now` is the timestamp of the aggregation run; it is also used as the publish
    time when the item has no parseable date.
    """
    title = normalize_text(item.title)
    description = normalize_text(item.description_html)
    published_at = parse_published(item.published_at) or now
    age_hours = (now - published_at).total_seconds() / 3600.0

    return NormalizedArticle(
        title=title,
        description_plain=description,
        category_key=source.category_key,
        source_name=source.display_name,
        published_at=published_at,
        age_hours=age_hours,
        is_breaking=age_hours < BREAKING_HOURS,
        time_ago_label=time_ago(published_at, now),
        exec_summary=exec_summary(description),
        detail_summary=detail_summary(description),
        url=(item.link or "").strip() or PLACEHOLDER_URL,
    )
