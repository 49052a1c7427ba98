from __future__ import annotations

import calendar
import io
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union
from xml.sax import SAXParseException

import feedparser
from feedparser.datetimes import _parse_date

from .exceptions import SourceParseError
from .models import RawFeedItem


def parse_published(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a feed date string (RFC 822, ISO 8601 and the other formats feedparser knows)
    into a timezone-aware UTC datetime. Returns None when absent or unparseable.
    """
    if not value or not value.strip():
        return None
    parsed = _parse_date(value.strip())
    if not isinstance(parsed, time.struct_time):
        return None
    try:
        return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _text(entry: Dict[str, Any], *keys: str) -> str:
    for key in keys:
        val = entry.get(key)
        if isinstance(val, str) and val:
            return val
    return ""


def parse_entry(entry: Dict[str, Any]) -> RawFeedItem:
    """Map a feedparser entry to a RawFeedItem. Absent fields become empty strings."""
    return RawFeedItem(
        title=_text(entry, "title"),
        description_html=_text(entry, "summary", "description"),
        published_at=_text(entry, "published", "updated"),
        link=_text(entry, "link"),
    )


def parse_feed(body: Union[bytes, str], url: str = "") -> List[RawFeedItem]:
    """
    Parse an RSS/Atom document into RawFeedItems.

    Raises SourceParseError when the body is not well-formed or not recognizable
    feed markup, even if some items could be salvaged. A well-formed feed with
    zero items is not an error.
    """
    if isinstance(body, str):
        body = body.encode("utf-8")
    feed = feedparser.parse(io.BytesIO(body))
    entries = getattr(feed, "entries", None) or []
    exc = getattr(feed, "bozo_exception", None)
    # Benign bozo causes (e.g. CharacterEncodingOverride) are tolerated; broken XML is not.
    malformed = bool(getattr(feed, "bozo", 0)) and isinstance(exc, SAXParseException)
    if malformed or (not entries and (getattr(feed, "bozo", 0) or not getattr(feed, "version", ""))):
        msg = f"Invalid RSS/Atom feed: {url or '<body>'}"
        if exc:
            msg += f" ({exc})"
        raise SourceParseError(msg)
    return [parse_entry(e) for e in entries]
