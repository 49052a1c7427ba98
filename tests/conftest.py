from __future__ import annotations

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Callable, Dict, Optional, Union

import httpx

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

Route = Union[bytes, int, Exception, Callable[[httpx.Request], httpx.Response]]


def rss_item(title: str, description: str = "", *, hours_ago: Optional[float] = 1.0,
             link: str = "https://example.com/a") -> str:
    parts = [f"<title>{title}</title>"]
    if description:
        parts.append(f"<description><![CDATA[{description}]]></description>")
    if hours_ago is not None:
        parts.append(f"<pubDate>{format_datetime(NOW - timedelta(hours=hours_ago))}</pubDate>")
    if link:
        parts.append(f"<link>{link}</link>")
    return "<item>" + "".join(parts) + "</item>"


def rss(*items: str) -> bytes:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel><title>Test feed</title><link>https://example.com</link>'
        "<description>feed</description>"
        + "".join(items)
        + "</channel></rss>"
    ).encode("utf-8")


def mock_transport(routes: Dict[str, Route]) -> httpx.MockTransport:
    """Serve canned responses keyed by full request URL."""

    def handler(request: httpx.Request) -> httpx.Response:
        value = routes.get(str(request.url))
        if value is None:
            return httpx.Response(404, request=request)
        if isinstance(value, Exception):
            raise value
        if isinstance(value, int):
            return httpx.Response(value, request=request)
        if callable(value):
            return value(request)
        return httpx.Response(200, content=value, headers={"Content-Type": "text/xml"}, request=request)

    return httpx.MockTransport(handler)

