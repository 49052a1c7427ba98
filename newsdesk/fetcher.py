from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from .exceptions import SourceFetchError
from .models import FeedSource, RawFeedItem
from .parser import parse_feed

logger = logging.getLogger(__name__)


async def fetch_body(client: httpx.AsyncClient, url: str, *, proxy_url: Optional[str] = None) -> bytes:
    """
    GET a feed body, either directly or through the proxy collaborator
    (`GET <proxy_url>?url=<feed url>`).

    Raises SourceFetchError on network failures and non-success statuses.
    """
    try:
        if proxy_url:
            resp = await client.get(proxy_url, params={"url": url})
        else:
            resp = await client.get(url, follow_redirects=True)
    except httpx.HTTPError as e:
        raise SourceFetchError(f"Failed to fetch feed: {url} ({e.__class__.__name__}: {e})") from e

    if not resp.is_success:
        raise SourceFetchError(f"Failed to fetch feed: {url} (HTTP {resp.status_code})")
    return resp.content


async def fetch_source(
    client: httpx.AsyncClient,
    source: FeedSource,
    *,
    proxy_url: Optional[str] = None,
) -> List[RawFeedItem]:
    """Fetch and parse one registry entry's feed."""
    body = await fetch_body(client, source.feed_url, proxy_url=proxy_url)
    items = parse_feed(body, source.feed_url)
    logger.debug("event=feed_parsed source=%s category=%s items=%d",
                 source.display_name, source.category_key, len(items))
    return items
