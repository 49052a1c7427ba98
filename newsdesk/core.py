from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Mapping, Optional, Sequence, Tuple

import httpx

from .classifier import is_relevant
from .config import Settings, log_event
from .dedup import deduplicate
from .exceptions import SourceFetchError, SourceParseError
from .fetcher import fetch_source
from .models import (
    STATUS_ERROR,
    STATUS_OK,
    AggregationResult,
    FeedSource,
    FetchStatus,
    NormalizedArticle,
    RawFeedItem,
)
from .normalizer import to_article
from .registry import Registry

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 12.0

_Outcome = Tuple[FeedSource, Optional[List[RawFeedItem]]]


async def _settle(
    client: httpx.AsyncClient,
    source: FeedSource,
    *,
    proxy_url: Optional[str],
    timeout: float,
) -> _Outcome:
    """Fetch one source; every failure is converted into a `None` item list."""
    try:
        items = await asyncio.wait_for(fetch_source(client, source, proxy_url=proxy_url), timeout)
    except (SourceFetchError, SourceParseError) as e:
        log_event(logger, logging.WARNING, "source_failed",
                  source=source.display_name, category=source.category_key, error=e)
        return source, None
    except asyncio.TimeoutError:
        log_event(logger, logging.WARNING, "source_timeout",
                  source=source.display_name, category=source.category_key, timeout=timeout)
        return source, None
    except Exception:
        logger.exception("event=source_crashed source=%s category=%s",
                         source.display_name, source.category_key)
        return source, None
    return source, items


def _record_status(status: FetchStatus, source: FeedSource, ok: bool) -> None:
    # Several entries may share a display name; a failure is never masked by a success.
    if not ok:
        status[source.display_name] = STATUS_ERROR
    else:
        status.setdefault(source.display_name, STATUS_OK)


async def run_aggregation(
    sources: Sequence[FeedSource],
    keywords: Mapping[str, Sequence[str]],
    *,
    client: Optional[httpx.AsyncClient] = None,
    proxy_url: Optional[str] = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
    user_agent: str = "Mozilla/5.0",
    now: Optional[datetime] = None,
) -> AggregationResult:
    """
    Fetch every source concurrently, then filter, deduplicate and sort.

    Pipeline: fetch (settle all) → normalize → relevance gate (broad feeds only)
    → dedupe by exact title (first wins) → sort newest first.

    Never raises for per-source problems; they are reported in the status map.
    """
    own_client = client is None
    if own_client:
        client = httpx.AsyncClient(timeout=timeout, headers={"User-Agent": user_agent})
    try:
        outcomes = await asyncio.gather(
            *(_settle(client, s, proxy_url=proxy_url, timeout=timeout) for s in sources)
        )
    finally:
        if own_client:
            await client.aclose()

    run_at = now or datetime.now(timezone.utc)
    status: FetchStatus = {}
    accepted: List[NormalizedArticle] = []
    rejected = 0
    for source, items in outcomes:
        _record_status(status, source, items is not None)
        for item in items or ():
            article = to_article(item, source, run_at)
            if not article.title:
                continue
            if not is_relevant(source, article.title, article.description_plain,
                               keywords.get(source.category_key, ())):
                rejected += 1
                continue
            accepted.append(article)

    articles = deduplicate(accepted)
    articles.sort(key=lambda a: a.published_at, reverse=True)

    result = AggregationResult(articles=tuple(articles), status=status)
    log_event(logger, logging.INFO, "aggregation_complete",
              sources=len(sources), live=result.live_sources, failed=result.failed_sources,
              articles=len(articles), filtered=rejected, duplicates=len(accepted) - len(articles))
    return result


class NewsAggregator:
    """
    High-level API: run the aggregation pipeline over a Registry with Settings.

    An optional shared httpx.AsyncClient can be passed; otherwise each run opens its own.
    """

    def __init__(
        self,
        registry: Registry,
        settings: Optional[Settings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.registry = registry
        self.settings = settings or Settings()
        self._client = client

    async def run(self, *, now: Optional[datetime] = None) -> AggregationResult:
        return await run_aggregation(
            self.registry.sources,
            self.registry.keywords,
            client=self._client,
            proxy_url=self.settings.proxy_url,
            timeout=self.settings.fetch_timeout,
            user_agent=self.settings.user_agent,
            now=now,
        )
