"""
newsdesk

Aggregates RSS feeds into a categorized, recency-sorted news desk.

Core ideas:
- Input: a Registry of FeedSource entries (category, name, URL, broad flag) and keyword tables
- Process: fetch all (settle, never abort) → normalize → relevance gate for broad feeds
  → deduplicate by title → sort (newest first)
- Output: AggregationResult (articles + per-source status), refreshed by RefreshScheduler

Example
-------
import asyncio
from newsdesk import NewsAggregator, default_registry

result = asyncio.run(NewsAggregator(default_registry()).run())

for item in result.articles:
    print(item.published_at, item.source_name, item.title)
"""
from .models import AggregationResult, FeedSource, NormalizedArticle, RawFeedItem
from .core import NewsAggregator, run_aggregation
from .registry import Registry, default_registry, load_registry
from .scheduler import DashboardState, RefreshScheduler

__all__ = [
    "AggregationResult",
    "DashboardState",
    "FeedSource",
    "NewsAggregator",
    "NormalizedArticle",
    "RawFeedItem",
    "Registry",
    "RefreshScheduler",
    "default_registry",
    "load_registry",
    "run_aggregation",
]
