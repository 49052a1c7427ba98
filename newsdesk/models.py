from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Tuple

STATUS_OK = "ok"
STATUS_ERROR = "error"

# source display name -> "ok" | "error"
FetchStatus = Dict[str, str]


@dataclass(frozen=True)
class FeedSource:
    """One registry entry: a feed URL served under exactly one category."""
    category_key: str
    display_name: str
    feed_url: str
    broad_filter: bool = False


@dataclass(frozen=True)
class RawFeedItem:
    title: str = ""
    description_html: str = ""
    published_at: str = ""
    link: str = ""


@dataclass(frozen=True)
class NormalizedArticle:
    """
    Display-ready article.

    WARNING: this is the contract consumed by the dashboard, the CLI and the bot.
    """
    title: str
    description_plain: str
    category_key: str
    source_name: str
    published_at: datetime
    age_hours: float
    is_breaking: bool
    time_ago_label: str
    exec_summary: str
    detail_summary: str
    url: str

    @property
    def id(self) -> str:
        return self.title + self.category_key

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description_plain,
            "categoryKey": self.category_key,
            "source": self.source_name,
            "pubDate": self.published_at.isoformat(),
            "ageHours": round(self.age_hours, 3),
            "isBreaking": self.is_breaking,
            "time": self.time_ago_label,
            "execSummary": self.exec_summary,
            "detailSummary": self.detail_summary,
            "url": self.url,
        }


@dataclass(frozen=True)
class AggregationResult:
    articles: Tuple[NormalizedArticle, ...] = ()
    status: FetchStatus = field(default_factory=dict)

    @property
    def failed_sources(self) -> int:
        return sum(1 for s in self.status.values() if s == STATUS_ERROR)

    @property
    def live_sources(self) -> int:
        return sum(1 for s in self.status.values() if s == STATUS_OK)
