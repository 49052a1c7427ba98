"""
Feed source registry.

A Registry bundles the category labels, the per-category keyword tables used by
the relevance scorer, and the list of FeedSource entries. It is loaded once at
startup and never mutated.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence, Tuple
from urllib.parse import urlparse

import yaml

from .exceptions import ConfigurationError
from .models import FeedSource

_ALJAZEERA_ALL = "https://www.aljazeera.com/xml/rss/all.xml"
_REUTERS_BUSINESS = "https://feeds.reuters.com/reuters/businessNews"

DEFAULT_CATEGORIES: Dict[str, str] = {
    "qatar": "Qatar & ME",
    "international": "International",
    "business": "Business",
    "entertainment": "Culture",
    "sports": "Sports",
    "travel": "Travel",
    "realestate": "Living",
    "energy": "Energy & LNG",
}

DEFAULT_KEYWORDS: Dict[str, List[str]] = {
    "qatar": ["qatar", "doha", "gulf", "middle east", "saudi", "uae", "dubai", "iran", "iraq",
              "jordan", "egypt", "arab", "israel", "palestine", "gaza", "riyadh"],
    "entertainment": ["film", "art", "culture", "music", "festival", "cinema", "theatre",
                      "exhibition", "gallery"],
    "sports": ["football", "soccer", "cricket", "tennis", "f1", "formula", "olympic",
               "world cup", "league", "match", "sport", "basketball"],
    "energy": ["lng", "liquefied", "natural gas", "oil", "energy", "petroleum", "opec",
               "refinery", "offshore", "pipeline", "fuel", "qatarenergy", "shell", "bp", "exxon"],
    "travel": ["airline", "airport", "aviation", "flight", "tourism", "hotel", "travel", "visa",
               "qatar airways", "hamad"],
    "realestate": ["property", "real estate", "housing", "rent", "apartment", "mortgage",
                   "construction", "lusail", "pearl", "west bay"],
    "business": ["economy", "market", "stock", "trade", "gdp", "inflation", "investment", "bank",
                 "finance", "earnings"],
    "international": ["us", "uk", "china", "russia", "europe", "nato", "un ", "united nations",
                      "election", "government", "president"],
}

DEFAULT_SOURCES: Tuple[FeedSource, ...] = (
    FeedSource("qatar", "Al Jazeera", _ALJAZEERA_ALL, broad_filter=True),
    FeedSource("international", "BBC World", "https://feeds.bbci.co.uk/news/world/rss.xml"),
    FeedSource("international", "Reuters World", "https://feeds.reuters.com/reuters/worldNews"),
    FeedSource("business", "BBC Business", "https://feeds.bbci.co.uk/news/business/rss.xml"),
    FeedSource("business", "Reuters Business", _REUTERS_BUSINESS),
    FeedSource("entertainment", "Al Jazeera", _ALJAZEERA_ALL, broad_filter=True),
    FeedSource("sports", "BBC Sport", "https://feeds.bbci.co.uk/sport/rss.xml"),
    FeedSource("sports", "Al Jazeera", _ALJAZEERA_ALL, broad_filter=True),
    FeedSource("travel", "Reuters Travel", "https://feeds.reuters.com/reuters/travelNews"),
    FeedSource("realestate", "Reuters Business", _REUTERS_BUSINESS),
    FeedSource("energy", "Reuters Energy", "https://feeds.reuters.com/reuters/energy"),
    FeedSource("energy", "Offshore Energy", "https://www.offshore-energy.biz/feed/"),
)


@dataclass(frozen=True)
class Registry:
    categories: Mapping[str, str]
    keywords: Mapping[str, Tuple[str, ...]]
    sources: Tuple[FeedSource, ...]

    def label_for(self, category_key: str) -> str:
        return self.categories.get(category_key, category_key)


def build_registry(
    categories: Mapping[str, str],
    keywords: Mapping[str, Sequence[str]],
    sources: Sequence[FeedSource],
) -> Registry:
    """Validate and freeze a registry."""
    kw = {str(k): tuple(str(w).lower() for w in (v or ())) for k, v in keywords.items()}
    for src in sources:
        if src.category_key not in categories:
            raise ConfigurationError(
                f"Source {src.display_name!r} uses unknown category {src.category_key!r}"
            )
        parsed = urlparse(src.feed_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(f"Source {src.display_name!r} has a non-absolute URL: {src.feed_url!r}")
        if src.broad_filter and not kw.get(src.category_key):
            raise ConfigurationError(
                f"Broad source {src.display_name!r} needs keywords for category {src.category_key!r}"
            )
    return Registry(categories=dict(categories), keywords=kw, sources=tuple(sources))


def default_registry() -> Registry:
    return build_registry(DEFAULT_CATEGORIES, DEFAULT_KEYWORDS, DEFAULT_SOURCES)


def _source_from_mapping(row: Any) -> FeedSource:
    if not isinstance(row, dict):
        raise ConfigurationError(f"Source entry must be a mapping, got {row!r}")
    try:
        return FeedSource(
            category_key=str(row["category"]),
            display_name=str(row["name"]),
            feed_url=str(row["url"]),
            broad_filter=bool(row.get("broad", False)),
        )
    except KeyError as e:
        raise ConfigurationError(f"Source entry is missing {e.args[0]!r}: {row!r}") from e


def load_registry(path: str) -> Registry:
    """
    Load a registry from a YAML file:

        categories: {qatar: "Qatar & ME", ...}
        keywords: {qatar: [qatar, doha, ...], ...}
        sources:
          - {category: qatar, name: Al Jazeera, url: https://..., broad: true}
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read registry {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Registry {path} must be a mapping at top level")

    categories = data.get("categories") or {}
    keywords = data.get("keywords") or {}
    rows = data.get("sources") or []
    if not isinstance(categories, dict) or not isinstance(keywords, dict) or not isinstance(rows, list):
        raise ConfigurationError(f"Registry {path} has malformed categories/keywords/sources")
    return build_registry(
        {str(k): str(v) for k, v in categories.items()},
        keywords,
        [_source_from_mapping(r) for r in rows],
    )
