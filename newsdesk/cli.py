from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from .config import Settings, configure_logging, load_settings, log_event
from .core import NewsAggregator
from .exceptions import ConfigurationError
from .models import AggregationResult
from .registry import Registry, default_registry, load_registry


def _load_registry(settings: Settings) -> Registry:
    return load_registry(settings.sources_file) if settings.sources_file else default_registry()


def format_result(result: AggregationResult, registry: Registry, *, category: Optional[str] = None,
                  limit: int = 20) -> List[str]:
    articles = [a for a in result.articles if not category or a.category_key == category]
    lines = []
    for a in articles[:limit]:
        flag = "BREAKING " if a.is_breaking else ""
        lines.append(f"{flag}[{registry.label_for(a.category_key)}] {a.title} ({a.source_name}, {a.time_ago_label})")
    lines.append(f"{len(articles)} articles, {result.live_sources} sources live, {result.failed_sources} failed")
    return lines


def _cmd_fetch(args: argparse.Namespace, settings: Settings, logger: logging.Logger) -> int:
    registry = _load_registry(settings)
    result = asyncio.run(NewsAggregator(registry, settings).run())
    if args.json:
        articles = [a.to_dict() for a in result.articles if not args.category or a.category_key == args.category]
        json.dump({"articles": articles[: args.limit], "status": result.status}, sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")
    else:
        for line in format_result(result, registry, category=args.category, limit=args.limit):
            print(line)
    return 0 if result.live_sources or not result.status else 1


def _cmd_serve(args: argparse.Namespace, settings: Settings, logger: logging.Logger) -> int:
    import uvicorn

    from .api import create_app

    log_event(logger, logging.INFO, "serve", host=args.host, port=args.port)
    uvicorn.run(create_app(settings), host=args.host, port=args.port, log_level=settings.log_level.lower())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="newsdesk", description="RSS news desk aggregator")
    sub = parser.add_subparsers(dest="command", required=True)

    fetch = sub.add_parser("fetch", help="Run one aggregation and print the result")
    fetch.add_argument("--category", default=None)
    fetch.add_argument("--limit", type=int, default=20)
    fetch.add_argument("--json", action="store_true")

    serve = sub.add_parser("serve", help="Serve the dashboard API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings()
        logger = configure_logging(settings.log_level)
        if args.command == "fetch":
            return _cmd_fetch(args, settings, logger)
        return _cmd_serve(args, settings, logger)
    except ConfigurationError as e:
        print(f"configuration error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
