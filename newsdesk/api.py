from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, Optional, Tuple

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from .config import Settings, load_settings, log_event
from .core import NewsAggregator
from .exceptions import ConfigurationError, SummarizationError
from .registry import Registry, default_registry, load_registry
from .scheduler import DashboardState, RefreshScheduler
from .summarizers import Summarizer, build_summarizer

logger = logging.getLogger(__name__)


class SummaryCache:
    """Model summaries keyed by (title, execSummary); emptied whenever a new result set lands."""

    def __init__(self) -> None:
        self._items: Dict[Tuple[str, str], str] = {}

    def get(self, title: str, exec_summary: str) -> Optional[str]:
        return self._items.get((title, exec_summary))

    def put(self, title: str, exec_summary: str, summary: str) -> None:
        self._items[(title, exec_summary)] = summary

    def on_state(self, state: DashboardState) -> None:
        if not state.loading:
            self._items.clear()


def snapshot_payload(state: DashboardState, registry: Registry, category: Optional[str] = None) -> Dict[str, Any]:
    counts = {"all": len(state.articles)}
    for key in registry.categories:
        counts[key] = len(state.for_category(key))
    return {
        "articles": [a.to_dict() for a in state.for_category(category)],
        "status": dict(state.status),
        "lastSync": state.last_sync.isoformat() if state.last_sync else None,
        "loading": state.loading,
        "counts": counts,
        "breaking": len(state.breaking),
        "sourcesOk": state.sources_ok,
        "sourcesFailed": state.sources_failed,
    }


def _error(message: str, status_code: int, **extra: Any) -> JSONResponse:
    return JSONResponse({"error": message, **extra}, status_code=status_code)


def create_app(
    settings: Optional[Settings] = None,
    *,
    registry: Optional[Registry] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    summarizer_factory: Optional[Callable[[], Summarizer]] = None,
) -> FastAPI:
    """
    Build the web app: feed proxy, summarization endpoint and the dashboard feed.

    The lifespan owns one shared httpx client and the refresh scheduler.
    """
    settings = settings or load_settings()
    if registry is None:
        registry = load_registry(settings.sources_file) if settings.sources_file else default_registry()
    make_summarizer = summarizer_factory or (lambda: build_summarizer(settings))
    summaries = SummaryCache()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = httpx.AsyncClient(
            timeout=settings.fetch_timeout,
            headers={"User-Agent": settings.user_agent},
            transport=transport,
        )
        scheduler = RefreshScheduler(
            NewsAggregator(registry, settings, client=client),
            interval_seconds=settings.refresh_seconds,
        )
        scheduler.subscribe(summaries.on_state)
        app.state.http_client = client
        app.state.scheduler = scheduler
        if settings.autostart:
            scheduler.start()
        try:
            yield
        finally:
            await scheduler.stop()
            await client.aclose()

    app = FastAPI(title="newsdesk", lifespan=lifespan)
    app.state.registry = registry
    app.state.summaries = summaries

    @app.middleware("http")
    async def allow_any_origin(request: Request, call_next):
        response = await call_next(request)
        response.headers["Access-Control-Allow-Origin"] = "*"
        return response

    @app.get("/api/rss")
    async def rss_proxy(request: Request, url: Optional[str] = None):
        if not url:
            return _error("No URL", 400)
        client: httpx.AsyncClient = request.app.state.http_client
        try:
            resp = await client.get(url, follow_redirects=True)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            log_event(logger, logging.WARNING, "proxy_failed", url=url, error=e.__class__.__name__)
            return _error(str(e) or e.__class__.__name__, 500)
        if not resp.is_success:
            return _error("Upstream returned an error", 502, status=resp.status_code)
        return Response(content=resp.content, media_type="text/xml")

    @app.options("/api/summarize")
    async def summarize_preflight():
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Methods": "POST, OPTIONS",
                "Access-Control-Allow-Headers": "Content-Type",
            },
        )

    @app.api_route("/api/summarize", methods=["GET", "PUT", "PATCH", "DELETE"])
    async def summarize_method_not_allowed():
        return _error("Method not allowed", 405)

    @app.post("/api/summarize")
    async def summarize(request: Request):
        try:
            body = await request.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            body = {}
        title = body.get("title")
        if not title or not isinstance(title, str):
            return _error("title is required", 400)
        exec_summary = str(body.get("execSummary") or "")

        cached = summaries.get(title, exec_summary)
        if cached is not None:
            return {"summary": cached}
        try:
            summarizer = make_summarizer()
        except ConfigurationError as e:
            log_event(logger, logging.ERROR, "summarizer_unconfigured", error=e)
            return _error(str(e), 500)
        try:
            text = await run_in_threadpool(summarizer.summarize, title=title, exec_summary=exec_summary)
        except SummarizationError as e:
            log_event(logger, logging.WARNING, "summarize_failed", title=title[:60], error=e)
            return _error(str(e), 502, detail=e.detail)
        summaries.put(title, exec_summary, text)
        return {"summary": text}

    @app.get("/api/news")
    async def news(request: Request, category: Optional[str] = None):
        return snapshot_payload(request.app.state.scheduler.state, registry, category)

    @app.post("/api/refresh")
    async def refresh(request: Request):
        state = await request.app.state.scheduler.refresh()
        return snapshot_payload(state, registry)

    @app.get("/api/categories")
    async def categories():
        return [{"key": "all", "label": "All"}] + [
            {"key": k, "label": v} for k, v in registry.categories.items()
        ]

    return app
