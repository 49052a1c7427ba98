from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from .config import log_event
from .core import NewsAggregator
from .models import STATUS_ERROR, STATUS_OK, FetchStatus, NormalizedArticle

logger = logging.getLogger(__name__)

Listener = Callable[["DashboardState"], None]


@dataclass(frozen=True)
class DashboardState:
    """What the display layer sees after each run."""
    articles: Tuple[NormalizedArticle, ...] = ()
    status: FetchStatus = field(default_factory=dict)
    last_sync: Optional[datetime] = None
    loading: bool = False

    @property
    def breaking(self) -> List[NormalizedArticle]:
        return [a for a in self.articles if a.is_breaking]

    @property
    def sources_ok(self) -> int:
        return sum(1 for s in self.status.values() if s == STATUS_OK)

    @property
    def sources_failed(self) -> int:
        return sum(1 for s in self.status.values() if s == STATUS_ERROR)

    def for_category(self, category_key: Optional[str]) -> List[NormalizedArticle]:
        if not category_key or category_key == "all":
            return list(self.articles)
        return [a for a in self.articles if a.category_key == category_key]


class RefreshScheduler:
    """
    Runs the aggregator on start, then every `interval_seconds`, and on demand.

    At most one run is in flight: concurrent `refresh()` calls join the running one.
    """

    def __init__(self, aggregator: NewsAggregator, *, interval_seconds: float = 15 * 60) -> None:
        self.aggregator = aggregator
        self.interval_seconds = interval_seconds
        self.state = DashboardState()
        self._inflight: Optional[asyncio.Task] = None
        self._loop_task: Optional[asyncio.Task] = None
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _publish(self, state: DashboardState) -> None:
        self.state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("event=listener_failed listener=%r", listener)

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    async def refresh(self) -> DashboardState:
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._run_once())
        # shield: a cancelled caller must not cancel the run other callers are waiting on
        return await asyncio.shield(self._inflight)

    async def _run_once(self) -> DashboardState:
        self._publish(replace(self.state, loading=True))
        try:
            result = await self.aggregator.run()
        except Exception:
            logger.exception("event=refresh_failed")
            self._publish(replace(self.state, loading=False))
            return self.state
        self._publish(DashboardState(
            articles=result.articles,
            status=dict(result.status),
            last_sync=datetime.now(timezone.utc),
            loading=False,
        ))
        return self.state

    async def _loop(self) -> None:
        while True:
            await self.refresh()
            log_event(logger, logging.DEBUG, "next_refresh", in_seconds=self.interval_seconds)
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        """Spawn the periodic loop on the running event loop. Idempotent."""
        if self.running:
            return
        self._loop_task = asyncio.ensure_future(self._loop())

    async def stop(self) -> None:
        """Cancel the periodic loop and any in-flight run (teardown only)."""
        for task in (self._loop_task, self._inflight):
            if task is None or task.done():
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._loop_task = None
        self._inflight = None
