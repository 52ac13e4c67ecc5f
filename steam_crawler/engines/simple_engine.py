from __future__ import annotations

import asyncio
import logging
from typing import Optional, Set

from aiohttp import ClientSession

from .base import CrawlEngine, CrawlReport
from .state import CrawlState
from ..config import CrawlConfig
from ..adapters.base import PageAdapter, ProductRecord
from ..utils.http import FetchError, create_session, fetch_text
from ..utils.loader import load_symbol
from ..utils.parsing import page_for_app
from ..utils.pricing import normalize_price

logger = logging.getLogger(__name__)


class SimpleCrawlEngine(CrawlEngine):
    """
    A pragmatic async crawler over the store's app-to-app links.
    - Engine owns HTTP, the frontier and the stopping policy.
    - Adapters own page parsing.
    - At most ``max_concurrency`` fetch tasks are outstanding at once.
    """
    def __init__(
        self,
        config: CrawlConfig,
        adapter: PageAdapter | None = None,
        stop_event: asyncio.Event | None = None,
    ) -> None:
        self.config = config
        self.adapter = adapter or load_symbol(config.adapter)()
        self.policy = config.stopping_policy()
        # Optional external cancellation; setting it drains the crawl like a met policy.
        self.stop_event = stop_event
        self._abort: Optional[FetchError] = None

    async def crawl(self) -> CrawlReport:
        cfg = self.config
        state = CrawlState(cfg.seeds, capacity=self.policy.capacity)
        pending: Set[asyncio.Task[None]] = set()
        loop = asyncio.get_running_loop()
        started = loop.time()
        self._abort = None

        logger.info("Starting crawl from %s with %s (max_concurrency=%s)",
                    cfg.seeds, self.policy, cfg.max_concurrency)

        session = create_session(cfg.user_agent, cfg.accept_language)
        try:
            try:
                await self._dispatch(session, state, pending, started)
            finally:
                # Draining: every dispatched worker finishes before results are read.
                if pending:
                    logger.info("Draining %d in-flight fetch(es)", state.pending())
                    await asyncio.gather(*pending)
        finally:
            await session.close()

        snap = state.snapshot()
        report = CrawlReport(
            products=snap.records,
            skipped=snap.skipped,
            failed=snap.failed,
            elapsed=loop.time() - started,
            error=self._abort,
        )
        logger.info("Crawl finished in %.1fs: %d product(s), %d skipped, %d failed, %d left in frontier",
                    report.elapsed, len(report.products), len(report.skipped),
                    len(report.failed), len(snap.frontier))
        return report

    # ---- Coordinator --------------------------------------------------------

    async def _dispatch(
        self,
        session: ClientSession,
        state: CrawlState,
        pending: Set[asyncio.Task[None]],
        started: float,
    ) -> None:
        cfg = self.config
        loop = asyncio.get_running_loop()
        idle_since: Optional[float] = None

        while True:
            if self._abort is not None:
                logger.warning("Stopping dispatch after fetch failure: %s", self._abort)
                return
            if self.stop_event is not None and self.stop_event.is_set():
                logger.info("Stop requested; no further fetches will be dispatched")
                return
            if self.policy.reached(state.size(), loop.time() - started):
                logger.info("Stopping policy %s met with %d product(s)", self.policy, state.size())
                return

            if len(pending) >= cfg.max_concurrency or state.saturated():
                if not pending:
                    logger.warning("Capacity reserved by %d app(s) with no fetch outstanding; stopping",
                                   state.pending())
                    return
                await self._wait_any(pending)
                continue

            app_id = state.pop_frontier()
            if app_id is None:
                if not pending:
                    logger.info("Frontier exhausted with %d product(s)", state.size())
                    return
                now = loop.time()
                if idle_since is None:
                    idle_since = now
                elif now - idle_since >= cfg.max_idle:
                    logger.warning("Frontier empty for %.1fs with %d fetch(es) outstanding; giving up",
                                   now - idle_since, len(pending))
                    return
                await self._wait_any(pending)
                continue
            idle_since = None

            # Re-checked here: the same id may have been queued by several pages.
            if not state.try_admit(app_id):
                logger.debug("App %s already handled", app_id)
                continue

            task = asyncio.create_task(self._run_worker(session, state, app_id))
            pending.add(task)
            task.add_done_callback(pending.discard)

    async def _wait_any(self, pending: Set[asyncio.Task[None]]) -> None:
        """Bounded wait for the first outstanding worker to finish."""
        await asyncio.wait(pending, timeout=self.config.poll_interval, return_when=asyncio.FIRST_COMPLETED)

    # ---- Worker -------------------------------------------------------------

    async def _run_worker(self, session: ClientSession, state: CrawlState, app_id: int) -> None:
        try:
            await self._crawl_app(session, state, app_id)
        except Exception:
            # An id left in in_flight would hold count capacity forever.
            logger.exception("Worker for app %s failed unexpectedly", app_id)
            state.release(app_id)

    async def _crawl_app(self, session: ClientSession, state: CrawlState, app_id: int) -> None:
        cfg = self.config
        url = page_for_app(app_id)
        try:
            html = await fetch_text(session, url, timeout=cfg.request_timeout, retries=cfg.retries)
        except FetchError as exc:
            state.record_failure(app_id)
            if cfg.on_fetch_error == "abort":
                if self._abort is None:
                    self._abort = exc
            else:
                logger.warning("Skipping app %s after fetch failure", app_id)
            return

        try:
            page = self.adapter.parse(app_id, html)
        except Exception as exc:  # a broken page must not stop the crawl
            logger.warning("Adapter %s failed on app %s: %r", getattr(self.adapter, "name", self.adapter), app_id, exc)
            state.record_skip(app_id)
            return

        price = normalize_price(page.purchase_options)
        if not page.name:
            logger.warning("App %s has no name element; skipping", app_id)
            state.record_skip(app_id)
        elif price is None:
            logger.info("App %s has no purchase options; skipping", app_id)
            state.record_skip(app_id)
        else:
            state.record_success(ProductRecord(app_id=app_id, name=page.name, tags=page.tags, price=price))
            logger.info("Crawled app %s %r at %.2f (%d collected)", app_id, page.name, price, state.size())

        # Links are followed even from skipped pages.
        queued = state.enqueue_discovered(page.links)
        logger.debug("App %s linked %d new app(s)", app_id, queued)
