"""Background refresh of the featured content cache."""

import asyncio
import logging
import time
from typing import Optional

from content_curator.core import RefreshResult
from content_curator.use_cases import CacheOrchestrator, ContentAggregator

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Keep the cache warm by re-aggregating on a fixed interval."""

    def __init__(self, aggregator: ContentAggregator, orchestrator: CacheOrchestrator) -> None:
        self.aggregator = aggregator
        self.orchestrator = orchestrator
        self._lock = asyncio.Lock()
        self._timer: Optional[asyncio.Task] = None
        self._passes: set[asyncio.Task] = set()
        self._last_result: Optional[RefreshResult] = None

    @property
    def is_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def last_result(self) -> Optional[RefreshResult]:
        return self._last_result

    def start(self, interval_seconds: float = 3600, run_on_start: bool = False) -> None:
        """Start ticking every interval_seconds. Must be called from a running event loop."""
        if self.is_running:
            logger.warning("Refresh scheduler already running")
            return

        logger.info("Refresh scheduler started (every %ss)", interval_seconds)
        self._timer = asyncio.create_task(self._tick_loop(interval_seconds, run_on_start))

    async def stop(self) -> None:
        """Cancel the timer and wait for an in-flight pass to finish."""
        if self._timer is not None:
            self._timer.cancel()
            try:
                await self._timer
            except asyncio.CancelledError:
                pass
            self._timer = None

        if self._passes:
            await asyncio.gather(*self._passes, return_exceptions=True)

        logger.info("Refresh scheduler stopped")

    async def run_once(self) -> RefreshResult:
        """
        Aggregate and store one document.

        Returns immediately with skipped=True when another pass is running.
        Failures are reported in the result, never raised.
        """
        if self._lock.locked():
            logger.info("Refresh already in progress, skipping")
            return RefreshResult(success=False, skipped=True)

        async with self._lock:
            started = time.monotonic()
            # Invalidation during the pass makes its document stale
            generation = self.orchestrator.generation
            try:
                document = await self.aggregator.aggregate()
                stored = await self.orchestrator.store(document, generation=generation)
                if stored:
                    error = None
                elif self.orchestrator.generation != generation:
                    error = "cache invalidated during refresh"
                else:
                    error = "cache write failed"
                result = RefreshResult(
                    success=stored,
                    source=document.source,
                    item_count=sum(len(c.items) for c in document.categories),
                    duration_seconds=time.monotonic() - started,
                    error=error,
                )
            except Exception as e:
                logger.exception("Refresh pass failed")
                result = RefreshResult(
                    success=False,
                    duration_seconds=time.monotonic() - started,
                    error=f"{type(e).__name__}: {e}",
                )

        if result.success:
            logger.info(
                "Refresh complete: %d items from %s in %.2fs",
                result.item_count, result.source.value, result.duration_seconds,
            )
        self._last_result = result
        return result

    async def _tick_loop(self, interval_seconds: float, run_on_start: bool) -> None:
        if run_on_start:
            self._launch_pass()

        while True:
            await asyncio.sleep(interval_seconds)
            self._launch_pass()

    def _launch_pass(self) -> None:
        # A slow pass must not delay the next tick; overlap is handled in run_once
        task = asyncio.create_task(self.run_once())
        self._passes.add(task)
        task.add_done_callback(self._passes.discard)
