"""Background staleness check that triggers refreshes."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Sequence

import pendulum

from plus_catalogue.db.store import CatalogueStore
from plus_catalogue.ingest.models import Source
from plus_catalogue.jobs.refresh import RefreshCoordinator, RefreshResult
from plus_catalogue.utils.dates import is_older_than, now_utc

logger = logging.getLogger(__name__)


def stale_sources(
    store: CatalogueStore,
    sources: Sequence[Source],
    stale_after: timedelta,
    *,
    now: pendulum.DateTime | None = None,
) -> list[str]:
    reference = now or now_utc()
    stale = []
    for source in sources:
        modified = store.last_modified(source.filename)
        if modified is None or is_older_than(modified, stale_after, now=reference):
            stale.append(source.filename)
    return stale


def needs_refresh(
    store: CatalogueStore,
    sources: Sequence[Source],
    stale_after: timedelta,
    *,
    now: pendulum.DateTime | None = None,
) -> bool:
    return bool(stale_sources(store, sources, stale_after, now=now))


class ScheduleLoop:
    """Checks on start, then once per ``interval``.

    Refreshes go through the coordinator, so a scheduled tick that lands
    during an admin refresh is a no-op.
    """

    def __init__(
        self,
        coordinator: RefreshCoordinator,
        *,
        stale_after: timedelta = timedelta(days=3),
        interval: timedelta = timedelta(days=1),
    ) -> None:
        self.coordinator = coordinator
        self.stale_after = stale_after
        self.interval = interval
        self._task: asyncio.Task | None = None
        self._stop: asyncio.Event | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def check_once(self) -> RefreshResult | None:
        stale = stale_sources(self.coordinator.store, self.coordinator.sources, self.stale_after)
        if not stale:
            logger.info("Snapshots are fresh; nothing to refresh")
            return None
        logger.info("Stale or missing snapshots: %s", ", ".join(stale))
        return await self.coordinator.refresh_once()

    def start(self) -> asyncio.Task:
        if self.running:
            return self._task
        self._stop = asyncio.Event()
        self._task = asyncio.create_task(self._run(self._stop))
        return self._task

    async def stop(self) -> None:
        if self._stop:
            self._stop.set()
        if self._task:
            await self._task
        self._task = None
        self._stop = None

    async def _run(self, stop: asyncio.Event) -> None:
        logger.info(
            "Refresh scheduler started: interval=%s stale_after=%s",
            self.interval,
            self.stale_after,
        )
        while not stop.is_set():
            try:
                await self.check_once()
            except Exception:
                logger.exception("Scheduled refresh check failed")
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.interval.total_seconds())
            except asyncio.TimeoutError:
                continue
        logger.info("Refresh scheduler stopped")
