"""Refresh orchestration: fetch every source, then merge and notify."""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Protocol, Sequence

from plus_catalogue.db.store import MERGED_FILENAME, CatalogueStore, parse_snapshot
from plus_catalogue.ingest.models import Source
from plus_catalogue.logic.merge import build_merged_snapshot
from plus_catalogue.utils.dates import format_timestamp, now_utc

logger = logging.getLogger(__name__)

# Plain callables or coroutine functions; coroutines are awaited.
RefreshListener = Callable[[Mapping[str, str]], Any]


class Fetcher(Protocol):
    async def fetch_raw(self, url: str) -> str: ...


@dataclass(slots=True)
class RefreshResult:
    in_progress: bool = False
    any_failed: bool = False
    statuses: dict[str, str] = field(default_factory=dict)
    error: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"anyFailed": self.any_failed, "statuses": self.statuses}
        if self.error is not None:
            payload["error"] = self.error
        return payload


def _succeeded(name: str) -> str:
    return f"{name} refreshed on {format_timestamp(now_utc())} successfully"


class RefreshCoordinator:
    """Runs at most one refresh at a time.

    Every source is fetched concurrently and written only if its fetch
    succeeded and the body parses as a grouped snapshot. The merged snapshot is regenerated, and listeners notified,
    only when all sources succeeded in the same run.
    """

    def __init__(self, store: CatalogueStore, sources: Sequence[Source], client: Fetcher) -> None:
        self.store = store
        self.sources = list(sources)
        self.client = client
        self._refreshing = False
        self._listeners: list[RefreshListener] = []

    @property
    def is_refreshing(self) -> bool:
        return self._refreshing

    def subscribe(self, listener: RefreshListener) -> None:
        self._listeners.append(listener)

    async def refresh_once(self) -> RefreshResult:
        if self._refreshing:
            logger.info("Refresh requested while another is running; ignoring")
            return RefreshResult(in_progress=True)
        self._refreshing = True
        result = RefreshResult()
        try:
            outcomes = await asyncio.gather(
                *(self._refresh_source(source) for source in self.sources),
                return_exceptions=True,
            )
            failed = 0
            for source, outcome in zip(self.sources, outcomes):
                if isinstance(outcome, BaseException):
                    failed += 1
                    result.statuses[source.filename] = f"{source.filename} refresh failed: {outcome}"
                    logger.warning("Refresh of %s failed: %s", source.filename, outcome)
                else:
                    result.statuses[source.filename] = outcome
            result.any_failed = failed > 0
            if result.any_failed:
                logger.warning("Skipping merge; %s of %s sources failed", failed, len(self.sources))
                return result
            await asyncio.get_running_loop().run_in_executor(None, self._write_merged)
            result.statuses[MERGED_FILENAME] = _succeeded(MERGED_FILENAME)
            logger.info("Refresh complete; %s regenerated", MERGED_FILENAME)
            await self._notify(result.statuses)
            return result
        except Exception as exc:
            logger.exception("Refresh failed")
            result.error = str(exc) or exc.__class__.__name__
            return result
        finally:
            self._refreshing = False

    async def _refresh_source(self, source: Source) -> str:
        raw = await self.client.fetch_raw(source.url)
        parse_snapshot(source.filename, raw)
        await asyncio.get_running_loop().run_in_executor(None, self.store.write, source.filename, raw)
        return _succeeded(source.filename)

    def _write_merged(self) -> None:
        snapshots = [self.store.read(source.filename) for source in self.sources]
        self.store.write_merged(build_merged_snapshot(snapshots))

    async def _notify(self, statuses: Mapping[str, str]) -> None:
        for listener in self._listeners:
            try:
                outcome = listener(dict(statuses))
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                logger.exception("Refresh listener %r failed", listener)
