"""One mounted feed: source, store and scheduler sharing a lifetime."""

from __future__ import annotations

import logging

from feed.config import Settings
from feed.fetcher import HttpIncidentSource, IncidentSource, StaticIncidentSource
from feed.models import Category, Error, Success, ViewState
from feed.scheduler import RefreshScheduler
from feed.store import FeedStore

logger = logging.getLogger(__name__)


def build_source(settings: Settings) -> IncidentSource:
    if settings.source_url:
        return HttpIncidentSource(settings.source_url, timeout=settings.request_timeout)
    logger.info("FEED_SOURCE_URL not set, serving demo incidents")
    return StaticIncidentSource()


class FeedSession:
    def __init__(
        self,
        source: IncidentSource,
        *,
        interval: float,
        refetch_on_filter_change: bool = True,
        store: FeedStore | None = None,
    ) -> None:
        self.source = source
        self.store = store or FeedStore()
        self.consecutive_failures = 0
        self._last_status = self.store.view_state.status
        self.store.subscribe(self._track_failures)
        self.scheduler = RefreshScheduler(
            source,
            self.store,
            interval=interval,
            refetch_on_filter_change=refetch_on_filter_change,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> FeedSession:
        return cls(
            build_source(settings),
            interval=settings.refresh_interval,
            refetch_on_filter_change=settings.refetch_on_filter_change,
        )

    def _track_failures(self, state: ViewState) -> None:
        # a re-filter while in error re-emits Error, which is not a new failure
        if isinstance(state, Error) and self._last_status != "error":
            self.consecutive_failures += 1
        elif isinstance(state, Success):
            self.consecutive_failures = 0
        self._last_status = state.status

    @property
    def view_state(self) -> ViewState:
        return self.store.view_state

    async def start(self) -> ViewState:
        """Mount the feed and wait for the initial fetch to settle."""
        await self.scheduler.start()
        return self.store.view_state

    async def stop(self) -> None:
        await self.scheduler.stop()
        await self.source.aclose()

    async def refresh(self) -> ViewState:
        await self.scheduler.request_manual_refresh()
        return self.store.view_state

    async def toggle(self, category: Category | str) -> ViewState:
        task = self.scheduler.toggle_category(category)
        if task is not None:
            await task
        return self.store.view_state
