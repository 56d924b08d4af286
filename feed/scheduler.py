"""Refresh scheduler: runs the fetcher on a timer and on demand, owns view-state transitions."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from feed import engine
from feed.config import DEFAULT_REFRESH_INTERVAL
from feed.errors import FetchError
from feed.fetcher import IncidentSource
from feed.models import (
    Category,
    Error,
    FeedSnapshot,
    IncidentRecord,
    Loading,
    Success,
    last_snapshot,
)
from feed.store import FeedStore

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Failed to load crime data."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RefreshScheduler:
    """Drives an incident source and writes results into a FeedStore.

    Every fetch is tagged with a sequence number when it is requested. A
    completion older than the last applied one is dropped, so responses that
    arrive out of order never overwrite newer data.
    """

    def __init__(
        self,
        source: IncidentSource,
        store: FeedStore,
        *,
        interval: float = DEFAULT_REFRESH_INTERVAL,
        refetch_on_filter_change: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if interval <= 0:
            raise ValueError("refresh interval must be positive")
        self._source = source
        self._store = store
        self._interval = interval
        self._refetch_on_filter_change = refetch_on_filter_change
        self._clock = clock

        self._active = False
        self._timer: asyncio.Task | None = None
        self._in_flight: set[asyncio.Task] = set()
        self._requested_seq = 0
        self._applied_seq = 0

    @property
    def active(self) -> bool:
        return self._active

    @property
    def store(self) -> FeedStore:
        return self._store

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    # ── Lifecycle ─────────────────────────────────────────────────────

    def start(self) -> asyncio.Task:
        """Activate the timer and issue the initial fetch. Returns the fetch task."""
        if self._active:
            raise RuntimeError("scheduler already started")
        self._active = True
        self._restart_timer()
        logger.info("feed scheduler started (every %.0fs)", self._interval)
        return self.request_refresh("mount")

    async def stop(self) -> None:
        """Cancel the timer and any in-flight fetch, then wait for them to unwind."""
        self._active = False
        tasks = list(self._in_flight)
        if self._timer is not None:
            tasks.append(self._timer)
            self._timer = None
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._in_flight.clear()
        logger.info("feed scheduler stopped")

    def _restart_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._tick())

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self.request_refresh("timer")

    # ── Commands ──────────────────────────────────────────────────────

    def request_refresh(self, reason: str = "manual") -> asyncio.Task:
        if not self._active:
            raise RuntimeError("scheduler is not running")
        self._requested_seq += 1
        seq = self._requested_seq

        self._store.set_view_state(Loading(previous=last_snapshot(self._store.view_state)))

        task = asyncio.get_running_loop().create_task(self._fetch(seq, reason))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    def request_manual_refresh(self) -> asyncio.Task:
        return self.request_refresh("manual")

    def toggle_category(self, category: Category | str) -> asyncio.Task | None:
        """Flip one category. Refetches, or re-filters cached records, depending on mode."""
        category = Category(category)
        self._store.set_filter_state(self._store.filter_state.toggled(category))
        logger.debug(
            "filter %s -> %s", category.value, self._store.filter_state.enabled[category],
        )

        if not self._refetch_on_filter_change or not self._active:
            self._refilter()
            return None
        # a filter change re-arms the timer period as well as refetching
        self._restart_timer()
        return self.request_refresh("filter")

    def _refilter(self) -> None:
        state = self._store.view_state
        current = last_snapshot(state)
        if current is None:
            return
        snapshot = engine.apply(
            self._store.records,
            self._store.filter_state,
            last_updated=current.last_updated,
        )
        if isinstance(state, Success):
            self._store.set_view_state(Success(snapshot=snapshot))
        elif isinstance(state, Loading):
            self._store.set_view_state(Loading(previous=snapshot))
        elif isinstance(state, Error):
            self._store.set_view_state(Error(message=state.message, previous=snapshot))

    # ── Fetch ─────────────────────────────────────────────────────────

    async def _fetch(self, seq: int, reason: str) -> None:
        logger.debug("fetch #%d started (%s)", seq, reason)
        records: list[IncidentRecord] | None = None
        message: str | None = None
        try:
            records = await self._source.fetch()
        except FetchError as exc:
            logger.warning("fetch #%d failed: %s", seq, exc.message)
            message = exc.message
        except Exception:
            logger.exception("fetch #%d raised unexpectedly", seq)
            message = GENERIC_FAILURE

        if seq < self._applied_seq:
            logger.info("discarding stale fetch #%d (already applied #%d)", seq, self._applied_seq)
            return
        self._applied_seq = seq

        if message is not None:
            previous = last_snapshot(self._store.view_state)
            self._store.set_view_state(Error(message=message, previous=previous))
            return

        self._store.set_records(records)
        snapshot: FeedSnapshot = engine.apply(
            records, self._store.filter_state, last_updated=self._clock(),
        )
        self._store.set_view_state(Success(snapshot=snapshot))
        logger.info(
            "fetch #%d applied: %d incidents, %d visible", seq, len(records), snapshot.total,
        )

