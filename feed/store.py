"""Reactive state container shared by the scheduler and the presentation layer."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from feed.models import FilterState, Idle, IncidentRecord, ViewState

logger = logging.getLogger(__name__)

Listener = Callable[[ViewState], None]


class FeedStore:
    """Holds filter state, view state and the last fetched records.

    The scheduler is the only writer. Readers either poll the properties or
    subscribe to view-state changes.
    """

    def __init__(self, filter_state: FilterState | None = None) -> None:
        self._filter_state = filter_state or FilterState()
        self._view_state: ViewState = Idle()
        self._records: tuple[IncidentRecord, ...] = ()
        self._listeners: list[Listener] = []

    @property
    def filter_state(self) -> FilterState:
        return self._filter_state

    @property
    def view_state(self) -> ViewState:
        return self._view_state

    @property
    def records(self) -> tuple[IncidentRecord, ...]:
        return self._records

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` on every view-state change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_filter_state(self, filter_state: FilterState) -> None:
        self._filter_state = filter_state

    def set_records(self, records: Iterable[IncidentRecord]) -> None:
        self._records = tuple(records)

    def set_view_state(self, state: ViewState) -> None:
        self._view_state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("view-state listener %r failed", listener)
