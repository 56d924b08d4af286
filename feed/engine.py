"""Filter & aggregate: raw incidents + filter state -> feed snapshot."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from feed.models import Category, FeedSnapshot, FilterState, IncidentRecord


def apply(
    records: Iterable[IncidentRecord],
    filter_state: FilterState,
    *,
    last_updated: datetime | None = None,
) -> FeedSnapshot:
    """Keep enabled-category records in source order and count them per category.

    Counts cover the visible records only, so a disabled category reads zero.
    Records with a category outside the enumeration are never visible.
    """
    visible = tuple(r for r in records if filter_state.is_enabled(r.category))

    counts = {category: 0 for category in Category}
    for record in visible:
        counts[Category(record.category)] += 1

    return FeedSnapshot(
        visible_records=visible,
        counts_by_category=counts,
        last_updated=last_updated,
    )
