"""Shared read/command layer for API and MCP server."""

from __future__ import annotations

from feed.models import Category, Error, FeedSnapshot, last_snapshot
from feed.session import FeedSession


def _snapshot(session: FeedSession) -> FeedSnapshot | None:
    return last_snapshot(session.view_state)


# ── Filter options ────────────────────────────────────────────────────

def get_filter_options(session: FeedSession) -> dict:
    """Categories and whether each one is currently shown."""
    enabled = session.store.filter_state.enabled
    return {
        "categories": [c.value for c in Category],
        "enabled": {c.value: enabled[c] for c in Category},
    }


# ── Incidents ─────────────────────────────────────────────────────────

def get_incidents(session: FeedSession) -> list[dict]:
    snapshot = _snapshot(session)
    if snapshot is None:
        return []
    return [
        {
            "id": r.id,
            "category": r.category,
            "description": r.description,
            "occurred_at": r.occurred_at,
            "lat": r.location.latitude,
            "lng": r.location.longitude,
        }
        for r in snapshot.visible_records
    ]


# ── Counts ────────────────────────────────────────────────────────────

def get_counts(session: FeedSession) -> list[dict]:
    snapshot = _snapshot(session)
    enabled = session.store.filter_state.enabled
    return [
        {
            "category": c.value,
            "count": snapshot.counts_by_category[c] if snapshot else 0,
            "enabled": enabled[c],
        }
        for c in Category
    ]


# ── Feed view ─────────────────────────────────────────────────────────

def get_feed(session: FeedSession) -> dict:
    state = session.view_state
    snapshot = last_snapshot(state)
    return {
        "status": state.status,
        "error": state.message if isinstance(state, Error) else None,
        "last_updated": snapshot.last_updated if snapshot else None,
        "total": snapshot.total if snapshot else 0,
        "consecutive_failures": session.consecutive_failures,
        "counts": get_counts(session),
        "incidents": get_incidents(session),
        "filters": get_filter_options(session),
    }


# ── Commands ──────────────────────────────────────────────────────────

async def toggle_category(session: FeedSession, category: str) -> dict:
    """Flip a category filter and return the feed once the change has settled."""
    await session.toggle(category)
    return get_feed(session)


async def refresh(session: FeedSession) -> dict:
    await session.refresh()
    return get_feed(session)
